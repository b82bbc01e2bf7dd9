from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field

from thrifthub.enums.product_category import ProductCategory
from thrifthub.enums.product_condition import ProductCondition


class ProductImage(BaseModel):
    image_url: str
    is_primary: bool = False


class ProductCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    category: ProductCategory
    size: str = Field(min_length=1)
    color: str = Field(min_length=1)
    brand: Optional[str] = None
    condition: ProductCondition
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    stock: int = Field(default=1, ge=0)
    images: List[ProductImage] = Field(default_factory=list)


class ProductUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[ProductCategory] = None
    size: Optional[str] = None
    color: Optional[str] = None
    brand: Optional[str] = None
    condition: Optional[ProductCondition] = None
    price: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    stock: Optional[int] = Field(default=None, ge=0)
    images: Optional[List[ProductImage]] = None
    is_active: Optional[bool] = None


class ProductRead(BaseModel):
    id: int
    title: str
    description: str
    category: ProductCategory
    size: str
    color: str
    brand: Optional[str] = None
    condition: ProductCondition
    price: float
    stock: int
    images: List[ProductImage] = Field(default_factory=list)
    rating: float
    reviews_count: int
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class ProductSummary(BaseModel):
    id: int
    title: str
    price: float
    size: str
    condition: ProductCondition
    stock: int
    primary_image: Optional[str] = None
    is_active: bool

    class Config:
        from_attributes = True
