from typing import List
from pydantic import BaseModel, Field

from thrifthub.schemas.product.product import ProductSummary


class CartItemCreate(BaseModel):
    product_id: int
    quantity: int = Field(default=1, ge=1)


class CartItemUpdate(BaseModel):
    quantity: int = Field(ge=1)


class CartItemRead(BaseModel):
    id: int
    product_id: int
    quantity: int
    subtotal: float
    product: ProductSummary

    class Config:
        from_attributes = True


class CartRead(BaseModel):
    id: int
    items: List[CartItemRead] = Field(default_factory=list)
    total: float
    total_items: int

    class Config:
        from_attributes = True
