from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional
from sqlalchemy import Column, Enum, JSON
from sqlmodel import Field, SQLModel

from thrifthub.enums.product_category import ProductCategory
from thrifthub.enums.product_condition import ProductCondition


class Product(SQLModel, table=True):
    __tablename__ = "tb_product"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(index=True)
    description: str
    category: ProductCategory = Field(sa_column=Column(Enum(ProductCategory), nullable=False, index=True))
    size: str
    color: str
    brand: Optional[str] = None
    condition: ProductCondition = Field(sa_column=Column(Enum(ProductCondition), nullable=False))
    price: Decimal = Field(max_digits=10, decimal_places=2)
    stock: int = Field(default=0, ge=0)

    # [{"image_url": str, "is_primary": bool}]
    images: List[Dict] = Field(default_factory=list, sa_column=Column(JSON))

    rating: float = Field(default=0.0)
    reviews_count: int = Field(default=0)
    is_active: bool = Field(default=True, index=True)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = Field(default=None)

    @property
    def primary_image(self) -> Optional[str]:
        if not self.images:
            return None
        for image in self.images:
            if image.get("is_primary"):
                return image.get("image_url")
        return self.images[0].get("image_url")
