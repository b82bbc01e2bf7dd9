from datetime import datetime
from pydantic import BaseModel

from thrifthub.schemas.product.product import ProductSummary


class WishlistCreate(BaseModel):
    product_id: int


class WishlistItemRead(BaseModel):
    id: int
    product_id: int
    product: ProductSummary
    created_at: datetime
