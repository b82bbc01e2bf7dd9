from typing import Optional
from pydantic import BaseModel

from thrifthub.schemas.product.product import ProductSummary


class StyleMatchRequest(BaseModel):
    image_url: str


class StyleMatchResult(BaseModel):
    product: ProductSummary
    similarity_score: float
    match_label: str
    category: Optional[str] = None
