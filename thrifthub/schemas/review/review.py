from datetime import datetime
from typing import Dict, List, Optional
from pydantic import BaseModel, Field


class ReviewCreate(BaseModel):
    product_id: int
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = Field(default=None, max_length=1000)


class ReviewRead(BaseModel):
    id: int
    product_id: int
    user_id: int
    user_name: str
    rating: int
    comment: Optional[str] = None
    verified_purchase: bool
    created_at: datetime


class ProductReviews(BaseModel):
    reviews: List[ReviewRead]
    average_rating: float
    total_reviews: int
    distribution: Dict[int, int]
