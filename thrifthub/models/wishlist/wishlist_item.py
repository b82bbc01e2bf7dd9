from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class WishlistItem(SQLModel, table=True):
    __tablename__ = "tb_wishlist_item"
    __table_args__ = (UniqueConstraint("user_id", "product_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="tb_user.id", index=True)
    product_id: int = Field(foreign_key="tb_product.id")

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
