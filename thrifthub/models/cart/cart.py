from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional, TYPE_CHECKING
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from thrifthub.models.cart.cart_item import CartItem


class Cart(SQLModel, table=True):
    __tablename__ = "tb_cart"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="tb_user.id", unique=True, index=True)

    items: List["CartItem"] = Relationship(back_populates="cart")

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = None

    @property
    def total(self) -> Decimal:
        return sum((item.subtotal for item in self.items or []), Decimal("0.00"))

    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.items or [])
