from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, TYPE_CHECKING
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from thrifthub.models.cart.cart import Cart
    from thrifthub.models.product.product import Product


class CartItem(SQLModel, table=True):
    __tablename__ = "tb_cart_item"

    id: Optional[int] = Field(default=None, primary_key=True)
    cart_id: int = Field(foreign_key="tb_cart.id", index=True)
    product_id: int = Field(foreign_key="tb_product.id")
    quantity: int = Field(default=1, ge=1)

    cart: Optional["Cart"] = Relationship(back_populates="items")
    product: Optional["Product"] = Relationship()

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = None

    @property
    def subtotal(self) -> Decimal:
        if not self.product:
            return Decimal("0.00")
        return Decimal(self.product.price) * self.quantity
