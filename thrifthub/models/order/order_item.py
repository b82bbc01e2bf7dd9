from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, TYPE_CHECKING
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from thrifthub.models.order.order import Order
    from thrifthub.models.product.product import Product


class OrderItem(SQLModel, table=True):
    __tablename__ = "tb_order_item"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="tb_order.id", index=True)
    product_id: int = Field(foreign_key="tb_product.id")
    quantity: int = Field(default=1)
    unit_price: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2)

    order: "Order" = Relationship(back_populates="items")
    product: Optional["Product"] = Relationship()

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def item_total(self) -> Decimal:
        return Decimal(self.unit_price) * self.quantity
