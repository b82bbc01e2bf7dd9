from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional, TYPE_CHECKING
from sqlalchemy import Column, Enum
from sqlmodel import Field, Relationship, SQLModel

from thrifthub.enums.order_status import OrderStatus
from thrifthub.helpers.order.order_number import generate_order_number

if TYPE_CHECKING:
    from thrifthub.models.order.order_item import OrderItem


class Order(SQLModel, table=True):
    __tablename__ = "tb_order"

    id: Optional[int] = Field(default=None, primary_key=True)

    user_id: int = Field(foreign_key="tb_user.id", index=True)
    order_number: str = Field(default_factory=generate_order_number, index=True, unique=True)

    status: OrderStatus = Field(default=OrderStatus.PENDING, sa_column=Column(Enum(OrderStatus), nullable=False, index=True))

    subtotal: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2)
    delivery_fee: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2)
    total_amount: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2)

    delivery_address: str
    campus_zone: str = Field(index=True)

    items: List["OrderItem"] = Relationship(back_populates="order")

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = None
