from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional
from sqlalchemy import Column, Enum
from sqlmodel import Field, SQLModel

from thrifthub.enums.payment_method import PaymentMethod
from thrifthub.enums.payment_status import PaymentStatus


class Payment(SQLModel, table=True):
    __tablename__ = "tb_payment"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="tb_order.id", unique=True, index=True)

    method: PaymentMethod = Field(sa_column=Column(Enum(PaymentMethod), nullable=False))
    status: PaymentStatus = Field(default=PaymentStatus.PENDING, sa_column=Column(Enum(PaymentStatus), nullable=False, index=True))

    amount: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2)
    paid_amount: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2)
    remaining_amount: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2)

    # Payday Flex schedule
    installment_plan: bool = Field(default=False)
    first_amount: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)
    second_amount: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)
    payday_date: Optional[date] = Field(default=None, index=True)

    # Gateway bookkeeping
    transaction_ref: Optional[str] = Field(default=None, index=True)
    # Reference of the last charge already added to paid_amount
    last_settled_ref: Optional[str] = Field(default=None)
    authorization_code: Optional[str] = Field(default=None)
    customer_code: Optional[str] = Field(default=None)

    paid_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = Field(default=None)
