from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, field_validator

from thrifthub.enums.payment_method import PaymentMethod
from thrifthub.enums.payment_status import PaymentStatus
from thrifthub.helpers.payment.payday_flex import validate_payday_date


class PaymentRead(BaseModel):
    id: int
    order_id: int
    method: PaymentMethod
    status: PaymentStatus
    amount: float
    paid_amount: float
    remaining_amount: float
    installment_plan: bool
    first_amount: Optional[float] = None
    second_amount: Optional[float] = None
    payday_date: Optional[date] = None
    transaction_ref: Optional[str] = None
    paid_at: Optional[datetime] = None
    created_at: datetime


class MobileMoneyInitialize(BaseModel):
    order_id: int


class PaydayFlexInitialize(BaseModel):
    order_id: int
    payday_date: date

    @field_validator("payday_date")
    @classmethod
    def within_payday_window(cls, value: date) -> date:
        return validate_payday_date(value)


class InstallmentSchedule(BaseModel):
    first_amount: float
    second_amount: float
    payday_date: date


class PaymentInitialized(BaseModel):
    authorization_url: str
    access_code: Optional[str] = None
    reference: str
    payment_id: int
    amount: float
    schedule: Optional[InstallmentSchedule] = None


class ChargeSecondResult(BaseModel):
    total: int = 0
    successful: int = 0
    failed: int = 0
    errors: List[str] = []
