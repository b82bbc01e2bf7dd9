from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from thrifthub.enums.delivery_status import DeliveryStatus
from thrifthub.enums.order_status import OrderStatus
from thrifthub.enums.payment_method import PaymentMethod
from thrifthub.enums.payment_status import PaymentStatus
from thrifthub.schemas.delivery.delivery import DeliveryRead
from thrifthub.schemas.payment.payment import PaymentRead


class OrderCreate(BaseModel):
    delivery_address: str = Field(min_length=5, max_length=500)
    campus_zone: str = Field(min_length=1)
    payment_method: PaymentMethod


class OrderItemRead(BaseModel):
    id: int
    product_id: int
    title: Optional[str] = None
    image_url: Optional[str] = None
    quantity: int
    unit_price: float
    item_total: float


class OrderSummary(BaseModel):
    id: int
    order_number: str
    status: OrderStatus
    subtotal: float
    delivery_fee: float
    total_amount: float
    campus_zone: str
    items_count: int
    payment_status: Optional[PaymentStatus] = None
    delivery_status: Optional[DeliveryStatus] = None
    created_at: datetime


class OrderRead(BaseModel):
    id: int
    order_number: str
    user_id: int
    status: OrderStatus
    subtotal: float
    delivery_fee: float
    total_amount: float
    delivery_address: str
    campus_zone: str
    items: List[OrderItemRead] = Field(default_factory=list)
    payment: Optional[PaymentRead] = None
    delivery: Optional[DeliveryRead] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class StatusUpdateRequest(BaseModel):
    status: OrderStatus
