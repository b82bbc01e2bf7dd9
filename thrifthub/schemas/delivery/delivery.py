from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, field_validator

from thrifthub.enums.delivery_status import DeliveryStatus
from thrifthub.enums.order_status import OrderStatus

RIDER_SETTABLE_STATUSES = {
    DeliveryStatus.PICKED_UP,
    DeliveryStatus.IN_TRANSIT,
    DeliveryStatus.DELIVERED,
    DeliveryStatus.FAILED,
}


class AssignRequest(BaseModel):
    order_id: int


class DeliveryStatusUpdate(BaseModel):
    status: DeliveryStatus

    @field_validator("status")
    @classmethod
    def rider_settable(cls, value: DeliveryStatus) -> DeliveryStatus:
        if value not in RIDER_SETTABLE_STATUSES:
            raise ValueError("Status must be one of picked_up, in_transit, delivered, failed")
        return value


class RiderInfo(BaseModel):
    id: int
    name: str
    phone: Optional[str] = None
    rating: float
    zone_code: Optional[str] = None
    zone_name: Optional[str] = None


class TimelineStage(BaseModel):
    status: str
    label: str
    state: str


class DeliveryRead(BaseModel):
    id: int
    order_id: int
    status: DeliveryStatus
    delivery_address: str
    rider_id: Optional[int] = None
    zone_id: int
    assigned_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    estimated_arrival: Optional[datetime] = None


class TrackingRead(BaseModel):
    delivery_id: int
    order_id: int
    order_number: str
    order_status: OrderStatus
    total_amount: float
    status: DeliveryStatus
    delivery_address: str
    rider: Optional[RiderInfo] = None
    assigned_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    estimated_arrival: Optional[datetime] = None
    timeline: List[TimelineStage] = []


class RiderDeliveryRead(DeliveryRead):
    order_number: str
    total_amount: float
    customer_name: str
    customer_phone: Optional[str] = None
