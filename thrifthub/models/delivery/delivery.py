from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import Column, Enum
from sqlmodel import Field, SQLModel

from thrifthub.enums.delivery_status import DeliveryStatus


class Delivery(SQLModel, table=True):
    __tablename__ = "tb_delivery"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="tb_order.id", unique=True, index=True)
    rider_id: Optional[int] = Field(default=None, foreign_key="tb_rider.id", index=True)
    zone_id: int = Field(foreign_key="tb_campus_zone.id", index=True)

    status: DeliveryStatus = Field(default=DeliveryStatus.PENDING, sa_column=Column(Enum(DeliveryStatus), nullable=False, index=True))
    delivery_address: str

    assigned_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = None
