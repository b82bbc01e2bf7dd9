from datetime import datetime, timezone
from typing import Optional
from sqlmodel import Field, SQLModel


class Rider(SQLModel, table=True):
    __tablename__ = "tb_rider"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="tb_user.id", unique=True, index=True)
    zone_id: int = Field(foreign_key="tb_campus_zone.id", index=True)

    is_available: bool = Field(default=True)
    total_deliveries: int = Field(default=0)
    rating: float = Field(default=0.0)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = None
