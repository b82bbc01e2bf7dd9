from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, TYPE_CHECKING
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from thrifthub.models.campus.campus import Campus


class CampusZone(SQLModel, table=True):
    __tablename__ = "tb_campus_zone"

    id: Optional[int] = Field(default=None, primary_key=True)
    campus_id: int = Field(foreign_key="tb_campus.id", index=True)
    campus: Optional["Campus"] = Relationship(back_populates="zones")

    code: str = Field(index=True, unique=True)
    name: str
    description: Optional[str] = None
    delivery_fee: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = None
