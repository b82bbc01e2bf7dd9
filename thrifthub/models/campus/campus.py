from datetime import datetime, timezone
from typing import List, Optional, TYPE_CHECKING
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from thrifthub.models.campus.campus_zone import CampusZone


class Campus(SQLModel, table=True):
    __tablename__ = "tb_campus"

    id: Optional[int] = Field(default=None, primary_key=True)
    code: str = Field(index=True, unique=True)
    name: str
    is_active: bool = Field(default=True)

    zones: List["CampusZone"] = Relationship(back_populates="campus")

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = None
