from typing import Optional
from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class ZoneAdjacency(SQLModel, table=True):
    """Unordered pair of zones whose riders can cover for each other."""
    __tablename__ = "tb_zone_adjacency"
    __table_args__ = (UniqueConstraint("zone_id", "adjacent_zone_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    zone_id: int = Field(foreign_key="tb_campus_zone.id", index=True)
    adjacent_zone_id: int = Field(foreign_key="tb_campus_zone.id", index=True)
