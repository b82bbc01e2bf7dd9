from typing import Optional
from pydantic import BaseModel


class ZoneRead(BaseModel):
    id: int
    code: str
    name: str
    description: Optional[str] = None
    delivery_fee: float

    class Config:
        from_attributes = True
