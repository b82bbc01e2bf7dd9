from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import Column, Text
from sqlmodel import Field, SQLModel


class ProductEmbedding(SQLModel, table=True):
    __tablename__ = "tb_product_embedding"

    id: Optional[int] = Field(default=None, primary_key=True)
    product_id: int = Field(foreign_key="tb_product.id", unique=True, index=True)
    # Comma separated floats
    embedding: str = Field(sa_column=Column(Text, nullable=False))

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
