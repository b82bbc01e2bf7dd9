from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import Column, Enum
from sqlmodel import Field, SQLModel

from thrifthub.enums.user_role import UserRole


class User(SQLModel, table=True):
    __tablename__ = "tb_user"

    id: Optional[int] = Field(default=None, primary_key=True)

    email: str = Field(index=True, unique=True)
    password_hash: str
    first_name: str
    last_name: str
    phone: Optional[str] = Field(default=None)

    role: UserRole = Field(default=UserRole.STUDENT, sa_column=Column(Enum(UserRole), nullable=False))

    is_active: bool = Field(default=True)
    last_login: Optional[datetime] = None

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
