"""User schemas."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from aibvs.models.user import UserRole


class UserCreate(BaseModel):
    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1)
    full_name: str = Field(min_length=1, max_length=255)
    email: EmailStr | None = None
    role: UserRole


class UserUpdate(BaseModel):
    full_name: str | None = Field(default=None, max_length=255)
    email: EmailStr | None = None
    password: str | None = None


class UserRead(BaseModel):
    id: int
    username: str
    full_name: str
    email: str | None = None
    role: UserRole
    created_at: datetime | None = None
    last_login: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
