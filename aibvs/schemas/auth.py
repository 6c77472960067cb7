"""Authentication schemas."""
from pydantic import BaseModel, Field

from .user import UserRead


class LoginRequest(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserRead


class RegisterResponse(BaseModel):
    message: str
    user: UserRead
