"""Audit log schemas."""
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AuditLogCreate(BaseModel):
    action: str = Field(min_length=1, max_length=100)
    entity_type: str | None = None
    entity_id: int | None = None
    details: Any = None
    ip_address: str | None = None


class AuditLogCreated(BaseModel):
    id: int
    message: str = "Log created"


class AuditLogRead(BaseModel):
    id: int
    action: str
    entity_type: str | None
    entity_id: int | None
    user_id: int | None
    details: Any = None
    ip_address: str | None
    created_at: datetime
    username: str | None = None
    full_name: str | None = None

    model_config = ConfigDict(from_attributes=True)
