"""System schemas."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from aibvs.models.system import SystemStatus

from .stats import DailyCount, SeverityCount


class SystemCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    type: str = Field(min_length=1, max_length=50)
    status: SystemStatus = SystemStatus.inactive
    location: str | None = None
    frequency: str | None = None
    description: str | None = None


class SystemUpdate(BaseModel):
    # Checked by the service so an unknown value reports the allowed set.
    status: str | None = None
    location: str | None = None
    frequency: str | None = None
    description: str | None = None


class SystemRead(BaseModel):
    id: int
    name: str
    type: str
    status: SystemStatus
    location: str | None
    frequency: str | None
    description: str | None
    last_check: datetime
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SystemSwitch(BaseModel):
    target_system_id: int | None = Field(default=None, alias="targetSystemId")
    reason: str | None = None

    model_config = ConfigDict(populate_by_name=True)


class SwitchResult(BaseModel):
    message: str = "System switch completed"
    source: SystemRead
    target: SystemRead
    incident_id: int


class SystemStats(BaseModel):
    incidents: list[SeverityCount]
    logs: list[DailyCount]
