"""Incident schemas."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from aibvs.models.incident import Incident, IncidentStatus
from aibvs.models.scenario import Priority

from .stats import DailyCount, SeverityCount, StatusCount, SystemCount


class IncidentCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    system_id: int | None = None
    severity: Priority


class IncidentUpdate(BaseModel):
    status: IncidentStatus | None = None
    description: str | None = None
    severity: Priority | None = None


class IncidentRead(BaseModel):
    id: int
    title: str
    description: str | None
    system_id: int | None
    severity: Priority
    status: IncidentStatus
    reported_by: int | None
    resolved_by: int | None
    created_at: datetime
    resolved_at: datetime | None
    system_name: str | None = None
    reported_by_username: str | None = None
    resolved_by_username: str | None = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_incident(cls, incident: Incident) -> "IncidentRead":
        return cls.model_validate(incident).model_copy(
            update={
                "system_name": incident.system.name if incident.system else None,
                "reported_by_username": incident.reporter.username if incident.reporter else None,
                "resolved_by_username": incident.resolver.username if incident.resolver else None,
            }
        )


class IncidentDetail(IncidentRead):
    system_type: str | None = None
    reported_by_name: str | None = None
    resolved_by_name: str | None = None

    @classmethod
    def from_incident(cls, incident: Incident) -> "IncidentDetail":
        base = super().from_incident(incident)
        return base.model_copy(
            update={
                "system_type": incident.system.type if incident.system else None,
                "reported_by_name": incident.reporter.full_name if incident.reporter else None,
                "resolved_by_name": incident.resolver.full_name if incident.resolver else None,
            }
        )


class IncidentStats(BaseModel):
    by_severity: list[SeverityCount]
    by_status: list[StatusCount]
    by_system: list[SystemCount]
    recent_trend: list[DailyCount]
