"""Aggregate count schemas shared by the statistics endpoints."""
from datetime import date

from pydantic import BaseModel

from aibvs.models.incident import IncidentStatus
from aibvs.models.scenario import Priority


class SeverityCount(BaseModel):
    severity: Priority
    count: int


class StatusCount(BaseModel):
    status: IncidentStatus
    count: int


class SystemCount(BaseModel):
    system_id: int
    name: str
    count: int


class DailyCount(BaseModel):
    date: date
    count: int
