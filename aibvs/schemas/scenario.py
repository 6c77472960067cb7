"""Scenario schemas."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from aibvs.models.scenario import Priority, Scenario
from aibvs.models.system import SystemStatus


class ScenarioCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = None
    source_system_id: int | None = None
    target_system_id: int | None = None
    steps: list[str]
    estimated_time: int | None = Field(default=None, ge=0)
    priority: Priority


class ScenarioRead(BaseModel):
    id: int
    name: str
    description: str | None
    source_system_id: int | None
    target_system_id: int | None
    steps: list[str]
    estimated_time: int | None
    priority: Priority
    created_at: datetime
    source_system_name: str | None = None
    target_system_name: str | None = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_scenario(cls, scenario: Scenario) -> "ScenarioRead":
        return cls.model_validate(scenario).model_copy(
            update={
                "source_system_name": scenario.source_system.name if scenario.source_system else None,
                "target_system_name": scenario.target_system.name if scenario.target_system else None,
            }
        )


class ScenarioDetail(ScenarioRead):
    source_system_status: SystemStatus | None = None
    target_system_status: SystemStatus | None = None

    @classmethod
    def from_scenario(cls, scenario: Scenario) -> "ScenarioDetail":
        base = super().from_scenario(scenario)
        return base.model_copy(
            update={
                "source_system_status": scenario.source_system.status if scenario.source_system else None,
                "target_system_status": scenario.target_system.status if scenario.target_system else None,
            }
        )


class ScenarioExecute(BaseModel):
    notes: str | None = None


class ExecutionResult(BaseModel):
    message: str = "Scenario executed successfully"
    scenario: str
    incident_id: int
    estimated_time: int | None
