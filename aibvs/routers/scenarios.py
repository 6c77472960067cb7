"""Scenario endpoints."""
from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.orm import Session

from aibvs.db import get_db
from aibvs.schemas.scenario import ExecutionResult, ScenarioCreate, ScenarioDetail, ScenarioExecute, ScenarioRead
from aibvs.security import Identity, get_current_identity, require_admin
from aibvs.services import scenarios as scenario_service

router = APIRouter(prefix="/scenarios", tags=["scenarios"], dependencies=[Depends(get_current_identity)])


@router.get("", response_model=list[ScenarioRead])
def list_scenarios(db: Session = Depends(get_db)) -> list[ScenarioRead]:
    return scenario_service.list_scenarios(db)


@router.post(
    "",
    response_model=ScenarioDetail,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_scenario(
    payload: ScenarioCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> ScenarioDetail:
    scenario = scenario_service.create_scenario(db, payload, actor=identity)
    return scenario_service.get_scenario(db, scenario.id)


@router.get("/{scenario_id}", response_model=ScenarioDetail)
def get_scenario(scenario_id: int, db: Session = Depends(get_db)) -> ScenarioDetail:
    return scenario_service.get_scenario(db, scenario_id)


@router.post("/{scenario_id}/execute", response_model=ExecutionResult)
def execute_scenario(
    scenario_id: int,
    payload: ScenarioExecute | None = Body(default=None),
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> ExecutionResult:
    notes = payload.notes if payload else None
    return scenario_service.execute_scenario(db, scenario_id, notes=notes, actor=identity)
