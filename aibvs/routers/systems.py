"""System registry endpoints."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from aibvs.db import get_db
from aibvs.models.system import System
from aibvs.schemas.system import SwitchResult, SystemCreate, SystemRead, SystemStats, SystemSwitch, SystemUpdate
from aibvs.security import Identity, get_current_identity, require_admin
from aibvs.services import systems as system_service

router = APIRouter(prefix="/systems", tags=["systems"], dependencies=[Depends(get_current_identity)])


@router.get("", response_model=list[SystemRead])
def list_systems(db: Session = Depends(get_db)) -> list[System]:
    return system_service.list_systems(db)


@router.post(
    "",
    response_model=SystemRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_system(
    payload: SystemCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> System:
    return system_service.create_system(db, payload, actor=identity)


@router.get("/{system_id}", response_model=SystemRead)
def get_system(system_id: int, db: Session = Depends(get_db)) -> System:
    return system_service.get_system(db, system_id)


@router.put("/{system_id}", response_model=SystemRead)
def update_system(
    system_id: int,
    payload: SystemUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> System:
    return system_service.update_system(db, system_id, payload, actor=identity)


@router.post("/{system_id}/switch", response_model=SwitchResult)
def switch_system(
    system_id: int,
    payload: SystemSwitch,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> SwitchResult:
    """Hand over from this system to ``targetSystemId``."""

    source, target, incident = system_service.switch_systems(
        db,
        system_id,
        payload.target_system_id,
        reason=payload.reason,
        actor=identity,
    )
    return SwitchResult(
        source=SystemRead.model_validate(source),
        target=SystemRead.model_validate(target),
        incident_id=incident.id,
    )


@router.get("/{system_id}/stats", response_model=SystemStats)
def system_stats(system_id: int, db: Session = Depends(get_db)) -> SystemStats:
    return system_service.system_stats(db, system_id)
