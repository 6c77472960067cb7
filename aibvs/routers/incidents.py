"""Incident endpoints."""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from aibvs.db import get_db
from aibvs.models.incident import IncidentStatus
from aibvs.models.scenario import Priority
from aibvs.schemas.incident import IncidentCreate, IncidentDetail, IncidentRead, IncidentStats, IncidentUpdate
from aibvs.security import Identity, get_current_identity
from aibvs.services import incidents as incident_service

router = APIRouter(prefix="/incidents", tags=["incidents"], dependencies=[Depends(get_current_identity)])


@router.get("", response_model=list[IncidentRead])
def list_incidents(
    incident_status: IncidentStatus | None = Query(default=None, alias="status"),
    severity: Priority | None = Query(default=None),
    system_id: int | None = Query(default=None),
    limit: int = Query(default=incident_service.DEFAULT_LIST_LIMIT, ge=1, le=500),
    db: Session = Depends(get_db),
) -> list[IncidentRead]:
    return incident_service.list_incidents(
        db,
        status=incident_status,
        severity=severity,
        system_id=system_id,
        limit=limit,
    )


@router.post("", response_model=IncidentDetail, status_code=status.HTTP_201_CREATED)
def create_incident(
    payload: IncidentCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> IncidentDetail:
    incident = incident_service.create_incident(db, payload, actor=identity)
    return incident_service.get_incident(db, incident.id)


# Declared before /{incident_id} so "stats" is not parsed as an id.
@router.get("/stats/summary", response_model=IncidentStats)
def incident_stats(db: Session = Depends(get_db)) -> IncidentStats:
    return incident_service.stats_summary(db)


@router.get("/{incident_id}", response_model=IncidentDetail)
def get_incident(incident_id: int, db: Session = Depends(get_db)) -> IncidentDetail:
    return incident_service.get_incident(db, incident_id)


@router.put("/{incident_id}", response_model=IncidentDetail)
def update_incident(
    incident_id: int,
    payload: IncidentUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> IncidentDetail:
    incident = incident_service.update_incident(db, incident_id, payload, actor=identity)
    return incident_service.get_incident(db, incident.id)
