"""Incident tracker."""
import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from aibvs.db import transaction
from aibvs.models.incident import Incident, IncidentStatus, RESOLVED_STATES
from aibvs.models.scenario import Priority
from aibvs.models.system import System
from aibvs.schemas.incident import IncidentCreate, IncidentDetail, IncidentRead, IncidentStats, IncidentUpdate
from aibvs.schemas.stats import DailyCount, SeverityCount, StatusCount, SystemCount
from aibvs.security import Identity
from aibvs.services import audit
from aibvs.services.systems import get_system
from aibvs.utils.errors import NotFound, ValidationError
from aibvs.utils.time import as_date, days_ago, utcnow

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 50
TREND_WINDOW_DAYS = 30

_WITH_NAMES = (
    joinedload(Incident.system),
    joinedload(Incident.reporter),
    joinedload(Incident.resolver),
)


def _load(db: Session, incident_id: int) -> Incident:
    stmt = (
        select(Incident)
        .options(*_WITH_NAMES)
        .where(Incident.id == incident_id)
        .execution_options(populate_existing=True)
    )
    incident = db.scalars(stmt).first()
    if incident is None:
        raise NotFound.for_entity("Incident")
    return incident


def list_incidents(
    db: Session,
    *,
    status: IncidentStatus | None = None,
    severity: Priority | None = None,
    system_id: int | None = None,
    limit: int = DEFAULT_LIST_LIMIT,
) -> list[IncidentRead]:
    """Return incidents newest first; filters are combined with AND."""

    stmt = select(Incident).options(*_WITH_NAMES)
    if status:
        stmt = stmt.where(Incident.status == status)
    if severity:
        stmt = stmt.where(Incident.severity == severity)
    if system_id is not None:
        stmt = stmt.where(Incident.system_id == system_id)
    stmt = stmt.order_by(Incident.created_at.desc(), Incident.id.desc()).limit(limit)
    return [IncidentRead.from_incident(incident) for incident in db.scalars(stmt).unique().all()]


def get_incident(db: Session, incident_id: int) -> IncidentDetail:
    return IncidentDetail.from_incident(_load(db, incident_id))


def create_incident(db: Session, payload: IncidentCreate, *, actor: Identity) -> Incident:
    """Open a new incident reported by ``actor``."""

    if not payload.title or payload.severity is None:
        raise ValidationError("Title and severity required.", code="MISSING_FIELDS")

    with transaction(db):
        if payload.system_id is not None:
            get_system(db, payload.system_id)
        incident = Incident(
            title=payload.title,
            description=payload.description,
            system_id=payload.system_id,
            severity=payload.severity,
            status=IncidentStatus.open,
            reported_by=actor.user_id,
        )
        db.add(incident)
        db.flush()
        audit.record_for(
            db,
            actor,
            action="CREATE_INCIDENT",
            entity_type="incident",
            entity_id=incident.id,
            details={"title": incident.title, "severity": incident.severity.value},
        )
    logger.info("Incident created", extra={"incident_id": incident.id, "severity": incident.severity.value})
    return incident


def update_incident(db: Session, incident_id: int, payload: IncidentUpdate, *, actor: Identity) -> Incident:
    """Update status, description or severity.

    Transitions are not ordered here: any status may follow any other. Moving
    to resolved/closed stamps the resolver; moving back to open/in_progress
    clears the stamp.
    """

    changes = {key: value for key, value in payload.model_dump(exclude_unset=True).items() if value not in (None, "")}
    if not changes:
        raise ValidationError("No fields to update.", code="NO_FIELDS")

    with transaction(db):
        incident = _load(db, incident_id)
        new_status = changes.get("status")
        if new_status is not None:
            incident.status = new_status
            if new_status in RESOLVED_STATES:
                incident.resolved_by = actor.user_id
                incident.resolved_at = utcnow()
            else:
                incident.resolved_by = None
                incident.resolved_at = None
        if "description" in changes:
            incident.description = changes["description"]
        if "severity" in changes:
            incident.severity = changes["severity"]
        db.add(incident)
        audit.record_for(
            db,
            actor,
            action="UPDATE_INCIDENT",
            entity_type="incident",
            entity_id=incident.id,
            details={
                "status": new_status.value if new_status is not None else None,
                "severity": changes["severity"].value if "severity" in changes else None,
            },
        )
    db.refresh(incident)
    logger.info("Incident updated", extra={"incident_id": incident.id, "status": incident.status.value})
    return incident


def stats_summary(db: Session) -> IncidentStats:
    by_severity = db.execute(
        select(Incident.severity, func.count(Incident.id)).group_by(Incident.severity)
    ).all()
    by_status = db.execute(
        select(Incident.status, func.count(Incident.id)).group_by(Incident.status)
    ).all()
    by_system = db.execute(
        select(System.id, System.name, func.count(Incident.id))
        .outerjoin(Incident, Incident.system_id == System.id)
        .group_by(System.id, System.name)
        .order_by(System.id)
    ).all()

    recent = db.scalars(
        select(Incident.created_at).where(Incident.created_at >= days_ago(TREND_WINDOW_DAYS))
    ).all()
    per_day: dict = {}
    for created_at in recent:
        day = as_date(created_at)
        per_day[day] = per_day.get(day, 0) + 1

    return IncidentStats(
        by_severity=[SeverityCount(severity=severity, count=count) for severity, count in by_severity],
        by_status=[StatusCount(status=status, count=count) for status, count in by_status],
        by_system=[SystemCount(system_id=sid, name=name, count=count) for sid, name, count in by_system],
        recent_trend=[DailyCount(date=day, count=count) for day, count in sorted(per_day.items(), reverse=True)],
    )


__all__ = [
    "create_incident",
    "get_incident",
    "list_incidents",
    "stats_summary",
    "update_incident",
]
