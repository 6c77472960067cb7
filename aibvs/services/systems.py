"""System registry: supervised radio systems and their status transitions."""
import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from aibvs.db import transaction
from aibvs.models.audit import AuditLog
from aibvs.models.incident import Incident, IncidentStatus
from aibvs.models.scenario import Priority
from aibvs.models.system import System, SystemStatus
from aibvs.models.user import UserRole
from aibvs.schemas.stats import DailyCount, SeverityCount
from aibvs.schemas.system import SystemCreate, SystemStats, SystemUpdate
from aibvs.security import Identity, require_role
from aibvs.services import audit
from aibvs.utils.errors import NotFound, ValidationError
from aibvs.utils.time import as_date, days_ago, utcnow

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("status", "location", "frequency", "description")


def coerce_status(value: Any) -> SystemStatus:
    """Return ``value`` as a ``SystemStatus`` or raise ``ValidationError``."""

    try:
        return SystemStatus(value)
    except ValueError as exc:
        allowed = [status.value for status in SystemStatus]
        raise ValidationError(
            f"Invalid system status {value!r}.",
            code="INVALID_SYSTEM_STATUS",
            details={"allowed": allowed},
        ) from exc


def get_system(db: Session, system_id: int) -> System:
    system = db.get(System, system_id)
    if system is None:
        raise NotFound.for_entity("System")
    return system


def list_systems(db: Session) -> list[System]:
    return list(db.scalars(select(System).order_by(System.id)).all())


def set_status(db: Session, system: System, status: SystemStatus) -> System:
    """Move ``system`` to ``status`` and refresh its check timestamp.

    Only stages the change; the caller owns the transaction.
    """

    system.status = coerce_status(status)
    system.last_check = utcnow()
    db.add(system)
    return system


def create_system(db: Session, payload: SystemCreate, *, actor: Identity) -> System:
    """Register a new system (admin only)."""

    require_role(actor, UserRole.admin)
    with transaction(db):
        system = System(**payload.model_dump(), last_check=utcnow())
        db.add(system)
        db.flush()
        audit.record_for(
            db,
            actor,
            action="CREATE_SYSTEM",
            entity_type="system",
            entity_id=system.id,
            details={"name": system.name, "type": system.type, "status": system.status.value},
        )
    logger.info("System created", extra={"system_id": system.id, "system_name": system.name})
    return system


def update_system(db: Session, system_id: int, payload: SystemUpdate | dict[str, Any], *, actor: Identity) -> System:
    """Apply the provided fields and always refresh ``last_check``."""

    fields = payload if isinstance(payload, dict) else payload.model_dump(exclude_unset=True)
    changes = {key: value for key, value in fields.items() if key in UPDATABLE_FIELDS and value not in (None, "")}
    # Reject before touching the row so an invalid status leaves it unchanged.
    if "status" in changes:
        changes["status"] = coerce_status(changes["status"])

    with transaction(db):
        system = get_system(db, system_id)
        for key, value in changes.items():
            setattr(system, key, value)
        system.last_check = utcnow()
        db.add(system)
        audit.record_for(
            db,
            actor,
            action="UPDATE_SYSTEM",
            entity_type="system",
            entity_id=system.id,
            details={
                key: value.value if isinstance(value, SystemStatus) else value
                for key, value in changes.items()
            },
        )
    db.refresh(system)
    logger.info("System updated", extra={"system_id": system.id, "fields": sorted(changes)})
    return system


def switch_systems(
    db: Session,
    source_id: int,
    target_id: int | None,
    *,
    reason: str | None = None,
    actor: Identity,
) -> tuple[System, System, Incident]:
    """Hand traffic from ``source_id`` to ``target_id``.

    Source goes to backup, target to active, and an in-progress incident plus
    a ``SYSTEM_SWITCH`` audit entry are written, all in one transaction.
    """

    if target_id is None:
        raise ValidationError("Target system ID required.", code="TARGET_SYSTEM_REQUIRED")

    with transaction(db):
        source = get_system(db, source_id)
        target = get_system(db, target_id)

        set_status(db, source, SystemStatus.backup)
        set_status(db, target, SystemStatus.active)

        incident = Incident(
            title=f"Basculement {source.name} → {target.name}",
            description=reason or "Basculement système effectué",
            system_id=source.id,
            severity=Priority.high,
            status=IncidentStatus.in_progress,
            reported_by=actor.user_id,
        )
        db.add(incident)
        db.flush()

        audit.record_for(
            db,
            actor,
            action="SYSTEM_SWITCH",
            entity_type="system",
            entity_id=source.id,
            details={"from": source.name, "to": target.name, "reason": reason, "incident_id": incident.id},
        )
    logger.info(
        "System switch completed",
        extra={"source_id": source.id, "target_id": target.id, "incident_id": incident.id},
    )
    return source, target, incident


def system_stats(db: Session, system_id: int) -> SystemStats:
    """Incident counts by severity and daily audit activity over 30 days."""

    system = get_system(db, system_id)

    severity_rows = db.execute(
        select(Incident.severity, func.count(Incident.id))
        .where(Incident.system_id == system.id)
        .group_by(Incident.severity)
    ).all()

    log_dates = db.scalars(
        select(AuditLog.created_at).where(
            AuditLog.entity_type == "system",
            AuditLog.entity_id == system.id,
            AuditLog.created_at >= days_ago(30),
        )
    ).all()
    per_day: dict = {}
    for created_at in log_dates:
        day = as_date(created_at)
        per_day[day] = per_day.get(day, 0) + 1

    return SystemStats(
        incidents=[SeverityCount(severity=severity, count=count) for severity, count in severity_rows],
        logs=[DailyCount(date=day, count=count) for day, count in sorted(per_day.items(), reverse=True)],
    )


__all__ = [
    "coerce_status",
    "create_system",
    "get_system",
    "list_systems",
    "set_status",
    "switch_systems",
    "system_stats",
    "update_system",
]
