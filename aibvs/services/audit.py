"""Audit trail: append-only action records for every mutating operation.

Entries are written inside a SAVEPOINT of the caller's transaction, so an
entry commits or rolls back together with the change it describes. If the
insert itself fails, only the savepoint is rolled back: the primary operation
goes on, and the lost entry is reported on a separate channel (error log,
``AUDIT_WRITE_FAILED`` alert, failure counter in ``/api/health``).
"""
from __future__ import annotations

import logging
import threading
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from aibvs.models.audit import AuditLog
from aibvs.models.user import User
from aibvs.schemas.audit import AuditLogCreate, AuditLogRead
from aibvs.security import Identity
from aibvs.services import alerts as alert_service
from aibvs.utils.audit import sanitize_payload_for_audit

logger = logging.getLogger(__name__)

ALERT_AUDIT_WRITE_FAILED = "AUDIT_WRITE_FAILED"

_AUDIT_WRITES: int = 0
_AUDIT_FAILURES: int = 0
_STATS_LOCK = threading.Lock()


def get_audit_stats() -> dict[str, int]:
    """Expose audit counters for health/observability."""

    with _STATS_LOCK:
        return {"writes": _AUDIT_WRITES, "failures": _AUDIT_FAILURES}


def _report_failure(
    db: Session,
    *,
    action: str,
    entity_type: str | None,
    entity_id: int | None,
    actor_id: int | None,
    exc: Exception,
) -> None:
    global _AUDIT_FAILURES
    with _STATS_LOCK:
        _AUDIT_FAILURES += 1
    context = {"action": action, "entity_type": entity_type, "entity_id": entity_id, "actor_id": actor_id}
    logger.error("Audit entry lost", extra={**context, "error": str(exc)}, exc_info=exc)
    try:
        with db.begin_nested():
            alert_service.create_alert(
                db,
                alert_type=ALERT_AUDIT_WRITE_FAILED,
                message=f"Audit entry {action} could not be written.",
                actor_user_id=actor_id,
                payload={**context, "error": type(exc).__name__},
            )
    except SQLAlchemyError:
        logger.exception("Audit failure alert could not be stored", extra=context)


def record(
    db: Session,
    *,
    action: str,
    entity_type: str | None,
    entity_id: int | None,
    actor_id: int | None,
    details: Any = None,
    origin: str | None = None,
) -> AuditLog | None:
    """Append an audit entry to the current transaction.

    Returns the staged entry, or ``None`` when it could not be written.
    """

    global _AUDIT_WRITES
    entry = AuditLog(
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        user_id=actor_id,
        details=sanitize_payload_for_audit(details),
        ip_address=origin,
    )
    # Pending primary changes must fail on their own, not as an audit failure.
    db.flush()
    try:
        with db.begin_nested():
            db.add(entry)
    except SQLAlchemyError as exc:
        _report_failure(
            db,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            actor_id=actor_id,
            exc=exc,
        )
        return None
    with _STATS_LOCK:
        _AUDIT_WRITES += 1
    return entry


def record_for(
    db: Session,
    actor: Identity,
    *,
    action: str,
    entity_type: str | None,
    entity_id: int | None,
    details: Any = None,
) -> AuditLog | None:
    """``record`` with actor id and origin address taken from ``actor``."""

    return record(
        db,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        actor_id=actor.user_id,
        details=details,
        origin=actor.origin,
    )


def append_client_entry(db: Session, payload: AuditLogCreate, *, actor: Identity) -> AuditLog | None:
    """Store an entry submitted by a console client (UI-side actions)."""

    return record(
        db,
        action=payload.action,
        entity_type=payload.entity_type,
        entity_id=payload.entity_id,
        actor_id=actor.user_id,
        details=payload.details,
        origin=payload.ip_address or actor.origin,
    )


def list_logs(
    db: Session,
    *,
    action: str | None = None,
    entity_type: str | None = None,
    user_id: int | None = None,
    limit: int = 100,
) -> list[AuditLogRead]:
    """Return entries newest first, with the acting user's names attached."""

    stmt = select(AuditLog, User.username, User.full_name).outerjoin(User, AuditLog.user_id == User.id)
    if action:
        stmt = stmt.where(AuditLog.action == action)
    if entity_type:
        stmt = stmt.where(AuditLog.entity_type == entity_type)
    if user_id is not None:
        stmt = stmt.where(AuditLog.user_id == user_id)
    stmt = stmt.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit)

    rows = db.execute(stmt).all()
    return [
        AuditLogRead.model_validate(entry).model_copy(update={"username": username, "full_name": full_name})
        for entry, username, full_name in rows
    ]


__all__ = [
    "ALERT_AUDIT_WRITE_FAILED",
    "append_client_entry",
    "get_audit_stats",
    "list_logs",
    "record",
    "record_for",
]
