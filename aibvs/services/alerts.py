"""Alert service helpers."""
import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from aibvs.models.alert import Alert

logger = logging.getLogger(__name__)


def create_alert(db: Session, *, alert_type: str, message: str, actor_user_id: int | None, payload: dict[str, Any]) -> Alert:
    """Stage an alert in the current transaction."""

    alert = Alert(type=alert_type, message=message, actor_user_id=actor_user_id, payload_json=payload)
    db.add(alert)
    db.flush()
    logger.warning("Alert created", extra={"type": alert_type, "payload": payload})
    return alert


def list_alerts(db: Session, *, alert_type: str | None = None, limit: int = 100) -> list[Alert]:
    stmt = select(Alert)
    if alert_type:
        stmt = stmt.where(Alert.type == alert_type)
    stmt = stmt.order_by(Alert.created_at.desc(), Alert.id.desc()).limit(limit)
    return list(db.scalars(stmt).all())
