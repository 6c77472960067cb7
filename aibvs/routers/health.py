"""Health check endpoint."""
from __future__ import annotations

import logging

from alembic.config import Config
from alembic.script import ScriptDirectory
from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from aibvs.config import AppInfo
from aibvs.db import get_db
from aibvs.services.audit import get_audit_stats

router = APIRouter(prefix="/health", tags=["health"])
logger = logging.getLogger(__name__)

ALEMBIC_INI = "alembic.ini"


def _db_status(db: Session) -> str:
    """Return 'ok' if the DB is reachable, 'error' otherwise."""

    try:
        db.execute(text("SELECT 1"))
        return "ok"
    except SQLAlchemyError:
        logger.exception("DB health check failed")
        db.rollback()
        return "error"


def _expected_migration_head() -> str | None:
    try:
        script = ScriptDirectory.from_config(Config(ALEMBIC_INI))
        return script.get_current_head()
    except Exception:  # noqa: BLE001
        logger.warning("Alembic head revision unavailable", exc_info=True)
        return None


def _migrations_status(db: Session) -> str:
    """'up_to_date' | 'out_of_date' | 'unknown' (e.g. schema built by create_all)."""

    expected_head = _expected_migration_head()
    try:
        current = db.execute(text("SELECT version_num FROM alembic_version")).scalar()
    except SQLAlchemyError:
        db.rollback()
        return "unknown"
    if expected_head is None:
        return "unknown"
    return "up_to_date" if current == expected_head else "out_of_date"


@router.get("", summary="Health check")
def healthcheck(request: Request, db: Session = Depends(get_db)) -> dict[str, object]:
    db_status = _db_status(db)
    migrations_status = _migrations_status(db) if db_status == "ok" else "unknown"
    app_info = AppInfo()
    return {
        "status": "ok" if db_status == "ok" else "degraded",
        "service": app_info.name,
        "version": app_info.version,
        "env": request.app.state.settings.app_env,
        "db_status": db_status,
        "migrations_status": migrations_status,
        "audit": get_audit_stats(),
    }
