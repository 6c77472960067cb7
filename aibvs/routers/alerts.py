"""Alerts endpoints."""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from aibvs.db import get_db
from aibvs.models.alert import Alert
from aibvs.schemas.alert import AlertRead
from aibvs.security import require_admin
from aibvs.services import alerts as alert_service

router = APIRouter(prefix="/alerts", tags=["alerts"], dependencies=[Depends(require_admin)])


@router.get("", response_model=list[AlertRead], status_code=status.HTTP_200_OK)
def list_alerts(
    alert_type: str | None = Query(default=None, alias="type"),
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
) -> list[Alert]:
    return alert_service.list_alerts(db, alert_type=alert_type, limit=limit)
