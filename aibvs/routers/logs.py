"""Audit log endpoints."""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from aibvs.db import get_db, transaction
from aibvs.schemas.audit import AuditLogCreate, AuditLogCreated, AuditLogRead
from aibvs.security import Identity, get_current_identity
from aibvs.services import audit as audit_service
from aibvs.utils.errors import InternalError

router = APIRouter(prefix="/logs", tags=["logs"])


@router.get("", response_model=list[AuditLogRead], dependencies=[Depends(get_current_identity)])
def list_logs(
    action: str | None = Query(default=None),
    entity_type: str | None = Query(default=None),
    user_id: int | None = Query(default=None),
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
) -> list[AuditLogRead]:
    return audit_service.list_logs(db, action=action, entity_type=entity_type, user_id=user_id, limit=limit)


@router.post("", response_model=AuditLogCreated, status_code=status.HTTP_201_CREATED)
def create_log(
    payload: AuditLogCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> AuditLogCreated:
    """Append an entry on behalf of a console client."""

    with transaction(db):
        entry = audit_service.append_client_entry(db, payload, actor=identity)
    if entry is None:
        # The entry itself was the whole operation; losing it is a failure here.
        raise InternalError("Log entry could not be stored.")
    return AuditLogCreated(id=entry.id)
