"""User administration and profile management."""
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from aibvs.db import transaction
from aibvs.models.user import User, UserRole
from aibvs.schemas.user import UserCreate, UserUpdate
from aibvs.security import Identity, hash_password, require_role, require_self_or_admin
from aibvs.services import audit
from aibvs.utils.errors import InternalError, NotFound, ValidationError

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFound.for_entity("User")
    return user


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.scalars(select(User).where(User.username == username)).first()


def list_users(db: Session, *, actor: Identity) -> list[User]:
    require_role(actor, UserRole.admin)
    return list(db.scalars(select(User).order_by(User.id)).all())


def read_user(db: Session, user_id: int, *, actor: Identity) -> User:
    require_self_or_admin(actor, user_id)
    return get_user(db, user_id)


def create_user(db: Session, payload: UserCreate, *, actor: Identity, action: str = "CREATE_USER") -> User:
    """Create an account (admin only). ``action`` tags the audit entry."""

    require_role(actor, UserRole.admin)
    if get_user_by_username(db, payload.username) is not None:
        raise ValidationError("Username already exists.", code="USERNAME_TAKEN")

    user = User(
        username=payload.username,
        password_hash=hash_password(payload.password),
        full_name=payload.full_name,
        email=payload.email,
        role=payload.role,
    )
    try:
        with transaction(db):
            db.add(user)
            db.flush()
            audit.record_for(
                db,
                actor,
                action=action,
                entity_type="user",
                entity_id=user.id,
                details={"username": user.username, "role": user.role.value},
            )
    except InternalError as exc:
        # Lost a race against a concurrent create with the same username.
        if isinstance(exc.__cause__, IntegrityError):
            raise ValidationError("Username already exists.", code="USERNAME_TAKEN") from exc
        raise
    logger.info("User created", extra={"user_id": user.id, "role": user.role.value})
    return user


def update_user(db: Session, user_id: int, payload: UserUpdate, *, actor: Identity) -> User:
    """Edit profile fields or the password of oneself (or anyone, for admins)."""

    require_self_or_admin(actor, user_id)
    changes = {key: value for key, value in payload.model_dump(exclude_unset=True).items() if value not in (None, "")}
    if not changes:
        raise ValidationError("No fields to update.", code="NO_FIELDS")

    with transaction(db):
        user = get_user(db, user_id)
        if "full_name" in changes:
            user.full_name = changes["full_name"]
        if "email" in changes:
            user.email = changes["email"]
        if "password" in changes:
            user.password_hash = hash_password(changes["password"])
        db.add(user)
        audit.record_for(
            db,
            actor,
            action="UPDATE_USER",
            entity_type="user",
            entity_id=user.id,
            details={"updated_fields": sorted(changes)},
        )
    logger.info("User updated", extra={"user_id": user.id, "fields": sorted(changes)})
    return user


def delete_user(db: Session, user_id: int, *, actor: Identity) -> None:
    """Remove an account (admin only). Nobody can delete their own account."""

    require_role(actor, UserRole.admin)
    if actor.user_id == user_id:
        raise ValidationError("Cannot delete your own account.", code="CANNOT_DELETE_SELF")

    with transaction(db):
        user = get_user(db, user_id)
        username = user.username
        db.delete(user)
        db.flush()
        audit.record_for(
            db,
            actor,
            action="DELETE_USER",
            entity_type="user",
            entity_id=user_id,
            details={"username": username},
        )
    logger.info("User deleted", extra={"user_id": user_id})


__all__ = [
    "create_user",
    "delete_user",
    "get_user",
    "get_user_by_username",
    "list_users",
    "read_user",
    "update_user",
]
