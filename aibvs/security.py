"""Password hashing, bearer tokens and role enforcement."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from aibvs.config import Settings
from aibvs.db import get_db
from aibvs.models.user import User, UserRole
from aibvs.utils.errors import AuthError, Forbidden
from aibvs.utils.time import utcnow

logger = logging.getLogger(__name__)

TOKEN_ISSUER = "aibvs-console"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


@dataclass(frozen=True)
class Identity:
    """The authenticated caller of an operation."""

    user_id: int
    username: str
    role: UserRole
    origin: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin

    @classmethod
    def for_user(cls, user: User, origin: str | None = None) -> "Identity":
        return cls(user_id=user.id, username=user.username, role=user.role, origin=origin)


def create_access_token(user: User, settings: Settings) -> str:
    """Issue a signed token carrying the user id, username and role."""

    now = utcnow()
    expire = now + timedelta(hours=settings.JWT_EXPIRE_HOURS)
    payload: dict[str, Any] = {
        "sub": str(user.id),
        "username": user.username,
        "role": user.role.value,
        "iat": now,
        "exp": expire,
        "iss": TOKEN_ISSUER,
    }
    token = jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    logger.debug("Access token issued", extra={"user_id": user.id, "expires_at": expire.isoformat()})
    return token


def authorize(token: str | None, settings: Settings, origin: str | None = None) -> Identity:
    """Decode ``token`` into an ``Identity``.

    Missing, malformed, tampered and expired tokens all raise the same
    ``AuthError``.
    """

    if not token:
        raise AuthError("Authentication required.")
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            issuer=TOKEN_ISSUER,
            options={"require": ["exp", "iat", "sub"]},
        )
        identity = Identity(
            user_id=int(payload["sub"]),
            username=str(payload["username"]),
            role=UserRole(payload["role"]),
            origin=origin,
        )
    except ExpiredSignatureError as exc:
        logger.info("Token rejected: expired")
        raise AuthError("Invalid or expired token.") from exc
    except (InvalidTokenError, KeyError, ValueError) as exc:
        logger.warning("Token rejected: invalid", extra={"reason": str(exc)})
        raise AuthError("Invalid or expired token.") from exc
    return identity


def require_role(identity: Identity, role: UserRole) -> Identity:
    """Raise ``Forbidden`` unless ``identity`` holds ``role``."""

    if identity.role != role:
        logger.warning(
            "Access denied",
            extra={"user_id": identity.user_id, "role": identity.role.value, "required": role.value},
        )
        raise Forbidden()
    return identity


def require_self_or_admin(identity: Identity, user_id: int) -> Identity:
    """Profiles are readable and editable by their owner or by an admin."""

    if identity.is_admin or identity.user_id == user_id:
        return identity
    raise Forbidden()


# --- FastAPI dependencies ---------------------------------------------------

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_identity(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Identity:
    """Resolve the caller from the ``Authorization: Bearer`` header.

    The account must still exist: a token outlives the user it was issued to.
    """

    token = credentials.credentials if credentials else None
    origin = request.client.host if request.client else None
    identity = authorize(token, request.app.state.settings, origin=origin)
    user = db.get(User, identity.user_id)
    if user is None:
        logger.warning("Token rejected: unknown user", extra={"user_id": identity.user_id})
        raise AuthError("Invalid or expired token.")
    return Identity.for_user(user, origin=origin)


def require_admin(identity: Identity = Depends(get_current_identity)) -> Identity:
    return require_role(identity, UserRole.admin)


__all__ = [
    "Identity",
    "authorize",
    "create_access_token",
    "get_current_identity",
    "hash_password",
    "require_admin",
    "require_role",
    "require_self_or_admin",
    "verify_password",
]
