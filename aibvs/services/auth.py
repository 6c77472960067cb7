"""Login."""
import logging

from sqlalchemy.orm import Session

from aibvs.config import Settings
from aibvs.db import transaction
from aibvs.models.user import User
from aibvs.security import create_access_token, pwd_context, verify_password
from aibvs.services import audit
from aibvs.services.users import get_user_by_username
from aibvs.utils.errors import AuthError
from aibvs.utils.time import utcnow

logger = logging.getLogger(__name__)


def authenticate(
    db: Session,
    username: str,
    password: str,
    *,
    settings: Settings,
    origin: str | None = None,
) -> tuple[str, User]:
    """Check credentials and issue a token.

    Unknown usernames and wrong passwords fail identically.
    """

    user = get_user_by_username(db, username)
    if user is None:
        # Same hashing cost as a real check.
        pwd_context.dummy_verify()
    if user is None or not verify_password(password, user.password_hash):
        logger.info("Login rejected", extra={"origin": origin})
        raise AuthError("Invalid credentials.", code="INVALID_CREDENTIALS")

    with transaction(db):
        user.last_login = utcnow()
        db.add(user)
        audit.record(
            db,
            action="LOGIN",
            entity_type="user",
            entity_id=user.id,
            actor_id=user.id,
            details={"username": user.username},
            origin=origin,
        )
    token = create_access_token(user, settings)
    logger.info("Login succeeded", extra={"user_id": user.id})
    return token, user


__all__ = ["authenticate"]
