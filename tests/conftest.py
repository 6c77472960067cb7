"""Test configuration."""
import os
from collections.abc import AsyncIterator, Callable, Iterator

# --- Config env par défaut (module-level app in aibvs.main reads it at import)
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AIBVS_ENV", "test")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("PROMETHEUS_ENABLED", "false")
os.environ.setdefault("SEED_DEFAULTS", "false")

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import select  # noqa: E402
from sqlalchemy.engine import Engine  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from aibvs.config import Settings  # noqa: E402
from aibvs.db import build_engine, build_sessionmaker, create_all, get_db  # noqa: E402
from aibvs.main import create_app  # noqa: E402
from aibvs.models import System, User, UserRole  # noqa: E402
from aibvs.security import Identity, create_access_token, hash_password  # noqa: E402
from aibvs.services import audit as audit_service  # noqa: E402
from aibvs.services.bootstrap import seed_defaults  # noqa: E402


@pytest.fixture
def settings() -> Settings:
    return Settings(
        app_env="test",
        database_url="sqlite://",
        JWT_SECRET_KEY="test-secret",
        PROMETHEUS_ENABLED=False,
        SEED_DEFAULTS=False,
        SENTRY_DSN=None,
    )


@pytest.fixture
def engine(settings: Settings) -> Iterator[Engine]:
    """Fresh in-memory database per test."""

    test_engine = build_engine(settings.database_url)
    create_all(test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def db_session(engine: Engine) -> Iterator[Session]:
    session = build_sessionmaker(engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def app(settings: Settings, engine: Engine, db_session: Session) -> Iterator[FastAPI]:
    fastapi_app = create_app(settings=settings, engine=engine)

    def _get_db() -> Iterator[Session]:
        yield db_session

    fastapi_app.dependency_overrides[get_db] = _get_db
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as async_client:
        yield async_client


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def _reset_audit_counters(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(audit_service, "_AUDIT_WRITES", 0)
    monkeypatch.setattr(audit_service, "_AUDIT_FAILURES", 0)


@pytest.fixture
def seeded(db_session: Session, settings: Settings) -> dict[str, System]:
    """Default accounts, the three radio systems and the three scenarios.

    Returns systems by name: SITTI (active), GAREX300 and PCR960M (inactive).
    """

    seed_defaults(db_session, settings)
    systems = db_session.scalars(select(System)).all()
    return {system.name: system for system in systems}


@pytest.fixture
def admin_user(db_session: Session, seeded) -> User:
    return db_session.scalars(select(User).where(User.username == "admin")).one()


@pytest.fixture
def atsep_user(db_session: Session, seeded) -> User:
    return db_session.scalars(select(User).where(User.username == "atsep")).one()


@pytest.fixture
def admin_identity(admin_user: User) -> Identity:
    return Identity.for_user(admin_user, origin="127.0.0.1")


@pytest.fixture
def atsep_identity(atsep_user: User) -> Identity:
    return Identity.for_user(atsep_user, origin="127.0.0.1")


@pytest.fixture
def admin_headers(admin_user: User, settings: Settings) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(admin_user, settings)}"}


@pytest.fixture
def atsep_headers(atsep_user: User, settings: Settings) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(atsep_user, settings)}"}


@pytest.fixture
def make_user(db_session: Session) -> Callable[..., User]:
    """Factory inserting a committed user."""

    def _factory(
        username: str,
        *,
        role: UserRole = UserRole.atsep,
        password: str = "secret-pass",
        full_name: str | None = None,
    ) -> User:
        user = User(
            username=username,
            password_hash=hash_password(password),
            full_name=full_name or username.title(),
            email=f"{username}@ccr-casa.ma",
            role=role,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _factory
