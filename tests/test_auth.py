from datetime import timedelta

import jwt
import pytest
from sqlalchemy import func, select

from aibvs.models import AuditLog, Incident, Scenario, User
from aibvs.security import TOKEN_ISSUER, authorize, create_access_token
from aibvs.utils.errors import AuthError
from aibvs.utils.time import utcnow


def _forge(settings, **overrides) -> str:
    now = utcnow()
    claims = {
        "sub": "1",
        "username": "admin",
        "role": "admin",
        "iat": now,
        "exp": now + timedelta(hours=1),
        "iss": TOKEN_ISSUER,
    }
    claims.update(overrides)
    return jwt.encode(claims, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def test_token_round_trip(admin_user, settings):
    identity = authorize(create_access_token(admin_user, settings), settings, origin="10.0.0.5")

    assert identity.user_id == admin_user.id
    assert identity.username == "admin"
    assert identity.is_admin
    assert identity.origin == "10.0.0.5"


@pytest.mark.parametrize(
    "token_factory",
    [
        lambda settings: None,
        lambda settings: "not-a-jwt",
        lambda settings: _forge(settings, exp=utcnow() - timedelta(minutes=1)),
        lambda settings: _forge(settings, iss="someone-else"),
        lambda settings: _forge(settings, role="supervisor"),
        lambda settings: jwt.encode({"sub": "1", "exp": utcnow() + timedelta(hours=1)}, "wrong-key", algorithm="HS256"),
    ],
    ids=["missing", "malformed", "expired", "issuer", "role", "signature"],
)
def test_bad_tokens_raise_auth_error(settings, token_factory):
    with pytest.raises(AuthError) as exc_info:
        authorize(token_factory(settings), settings)
    assert exc_info.value.code == "INVALID_TOKEN"


@pytest.mark.anyio("asyncio")
async def test_login_success_updates_last_login(client, db_session, seeded):
    response = await client.post("/api/auth/login", json={"username": "admin", "password": "admin123"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["token_type"] == "bearer"
    assert payload["user"]["username"] == "admin"
    assert payload["user"]["role"] == "admin"
    assert "password_hash" not in payload["user"]

    user = db_session.scalars(select(User).where(User.username == "admin")).one()
    assert user.last_login is not None
    entry = db_session.scalars(select(AuditLog).where(AuditLog.action == "LOGIN")).one()
    assert entry.user_id == user.id
    assert entry.ip_address == "127.0.0.1"

    me = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {payload['token']}"})
    assert me.status_code == 200
    assert me.json()["full_name"] == "Administrator"


@pytest.mark.anyio("asyncio")
async def test_login_failures_look_identical(client, seeded):
    wrong_password = await client.post("/api/auth/login", json={"username": "admin", "password": "nope"})
    unknown_user = await client.post("/api/auth/login", json={"username": "ghost", "password": "nope"})

    assert wrong_password.status_code == unknown_user.status_code == 401
    assert wrong_password.json() == unknown_user.json()
    assert wrong_password.json()["error"]["code"] == "INVALID_CREDENTIALS"
    assert wrong_password.headers["www-authenticate"] == "Bearer"


@pytest.mark.anyio("asyncio")
async def test_login_requires_both_fields(client, seeded):
    response = await client.post("/api/auth/login", json={"username": "admin"})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.anyio("asyncio")
async def test_expired_token_is_rejected(client, settings, admin_user):
    token = _forge(settings, sub=str(admin_user.id), exp=utcnow() - timedelta(seconds=5))

    response = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_TOKEN"


@pytest.mark.anyio("asyncio")
async def test_register_is_admin_only(client, admin_headers, atsep_headers, db_session):
    body = {"username": "nouveau", "password": "pw", "full_name": "Nouveau", "role": "atsep", "email": "n@ccr-casa.ma"}

    denied = await client.post("/api/auth/register", json=body, headers=atsep_headers)
    assert denied.status_code == 403

    created = await client.post("/api/auth/register", json=body, headers=admin_headers)
    assert created.status_code == 201
    assert created.json()["message"] == "User created successfully"
    assert created.json()["user"]["username"] == "nouveau"

    entry = db_session.scalars(select(AuditLog).where(AuditLog.action == "REGISTER")).one()
    assert entry.details == {"username": "nouveau", "role": "atsep"}

    again = await client.post("/api/auth/register", json=body, headers=admin_headers)
    assert again.status_code == 400
    assert again.json()["error"]["code"] == "USERNAME_TAKEN"


@pytest.mark.anyio("asyncio")
async def test_token_of_deleted_user_is_rejected(client, db_session, seeded, make_user, admin_headers, settings):
    operator = make_user("tmp_op")
    headers = {"Authorization": f"Bearer {create_access_token(operator, settings)}"}
    deleted = await client.delete(f"/api/users/{operator.id}", headers=admin_headers)
    assert deleted.status_code == 200

    incident = await client.post("/api/incidents", json={"title": "Orphelin", "severity": "low"}, headers=headers)
    scenario_id = db_session.scalars(select(Scenario.id)).first()
    executed = await client.post(f"/api/scenarios/{scenario_id}/execute", headers=headers)

    for response in (incident, executed):
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "INVALID_TOKEN"
        assert response.headers["www-authenticate"] == "Bearer"
    assert db_session.scalar(select(func.count(Incident.id))) == 0
