import pytest
from sqlalchemy import select

from aibvs.models import AuditLog, Incident, Priority, User, UserRole
from aibvs.schemas import UserCreate
from aibvs.security import create_access_token
from aibvs.services import users as user_service
from aibvs.utils.errors import Forbidden, ValidationError


def test_admin_cannot_delete_self(db_session, admin_identity, admin_user):
    with pytest.raises(ValidationError) as exc_info:
        user_service.delete_user(db_session, admin_user.id, actor=admin_identity)

    assert exc_info.value.code == "CANNOT_DELETE_SELF"
    assert db_session.get(User, admin_user.id) is not None


def test_atsep_cannot_delete_anyone(db_session, atsep_identity, admin_user):
    with pytest.raises(Forbidden):
        user_service.delete_user(db_session, admin_user.id, actor=atsep_identity)
    assert db_session.get(User, admin_user.id) is not None


def test_duplicate_username_rejected(db_session, admin_identity):
    payload = UserCreate(username="atsep", password="x", full_name="Doublon", role=UserRole.atsep)
    with pytest.raises(ValidationError) as exc_info:
        user_service.create_user(db_session, payload, actor=admin_identity)
    assert exc_info.value.code == "USERNAME_TAKEN"


def test_create_user_is_audited_without_credentials(db_session, admin_identity):
    payload = UserCreate(
        username="opérateur2",
        password="s3cret",
        full_name="Opérateur Deux",
        email="op2@ccr-casa.ma",
        role=UserRole.atsep,
    )
    user = user_service.create_user(db_session, payload, actor=admin_identity)

    assert user.password_hash != "s3cret"
    entry = db_session.scalars(select(AuditLog).where(AuditLog.action == "CREATE_USER")).one()
    assert entry.details == {"username": "opérateur2", "role": "atsep"}
    assert entry.user_id == admin_identity.user_id
    assert entry.ip_address == "127.0.0.1"


@pytest.mark.anyio("asyncio")
async def test_list_users_admin_only(client, admin_headers, atsep_headers):
    denied = await client.get("/api/users", headers=atsep_headers)
    assert denied.status_code == 403

    listed = await client.get("/api/users", headers=admin_headers)
    assert listed.status_code == 200
    rows = listed.json()
    assert [row["username"] for row in rows] == ["admin", "atsep"]
    assert all("password_hash" not in row for row in rows)


@pytest.mark.anyio("asyncio")
async def test_profile_is_visible_to_owner_and_admin(client, admin_user, atsep_user, admin_headers, atsep_headers):
    own = await client.get(f"/api/users/{atsep_user.id}", headers=atsep_headers)
    assert own.status_code == 200
    assert own.json()["full_name"] == "ATSEP Operator"

    other = await client.get(f"/api/users/{admin_user.id}", headers=atsep_headers)
    assert other.status_code == 403

    as_admin = await client.get(f"/api/users/{atsep_user.id}", headers=admin_headers)
    assert as_admin.status_code == 200


@pytest.mark.anyio("asyncio")
async def test_update_own_profile_and_password(client, atsep_user, atsep_headers):
    response = await client.put(
        f"/api/users/{atsep_user.id}",
        json={"full_name": "Technicien ATSEP", "password": "nouveau-pass"},
        headers=atsep_headers,
    )
    assert response.status_code == 200
    assert response.json()["full_name"] == "Technicien ATSEP"

    login = await client.post("/api/auth/login", json={"username": "atsep", "password": "nouveau-pass"})
    assert login.status_code == 200

    empty = await client.put(f"/api/users/{atsep_user.id}", json={}, headers=atsep_headers)
    assert empty.status_code == 400
    assert empty.json()["error"]["code"] == "NO_FIELDS"


@pytest.mark.anyio("asyncio")
async def test_create_and_delete_user(client, admin_headers, admin_user):
    created = await client.post(
        "/api/users",
        json={"username": "stagiaire", "password": "pw", "full_name": "Stagiaire", "role": "atsep"},
        headers=admin_headers,
    )
    assert created.status_code == 201
    user_id = created.json()["id"]

    deleted = await client.delete(f"/api/users/{user_id}", headers=admin_headers)
    assert deleted.status_code == 200
    assert deleted.json() == {"message": "User deleted successfully"}

    gone = await client.get(f"/api/users/{user_id}", headers=admin_headers)
    assert gone.status_code == 404
    assert gone.json()["error"]["code"] == "USER_NOT_FOUND"

    self_delete = await client.delete(f"/api/users/{admin_user.id}", headers=admin_headers)
    assert self_delete.status_code == 400
    assert self_delete.json()["error"]["code"] == "CANNOT_DELETE_SELF"


@pytest.mark.anyio("asyncio")
async def test_create_user_rejects_bad_role(client, admin_headers):
    response = await client.post(
        "/api/users",
        json={"username": "x", "password": "pw", "full_name": "X", "role": "supervisor"},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.anyio("asyncio")
async def test_deleted_reporter_leaves_incident_in_place(client, db_session, seeded, make_user, admin_headers, settings):
    reporter = make_user("temporaire")
    token = create_access_token(reporter, settings)
    created = await client.post(
        "/api/incidents",
        json={"title": "Test", "severity": "low"},
        headers={"Authorization": f"Bearer {token}"},
    )
    incident_id = created.json()["id"]

    deleted = await client.delete(f"/api/users/{reporter.id}", headers=admin_headers)
    assert deleted.status_code == 200

    db_session.expire_all()
    incident = db_session.get(Incident, incident_id)
    assert incident is not None
    assert incident.severity == Priority.low
    assert incident.reported_by is None
