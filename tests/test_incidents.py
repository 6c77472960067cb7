from datetime import UTC, datetime

import pytest
from sqlalchemy import select

from aibvs.models import AuditLog, Incident, IncidentStatus, Priority
from aibvs.schemas import IncidentCreate, IncidentUpdate
from aibvs.services import incidents as incident_service
from aibvs.utils.errors import NotFound, ValidationError


def _open(db_session, identity, *, title="Perte porteuse", severity=Priority.medium, system_id=None):
    payload = IncidentCreate(title=title, severity=severity, system_id=system_id, description="Signal faible")
    return incident_service.create_incident(db_session, payload, actor=identity)


def test_create_starts_open_and_is_audited(db_session, seeded, atsep_identity, atsep_user):
    incident = _open(db_session, atsep_identity, system_id=seeded["SITTI"].id)

    assert incident.status == IncidentStatus.open
    assert incident.reported_by == atsep_user.id
    assert incident.resolved_by is None
    entry = db_session.scalars(select(AuditLog).where(AuditLog.action == "CREATE_INCIDENT")).one()
    assert entry.entity_id == incident.id
    assert entry.details == {"title": "Perte porteuse", "severity": "medium"}


def test_create_for_unknown_system(db_session, seeded, atsep_identity):
    with pytest.raises(NotFound):
        _open(db_session, atsep_identity, system_id=999)


@pytest.mark.parametrize("final_status", [IncidentStatus.resolved, IncidentStatus.closed])
def test_resolving_stamps_resolver(db_session, seeded, atsep_identity, admin_identity, admin_user, final_status):
    incident = _open(db_session, atsep_identity)

    updated = incident_service.update_incident(
        db_session, incident.id, IncidentUpdate(status=IncidentStatus.in_progress), actor=admin_identity
    )
    assert updated.resolved_by is None
    assert updated.resolved_at is None

    updated = incident_service.update_incident(
        db_session, incident.id, IncidentUpdate(status=final_status), actor=admin_identity
    )
    assert updated.status == final_status
    assert updated.resolved_by == admin_user.id
    assert updated.resolved_at is not None


def test_open_to_closed_is_accepted_without_intermediate_steps(db_session, seeded, atsep_identity):
    # Status jumps are not restricted; the console UI decides which buttons to show.
    incident = _open(db_session, atsep_identity)

    updated = incident_service.update_incident(
        db_session, incident.id, IncidentUpdate(status=IncidentStatus.closed), actor=atsep_identity
    )

    assert updated.status == IncidentStatus.closed
    assert updated.resolved_by == atsep_identity.user_id


def test_reopening_clears_resolution(db_session, seeded, atsep_identity):
    incident = _open(db_session, atsep_identity)
    incident_service.update_incident(
        db_session, incident.id, IncidentUpdate(status=IncidentStatus.resolved), actor=atsep_identity
    )

    reopened = incident_service.update_incident(
        db_session, incident.id, IncidentUpdate(status=IncidentStatus.open), actor=atsep_identity
    )

    assert reopened.status == IncidentStatus.open
    assert reopened.resolved_by is None
    assert reopened.resolved_at is None


def test_update_without_fields(db_session, seeded, atsep_identity):
    incident = _open(db_session, atsep_identity)
    with pytest.raises(ValidationError) as exc_info:
        incident_service.update_incident(db_session, incident.id, IncidentUpdate(), actor=atsep_identity)
    assert exc_info.value.code == "NO_FIELDS"


def test_update_severity_keeps_status(db_session, seeded, atsep_identity):
    incident = _open(db_session, atsep_identity)

    updated = incident_service.update_incident(
        db_session, incident.id, IncidentUpdate(severity=Priority.critical), actor=atsep_identity
    )

    assert updated.severity == Priority.critical
    assert updated.status == IncidentStatus.open
    entry = db_session.scalars(select(AuditLog).where(AuditLog.action == "UPDATE_INCIDENT")).one()
    assert entry.details == {"status": None, "severity": "critical"}


def test_list_filters_and_order(db_session, seeded, atsep_identity):
    sitti, pcr = seeded["SITTI"], seeded["PCR960M"]
    first = _open(db_session, atsep_identity, title="A", severity=Priority.low, system_id=sitti.id)
    second = _open(db_session, atsep_identity, title="B", severity=Priority.high, system_id=sitti.id)
    third = _open(db_session, atsep_identity, title="C", severity=Priority.high, system_id=pcr.id)

    assert [row.id for row in incident_service.list_incidents(db_session)] == [third.id, second.id, first.id]
    assert [row.id for row in incident_service.list_incidents(db_session, severity=Priority.high)] == [
        third.id,
        second.id,
    ]
    filtered = incident_service.list_incidents(db_session, severity=Priority.high, system_id=sitti.id)
    assert [row.id for row in filtered] == [second.id]
    assert filtered[0].system_name == "SITTI"
    assert filtered[0].reported_by_username == "atsep"
    assert len(incident_service.list_incidents(db_session, limit=2)) == 2
    assert incident_service.list_incidents(db_session, status=IncidentStatus.closed) == []


def test_detail_includes_names(db_session, seeded, atsep_identity, admin_identity):
    incident = _open(db_session, atsep_identity, system_id=seeded["GAREX300"].id)
    incident_service.update_incident(
        db_session, incident.id, IncidentUpdate(status=IncidentStatus.resolved), actor=admin_identity
    )

    detail = incident_service.get_incident(db_session, incident.id)

    assert detail.system_type == "VHF"
    assert detail.reported_by_name == "ATSEP Operator"
    assert detail.resolved_by_name == "Administrator"
    assert detail.resolved_by_username == "admin"


def test_stats_summary_includes_idle_systems(db_session, seeded, atsep_identity):
    _open(db_session, atsep_identity, severity=Priority.high, system_id=seeded["SITTI"].id)
    _open(db_session, atsep_identity, severity=Priority.high, system_id=seeded["SITTI"].id)
    _open(db_session, atsep_identity, severity=Priority.low)

    stats = incident_service.stats_summary(db_session)

    assert {row.severity: row.count for row in stats.by_severity} == {Priority.high: 2, Priority.low: 1}
    assert {row.status: row.count for row in stats.by_status} == {IncidentStatus.open: 3}
    assert [(row.name, row.count) for row in stats.by_system] == [("SITTI", 2), ("GAREX300", 0), ("PCR960M", 0)]
    assert len(stats.recent_trend) == 1
    assert stats.recent_trend[0].date == datetime.now(tz=UTC).date()
    assert stats.recent_trend[0].count == 3


def test_stats_trend_ignores_old_incidents(db_session, seeded, atsep_identity):
    old = _open(db_session, atsep_identity)
    old.created_at = datetime(2020, 1, 1, tzinfo=UTC)
    db_session.commit()

    stats = incident_service.stats_summary(db_session)

    assert stats.recent_trend == []
    assert sum(row.count for row in stats.by_status) == 1


@pytest.mark.anyio("asyncio")
async def test_api_incident_lifecycle(client, seeded, atsep_headers, admin_headers):
    created = await client.post(
        "/api/incidents",
        json={"title": "Brouillage", "severity": "high", "system_id": seeded["SITTI"].id},
        headers=atsep_headers,
    )
    assert created.status_code == 201
    incident_id = created.json()["id"]
    assert created.json()["status"] == "open"
    assert created.json()["reported_by_username"] == "atsep"

    updated = await client.put(f"/api/incidents/{incident_id}", json={"status": "resolved"}, headers=admin_headers)
    assert updated.status_code == 200
    assert updated.json()["resolved_by_username"] == "admin"
    assert updated.json()["resolved_at"] is not None

    listed = await client.get("/api/incidents", params={"status": "resolved"}, headers=atsep_headers)
    assert [row["id"] for row in listed.json()] == [incident_id]

    stats = await client.get("/api/incidents/stats/summary", headers=atsep_headers)
    assert stats.status_code == 200
    assert stats.json()["by_status"] == [{"status": "resolved", "count": 1}]


@pytest.mark.anyio("asyncio")
async def test_api_incident_errors(client, seeded, atsep_headers):
    missing = await client.get("/api/incidents/999", headers=atsep_headers)
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "INCIDENT_NOT_FOUND"

    no_severity = await client.post("/api/incidents", json={"title": "Sans gravité"}, headers=atsep_headers)
    assert no_severity.status_code == 400
    assert no_severity.json()["error"]["code"] == "VALIDATION_ERROR"

    bad_status = await client.get("/api/incidents", params={"status": "pending"}, headers=atsep_headers)
    assert bad_status.status_code == 400
