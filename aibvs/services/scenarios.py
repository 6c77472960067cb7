"""Scenario engine: predefined failover plans and their execution.

Executing a scenario touches up to three rows (the source system, the target
system and a new incident) plus the audit trail. All of it happens inside one
transaction; if any write fails nothing is kept, including the incident.
"""
import logging

from sqlalchemy import case, select
from sqlalchemy.orm import Session, joinedload

from aibvs.db import transaction
from aibvs.models.incident import Incident, IncidentStatus
from aibvs.models.scenario import PRIORITY_RANK, Priority, Scenario
from aibvs.models.system import SystemStatus
from aibvs.models.user import UserRole
from aibvs.schemas.scenario import ExecutionResult, ScenarioCreate, ScenarioDetail, ScenarioRead
from aibvs.security import Identity, require_role
from aibvs.services import audit
from aibvs.services.systems import get_system, set_status
from aibvs.utils.errors import NotFound, ValidationError

logger = logging.getLogger(__name__)

_priority_rank = case(
    *((Scenario.priority == priority, rank) for priority, rank in PRIORITY_RANK.items()),
    else_=0,
)

_WITH_SYSTEMS = (joinedload(Scenario.source_system), joinedload(Scenario.target_system))


def _load(db: Session, scenario_id: int) -> Scenario:
    stmt = (
        select(Scenario)
        .options(*_WITH_SYSTEMS)
        .where(Scenario.id == scenario_id)
        .execution_options(populate_existing=True)
    )
    scenario = db.scalars(stmt).first()
    if scenario is None:
        raise NotFound.for_entity("Scenario")
    return scenario


def list_scenarios(db: Session) -> list[ScenarioRead]:
    """Critical first, then high, medium, low; equal priorities by id."""

    stmt = select(Scenario).options(*_WITH_SYSTEMS).order_by(_priority_rank.desc(), Scenario.id.asc())
    return [ScenarioRead.from_scenario(scenario) for scenario in db.scalars(stmt).unique().all()]


def get_scenario(db: Session, scenario_id: int) -> ScenarioDetail:
    return ScenarioDetail.from_scenario(_load(db, scenario_id))


def create_scenario(db: Session, payload: ScenarioCreate, *, actor: Identity) -> Scenario:
    """Define a new failover plan (admin only)."""

    require_role(actor, UserRole.admin)
    if not payload.name or payload.steps is None or payload.priority is None:
        raise ValidationError("Missing required fields.", code="MISSING_FIELDS")

    with transaction(db):
        for system_id in (payload.source_system_id, payload.target_system_id):
            if system_id is not None:
                get_system(db, system_id)
        scenario = Scenario(
            name=payload.name,
            description=payload.description,
            source_system_id=payload.source_system_id,
            target_system_id=payload.target_system_id,
            steps=list(payload.steps),
            estimated_time=payload.estimated_time,
            priority=payload.priority,
        )
        db.add(scenario)
        db.flush()
        audit.record_for(
            db,
            actor,
            action="CREATE_SCENARIO",
            entity_type="scenario",
            entity_id=scenario.id,
            details={"name": scenario.name, "priority": scenario.priority.value},
        )
    logger.info("Scenario created", extra={"scenario_id": scenario.id, "priority": scenario.priority.value})
    return scenario


def execute_scenario(
    db: Session,
    scenario_id: int,
    *,
    notes: str | None = None,
    actor: Identity,
) -> ExecutionResult:
    """Run a failover plan: open an incident, flip both systems, audit.

    The incident is written before the status changes; a failure in any later
    step rolls the incident back with everything else.
    """

    with transaction(db):
        scenario = _load(db, scenario_id)

        incident = Incident(
            title=f"Exécution: {scenario.name}",
            description=notes or f"Scénario {scenario.name} exécuté",
            system_id=scenario.source_system_id,
            severity=Priority.critical if scenario.priority == Priority.critical else Priority.high,
            status=IncidentStatus.in_progress,
            reported_by=actor.user_id,
        )
        db.add(incident)
        db.flush()

        if scenario.source_system_id is not None:
            set_status(db, get_system(db, scenario.source_system_id), SystemStatus.backup)
        if scenario.target_system_id is not None:
            set_status(db, get_system(db, scenario.target_system_id), SystemStatus.active)
        db.flush()

        audit.record_for(
            db,
            actor,
            action="EXECUTE_SCENARIO",
            entity_type="scenario",
            entity_id=scenario.id,
            details={"scenario": scenario.name, "incident_id": incident.id, "notes": notes},
        )

    logger.info(
        "Scenario executed",
        extra={
            "scenario_id": scenario.id,
            "incident_id": incident.id,
            "source_system_id": scenario.source_system_id,
            "target_system_id": scenario.target_system_id,
        },
    )
    return ExecutionResult(
        scenario=scenario.name,
        incident_id=incident.id,
        estimated_time=scenario.estimated_time,
    )


__all__ = [
    "create_scenario",
    "execute_scenario",
    "get_scenario",
    "list_scenarios",
]
