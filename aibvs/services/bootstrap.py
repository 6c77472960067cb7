"""Default users, systems and scenarios for a fresh control-center database."""
from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from aibvs.config import Settings
from aibvs.db import transaction
from aibvs.models.scenario import Priority, Scenario
from aibvs.models.system import System, SystemStatus
from aibvs.models.user import User, UserRole
from aibvs.security import hash_password

logger = logging.getLogger(__name__)

DEFAULT_SYSTEMS = [
    {
        "name": "SITTI",
        "type": "VHF/HF",
        "status": SystemStatus.active,
        "location": "CCR Casablanca",
        "frequency": "118.1-136.975 MHz / 2-30 MHz",
        "description": "Système principal de communication sol-air",
    },
    {
        "name": "GAREX300",
        "type": "VHF",
        "status": SystemStatus.inactive,
        "location": "CCR Casablanca",
        "frequency": "118.1-136.975 MHz",
        "description": "Système de secours VHF",
    },
    {
        "name": "PCR960M",
        "type": "HF",
        "status": SystemStatus.inactive,
        "location": "CCR Casablanca",
        "frequency": "2-30 MHz",
        "description": "Système de secours HF",
    },
]

# Source/target are system names, resolved after the systems exist.
DEFAULT_SCENARIOS = [
    {
        "name": "Basculement SITTI → PCR960M",
        "description": "Basculement du système principal vers le système de secours HF",
        "source": "SITTI",
        "target": "PCR960M",
        "steps": [
            "Vérifier l'état du système SITTI",
            "Activer le système PCR960M",
            "Transférer les fréquences HF",
            "Tester la communication",
            "Confirmer le basculement",
        ],
        "estimated_time": 5,
        "priority": Priority.high,
    },
    {
        "name": "Basculement SITTI → GAREX300",
        "description": "Basculement du système principal vers le système de secours VHF",
        "source": "SITTI",
        "target": "GAREX300",
        "steps": [
            "Vérifier l'état du système SITTI",
            "Activer le système GAREX300",
            "Transférer les fréquences VHF",
            "Tester la communication",
            "Confirmer le basculement",
        ],
        "estimated_time": 5,
        "priority": Priority.high,
    },
    {
        "name": "Panne Totale SITTI",
        "description": "Activation simultanée des systèmes de secours",
        "source": "SITTI",
        "target": None,
        "steps": [
            "Diagnostiquer la panne SITTI",
            "Activer PCR960M pour HF",
            "Activer GAREX300 pour VHF",
            "Coordonner avec les aéronefs",
            "Documenter l'incident",
        ],
        "estimated_time": 10,
        "priority": Priority.critical,
    },
]


def _seed_users(db: Session, settings: Settings) -> bool:
    if db.scalars(select(User).where(User.username == "admin")).first() is not None:
        return False
    db.add_all(
        [
            User(
                username="admin",
                password_hash=hash_password(settings.DEFAULT_ADMIN_PASSWORD),
                full_name="Administrator",
                email="admin@ccr-casa.ma",
                role=UserRole.admin,
            ),
            User(
                username="atsep",
                password_hash=hash_password(settings.DEFAULT_ATSEP_PASSWORD),
                full_name="ATSEP Operator",
                email="atsep@ccr-casa.ma",
                role=UserRole.atsep,
            ),
        ]
    )
    return True


def _seed_systems(db: Session) -> bool:
    if db.scalar(select(func.count(System.id))):
        return False
    db.add_all([System(**row) for row in DEFAULT_SYSTEMS])
    return True


def _seed_scenarios(db: Session) -> bool:
    if db.scalar(select(func.count(Scenario.id))):
        return False
    db.flush()
    ids = {name: system_id for system_id, name in db.execute(select(System.id, System.name)).all()}
    for row in DEFAULT_SCENARIOS:
        row = dict(row)
        source, target = row.pop("source"), row.pop("target")
        db.add(
            Scenario(
                **row,
                source_system_id=ids.get(source) if source else None,
                target_system_id=ids.get(target) if target else None,
            )
        )
    return True


def seed_defaults(db: Session, settings: Settings) -> dict[str, bool]:
    """Insert whatever default rows are missing. Safe to call on every startup."""

    with transaction(db):
        created = {
            "users": _seed_users(db, settings),
            "systems": _seed_systems(db),
            "scenarios": _seed_scenarios(db),
        }
    if any(created.values()):
        logger.info("Default data created", extra=created)
    return created


__all__ = ["DEFAULT_SCENARIOS", "DEFAULT_SYSTEMS", "seed_defaults"]
