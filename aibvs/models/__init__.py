"""ORM models package."""
from .alert import Alert
from .audit import AuditLog
from .base import Base
from .incident import Incident, IncidentStatus, RESOLVED_STATES
from .scenario import PRIORITY_RANK, Priority, Scenario
from .system import System, SystemStatus
from .user import User, UserRole

__all__ = [
    "Alert",
    "AuditLog",
    "Base",
    "Incident",
    "IncidentStatus",
    "RESOLVED_STATES",
    "PRIORITY_RANK",
    "Priority",
    "Scenario",
    "System",
    "SystemStatus",
    "User",
    "UserRole",
]
