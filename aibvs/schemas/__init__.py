"""Schema package exports."""
from .alert import AlertRead
from .audit import AuditLogCreate, AuditLogCreated, AuditLogRead
from .auth import LoginRequest, RegisterResponse, TokenResponse
from .incident import IncidentCreate, IncidentDetail, IncidentRead, IncidentStats, IncidentUpdate
from .scenario import ExecutionResult, ScenarioCreate, ScenarioDetail, ScenarioExecute, ScenarioRead
from .stats import DailyCount, SeverityCount, StatusCount, SystemCount
from .system import SwitchResult, SystemCreate, SystemRead, SystemStats, SystemSwitch, SystemUpdate
from .user import UserCreate, UserRead, UserUpdate

__all__ = [
    "AlertRead",
    "AuditLogCreate",
    "AuditLogCreated",
    "AuditLogRead",
    "LoginRequest",
    "RegisterResponse",
    "TokenResponse",
    "IncidentCreate",
    "IncidentDetail",
    "IncidentRead",
    "IncidentStats",
    "IncidentUpdate",
    "ExecutionResult",
    "ScenarioCreate",
    "ScenarioDetail",
    "ScenarioExecute",
    "ScenarioRead",
    "DailyCount",
    "SeverityCount",
    "StatusCount",
    "SystemCount",
    "SwitchResult",
    "SystemCreate",
    "SystemRead",
    "SystemStats",
    "SystemSwitch",
    "SystemUpdate",
    "UserCreate",
    "UserRead",
    "UserUpdate",
]
