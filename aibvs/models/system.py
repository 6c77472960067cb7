"""Communication system model."""
from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import DateTime, Enum as SqlEnum, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, _utcnow


class SystemStatus(str, PyEnum):
    """Operational status of a radio system."""

    active = "active"
    failure = "failure"
    backup = "backup"
    inactive = "inactive"


class System(Base):
    """A supervised communication resource (VHF/HF radio chain)."""

    __tablename__ = "systems"
    __table_args__ = (Index("ix_systems_status", "status"),)

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[SystemStatus] = mapped_column(
        SqlEnum(SystemStatus, name="system_status", create_constraint=True),
        nullable=False,
        default=SystemStatus.inactive,
    )
    location: Mapped[str | None] = mapped_column(String(200), nullable=True)
    frequency: Mapped[str | None] = mapped_column(String(200), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_check: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
