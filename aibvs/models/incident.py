"""Incident model."""
from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import DateTime, Enum as SqlEnum, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base
from .scenario import Priority


class IncidentStatus(str, PyEnum):
    """Lifecycle of an incident."""

    open = "open"
    in_progress = "in_progress"
    resolved = "resolved"
    closed = "closed"


RESOLVED_STATES = (IncidentStatus.resolved, IncidentStatus.closed)


class Incident(Base):
    """An operational problem or the record of a scenario execution."""

    __tablename__ = "incidents"
    __table_args__ = (
        Index("ix_incidents_created_at", "created_at"),
        Index("ix_incidents_status", "status"),
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    system_id: Mapped[int | None] = mapped_column(ForeignKey("systems.id"), nullable=True, index=True)
    severity: Mapped[Priority] = mapped_column(
        SqlEnum(Priority, name="incident_severity", create_constraint=True), nullable=False
    )
    status: Mapped[IncidentStatus] = mapped_column(
        SqlEnum(IncidentStatus, name="incident_status", create_constraint=True),
        nullable=False,
        default=IncidentStatus.open,
    )
    reported_by: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    resolved_by: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    system = relationship("System")
    reporter = relationship("User", foreign_keys=[reported_by])
    resolver = relationship("User", foreign_keys=[resolved_by])
