"""Failover scenario model."""
from enum import Enum as PyEnum

from sqlalchemy import Enum as SqlEnum, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class Priority(str, PyEnum):
    """Shared priority/severity scale."""

    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


PRIORITY_RANK = {
    Priority.critical: 4,
    Priority.high: 3,
    Priority.medium: 2,
    Priority.low: 1,
}


class Scenario(Base):
    """A predefined failover plan between two systems."""

    __tablename__ = "scenarios"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    source_system_id: Mapped[int | None] = mapped_column(ForeignKey("systems.id"), nullable=True)
    target_system_id: Mapped[int | None] = mapped_column(ForeignKey("systems.id"), nullable=True)
    steps: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    estimated_time: Mapped[int | None] = mapped_column(Integer, nullable=True)
    priority: Mapped[Priority] = mapped_column(
        SqlEnum(Priority, name="scenario_priority", create_constraint=True), nullable=False
    )

    source_system = relationship("System", foreign_keys=[source_system_id])
    target_system = relationship("System", foreign_keys=[target_system_id])
