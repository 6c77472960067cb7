"""Audit log model."""
from typing import Any

from sqlalchemy import Index, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class AuditLog(Base):
    """Immutable record of a mutating action.

    ``user_id`` and ``entity_id`` are weak references: the referenced rows may
    change or disappear without the log being rewritten.
    """

    __tablename__ = "logs"
    __table_args__ = (
        Index("ix_logs_created_at", "created_at"),
        Index("ix_logs_entity", "entity_type", "entity_id"),
    )

    action: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    entity_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    entity_id: Mapped[int | None] = mapped_column(nullable=True)
    user_id: Mapped[int | None] = mapped_column(nullable=True, index=True)
    details: Mapped[Any] = mapped_column(JSON, nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
