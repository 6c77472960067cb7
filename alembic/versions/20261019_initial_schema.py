"""initial console schema

Revision ID: 20261019_initial
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019_initial"
down_revision = None
branch_labels = None
depends_on = None

PRIORITIES = ("low", "medium", "high", "critical")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        *_timestamps(),
        sa.Column("username", sa.String(length=100), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column(
            "role",
            sa.Enum("admin", "atsep", name="user_role", create_constraint=True),
            nullable=False,
        ),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "systems",
        *_timestamps(),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("type", sa.String(length=50), nullable=False),
        sa.Column(
            "status",
            sa.Enum("active", "failure", "backup", "inactive", name="system_status", create_constraint=True),
            nullable=False,
        ),
        sa.Column("location", sa.String(length=200), nullable=True),
        sa.Column("frequency", sa.String(length=200), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("last_check", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_systems_status", "systems", ["status"])

    op.create_table(
        "scenarios",
        *_timestamps(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("source_system_id", sa.Integer(), sa.ForeignKey("systems.id"), nullable=True),
        sa.Column("target_system_id", sa.Integer(), sa.ForeignKey("systems.id"), nullable=True),
        sa.Column("steps", sa.JSON(), nullable=False),
        sa.Column("estimated_time", sa.Integer(), nullable=True),
        sa.Column(
            "priority",
            sa.Enum(*PRIORITIES, name="scenario_priority", create_constraint=True),
            nullable=False,
        ),
    )

    op.create_table(
        "incidents",
        *_timestamps(),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("system_id", sa.Integer(), sa.ForeignKey("systems.id"), nullable=True),
        sa.Column(
            "severity",
            sa.Enum(*PRIORITIES, name="incident_severity", create_constraint=True),
            nullable=False,
        ),
        sa.Column(
            "status",
            sa.Enum("open", "in_progress", "resolved", "closed", name="incident_status", create_constraint=True),
            nullable=False,
        ),
        sa.Column(
            "reported_by",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "resolved_by",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_incidents_system_id", "incidents", ["system_id"])
    op.create_index("ix_incidents_created_at", "incidents", ["created_at"])
    op.create_index("ix_incidents_status", "incidents", ["status"])

    op.create_table(
        "logs",
        *_timestamps(),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity_type", sa.String(length=50), nullable=True),
        sa.Column("entity_id", sa.Integer(), nullable=True),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("details", sa.JSON(), nullable=True),
        sa.Column("ip_address", sa.String(length=64), nullable=True),
    )
    op.create_index("ix_logs_action", "logs", ["action"])
    op.create_index("ix_logs_user_id", "logs", ["user_id"])
    op.create_index("ix_logs_created_at", "logs", ["created_at"])
    op.create_index("ix_logs_entity", "logs", ["entity_type", "entity_id"])

    op.create_table(
        "alerts",
        *_timestamps(),
        sa.Column("type", sa.String(length=100), nullable=False),
        sa.Column("message", sa.String(length=255), nullable=False),
        sa.Column("actor_user_id", sa.Integer(), nullable=True),
        sa.Column("payload_json", sa.JSON(), nullable=False),
    )
    op.create_index("ix_alerts_type", "alerts", ["type"])
    op.create_index("ix_alerts_created_at", "alerts", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_alerts_created_at", table_name="alerts")
    op.drop_index("ix_alerts_type", table_name="alerts")
    op.drop_table("alerts")
    op.drop_index("ix_logs_entity", table_name="logs")
    op.drop_index("ix_logs_created_at", table_name="logs")
    op.drop_index("ix_logs_user_id", table_name="logs")
    op.drop_index("ix_logs_action", table_name="logs")
    op.drop_table("logs")
    op.drop_index("ix_incidents_status", table_name="incidents")
    op.drop_index("ix_incidents_created_at", table_name="incidents")
    op.drop_index("ix_incidents_system_id", table_name="incidents")
    op.drop_table("incidents")
    op.drop_table("scenarios")
    op.drop_index("ix_systems_status", table_name="systems")
    op.drop_table("systems")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
