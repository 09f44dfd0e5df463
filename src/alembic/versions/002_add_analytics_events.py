"""Add analytics_events table

Revision ID: 002
Revises: 001
Create Date: 2026-10-18 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
import sqlmodel

from alembic import op

revision: str = "002"
down_revision: str | None = "001"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "analytics_events",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("path", sqlmodel.sql.sqltypes.AutoString(length=500), nullable=False),
        sa.Column("method", sqlmodel.sql.sqltypes.AutoString(length=10), nullable=False),
        sa.Column("account_id", sa.Uuid(), nullable=True),
        sa.Column("session_id", sqlmodel.sql.sqltypes.AutoString(length=64), nullable=False),
        sa.Column("ip_address", sqlmodel.sql.sqltypes.AutoString(length=64), nullable=True),
        sa.Column("user_agent", sqlmodel.sql.sqltypes.AutoString(length=500), nullable=True),
        sa.Column("referer", sqlmodel.sql.sqltypes.AutoString(length=500), nullable=True),
        sa.Column("status_code", sa.Integer(), nullable=False),
        sa.Column("response_time_ms", sa.Float(), nullable=False, server_default="0"),
        sa.Column(
            "client_tracked", sa.Boolean(), nullable=False, server_default=sa.text("false")
        ),
        sa.Column("occurred_at", sa.DateTime(), nullable=False),
        sa.Column("date_bucket", sqlmodel.sql.sqltypes.AutoString(length=10), nullable=False),
        sa.Column("hour_bucket", sqlmodel.sql.sqltypes.AutoString(length=13), nullable=False),
        sa.ForeignKeyConstraint(["account_id"], ["accounts.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_analytics_events_occurred_at", "analytics_events", ["occurred_at"], unique=False
    )
    op.create_index(
        "ix_analytics_events_date_bucket", "analytics_events", ["date_bucket"], unique=False
    )
    op.create_index(
        "ix_analytics_events_hour_bucket", "analytics_events", ["hour_bucket"], unique=False
    )
    # Composite indexes for per-path, per-visitor and per-account time ranges
    op.create_index(
        "ix_analytics_events_path_occurred", "analytics_events", ["path", "occurred_at"]
    )
    op.create_index(
        "ix_analytics_events_session_occurred", "analytics_events", ["session_id", "occurred_at"]
    )
    op.create_index(
        "ix_analytics_events_account_occurred", "analytics_events", ["account_id", "occurred_at"]
    )


def downgrade() -> None:
    op.drop_index("ix_analytics_events_account_occurred", table_name="analytics_events")
    op.drop_index("ix_analytics_events_session_occurred", table_name="analytics_events")
    op.drop_index("ix_analytics_events_path_occurred", table_name="analytics_events")
    op.drop_index("ix_analytics_events_hour_bucket", table_name="analytics_events")
    op.drop_index("ix_analytics_events_date_bucket", table_name="analytics_events")
    op.drop_index("ix_analytics_events_occurred_at", table_name="analytics_events")
    op.drop_table("analytics_events")
