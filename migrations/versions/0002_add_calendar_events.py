"""add calendar events table"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0002_add_calendar_events"
down_revision = "0001_create_tasks"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "calendar_events",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "task_id",
            sa.String(length=36),
            sa.ForeignKey("tasks.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("google_event_id", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("synced_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("google_event_id", name="uq_calendar_events_google_event_id"),
    )
    op.create_index("ix_calendar_events_task_id", "calendar_events", ["task_id"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_calendar_events_task_id", table_name="calendar_events")
    op.drop_table("calendar_events")
