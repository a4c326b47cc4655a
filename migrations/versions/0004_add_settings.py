"""add settings table"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0004_add_settings"
down_revision = "0003_add_calendar_credentials"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "settings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("dark_mode", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "notifications_enabled",
            sa.Boolean(),
            nullable=False,
            server_default=sa.true(),
        ),
        sa.Column(
            "default_reminder_frequency",
            sa.String(length=20),
            nullable=False,
            server_default="none",
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("id = 1", name="ck_settings_singleton"),
    )


def downgrade() -> None:
    op.drop_table("settings")
