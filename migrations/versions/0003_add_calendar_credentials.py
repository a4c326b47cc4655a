"""add calendar credentials table"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0003_add_calendar_credentials"
down_revision = "0002_add_calendar_events"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "calendar_credentials",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("access_token", sa.Text(), nullable=False),
        sa.Column("refresh_token", sa.Text(), nullable=False),
        sa.Column("token_expiry", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("id = 1", name="ck_calendar_credentials_singleton"),
    )


def downgrade() -> None:
    op.drop_table("calendar_credentials")
