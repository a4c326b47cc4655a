from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    TypeDecorator,
)
from sqlalchemy.orm import Session

from .db import Base

SINGLETON_ID = 1


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """Stores naive UTC, hands back aware UTC datetimes."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError(f"naive datetime cannot be stored: {value!r}")
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class TaskModel(Base):
    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True)
    title = Column(String(255), nullable=False)
    notes = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="not-started", index=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow)
    deadline = Column(UTCDateTime, nullable=True)
    has_calendar_integration = Column(Boolean, nullable=False, default=False)
    calendar_email = Column(String(255), nullable=True)
    reminder_frequency = Column(String(20), nullable=False, default="none")
    started_at = Column(UTCDateTime, nullable=True)
    paused_at = Column(UTCDateTime, nullable=True)
    completed_at = Column(UTCDateTime, nullable=True)


class CalendarEventModel(Base):
    __tablename__ = "calendar_events"

    id = Column(Integer, primary_key=True)
    task_id = Column(
        String(36),
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    google_event_id = Column(String(255), nullable=False, unique=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)
    synced_at = Column(UTCDateTime, nullable=False, default=utcnow)


class CalendarCredentialModel(Base):
    __tablename__ = "calendar_credentials"
    __table_args__ = (CheckConstraint("id = 1", name="ck_calendar_credentials_singleton"),)

    id = Column(Integer, primary_key=True, default=SINGLETON_ID)
    email = Column(String(255), nullable=False)
    access_token = Column(Text, nullable=False)
    refresh_token = Column(Text, nullable=False)
    token_expiry = Column(UTCDateTime, nullable=False)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)


class SettingsModel(Base):
    __tablename__ = "settings"
    __table_args__ = (CheckConstraint("id = 1", name="ck_settings_singleton"),)

    id = Column(Integer, primary_key=True, default=SINGLETON_ID)
    dark_mode = Column(Boolean, nullable=False, default=False)
    notifications_enabled = Column(Boolean, nullable=False, default=True)
    default_reminder_frequency = Column(String(20), nullable=False, default="none")
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)


def ensure_singleton_rows(session: Session) -> None:
    if session.get(SettingsModel, SINGLETON_ID) is None:
        session.add(SettingsModel(id=SINGLETON_ID))
