from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .enums import ReminderFrequency, ReminderMethod, TaskStatus


@dataclass(frozen=True)
class TaskEntity:
    id: str
    title: str
    notes: Optional[str]
    status: TaskStatus
    created_at: datetime
    updated_at: datetime
    deadline: Optional[datetime]
    has_calendar_integration: bool
    calendar_email: Optional[str]
    reminder_frequency: ReminderFrequency
    started_at: Optional[datetime]
    paused_at: Optional[datetime]
    completed_at: Optional[datetime]


@dataclass(frozen=True)
class CalendarCredential:
    email: str
    access_token: str
    refresh_token: str
    token_expiry: datetime

    @property
    def is_placeholder(self) -> bool:
        return not self.email.strip() or not self.access_token.strip()


@dataclass(frozen=True)
class SettingsEntity:
    dark_mode: bool
    notifications_enabled: bool
    default_reminder_frequency: ReminderFrequency
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Reminder:
    method: ReminderMethod
    minutes: int

    def to_payload(self) -> dict:
        return {"method": self.method.value, "minutes": self.minutes}
