from __future__ import annotations

from enum import StrEnum


class TaskStatus(StrEnum):
    NOT_STARTED = "not-started"
    ONGOING = "ongoing"
    PAUSED = "paused"
    COMPLETED = "completed"


class ReminderFrequency(StrEnum):
    NONE = "none"
    HOURLY = "hourly"
    EVERY_3_HOURS = "every-3-hours"
    DAILY = "daily"

    @property
    def interval_minutes(self) -> int:
        return _INTERVAL_MINUTES[self]


_INTERVAL_MINUTES = {
    ReminderFrequency.NONE: 0,
    ReminderFrequency.HOURLY: 60,
    ReminderFrequency.EVERY_3_HOURS: 180,
    ReminderFrequency.DAILY: 1440,
}


class ReminderMethod(StrEnum):
    EMAIL = "email"
    POPUP = "popup"
