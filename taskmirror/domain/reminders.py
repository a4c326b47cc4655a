from __future__ import annotations

from datetime import datetime

from .entities import Reminder
from .enums import ReminderFrequency, ReminderMethod

MAX_POPUP_REMINDERS = 4
EMAIL_REMINDER_MINUTES = 60


def build_reminders(
    frequency: ReminderFrequency,
    deadline: datetime,
    now: datetime,
) -> list[Reminder]:
    """Reminder overrides for an event ending at ``deadline``.

    ``ReminderFrequency.NONE`` yields no reminders at all, which is how a
    paused task keeps its event without notifying the user. Otherwise one
    popup per whole interval left before the deadline (at most four), plus a
    single email an hour ahead. Google accepts at most five overrides.
    """
    if frequency is ReminderFrequency.NONE:
        return []

    interval = frequency.interval_minutes
    remaining_minutes = int((deadline - now).total_seconds() // 60)
    count = max(0, min(MAX_POPUP_REMINDERS, remaining_minutes // interval))

    reminders = [
        Reminder(ReminderMethod.POPUP, interval * step) for step in range(1, count + 1)
    ]
    reminders.append(Reminder(ReminderMethod.EMAIL, EMAIL_REMINDER_MINUTES))
    return reminders
