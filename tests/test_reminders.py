from __future__ import annotations

from datetime import timedelta

from taskmirror.domain.entities import Reminder
from taskmirror.domain.enums import ReminderFrequency, ReminderMethod
from taskmirror.domain.reminders import build_reminders

EMAIL = Reminder(ReminderMethod.EMAIL, 60)


def _popups(*minutes: int) -> list[Reminder]:
    return [Reminder(ReminderMethod.POPUP, value) for value in minutes]


def test_hourly_is_capped_at_four_popups(clock) -> None:
    reminders = build_reminders(ReminderFrequency.HOURLY, clock.now + timedelta(hours=10), clock.now)

    assert reminders == _popups(60, 120, 180, 240) + [EMAIL]


def test_popups_are_bounded_by_whole_intervals_left(clock) -> None:
    deadline = clock.now + timedelta(hours=7, minutes=59)

    reminders = build_reminders(ReminderFrequency.EVERY_3_HOURS, deadline, clock.now)

    assert reminders == _popups(180, 360) + [EMAIL]


def test_daily_with_less_than_a_day_left_keeps_only_email(clock) -> None:
    reminders = build_reminders(ReminderFrequency.DAILY, clock.now + timedelta(hours=20), clock.now)

    assert reminders == [EMAIL]


def test_none_frequency_yields_no_reminders(clock) -> None:
    assert build_reminders(ReminderFrequency.NONE, clock.now + timedelta(days=3), clock.now) == []


def test_past_deadline_has_no_popups(clock) -> None:
    reminders = build_reminders(ReminderFrequency.HOURLY, clock.now - timedelta(hours=1), clock.now)

    assert reminders == [EMAIL]


def test_reminders_follow_the_current_time(clock) -> None:
    deadline = clock.now + timedelta(hours=3)
    early = build_reminders(ReminderFrequency.HOURLY, deadline, clock.now)
    clock.advance(hours=2)
    late = build_reminders(ReminderFrequency.HOURLY, deadline, clock.now)

    assert early == _popups(60, 120, 180) + [EMAIL]
    assert late == _popups(60) + [EMAIL]
