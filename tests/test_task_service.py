from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from taskmirror.domain.enums import ReminderFrequency, TaskStatus
from taskmirror.domain.errors import InvalidInput, TaskNotFound
from taskmirror.domain.patches import SettingsPatch

UNKNOWN_ID = "0190d9d6-1111-7000-8000-000000000000"


def test_new_task_takes_default_reminder_frequency(service, settings_repo, clock) -> None:
    settings_repo.update(SettingsPatch(default_reminder_frequency=ReminderFrequency.DAILY))

    task = service.create_task("  Plan sprint  ")

    assert task.title == "Plan sprint"
    assert task.status is TaskStatus.NOT_STARTED
    assert task.reminder_frequency is ReminderFrequency.DAILY
    assert task.has_calendar_integration is False
    assert task.created_at == clock.now


def test_create_task_rejects_blank_title(service) -> None:
    with pytest.raises(InvalidInput):
        service.create_task("   ")


def test_create_task_rejects_bad_timestamp(service) -> None:
    with pytest.raises(InvalidInput):
        service.create_task("Plan sprint", "yesterday")


def test_list_tasks_by_date(service, clock) -> None:
    first = service.create_task("Morning", "2026-03-01T08:00:00Z")
    second = service.create_task("Evening", "2026-03-01T20:00:00+00:00")
    service.create_task("Next day", "2026-03-02T00:00:00Z")
    service.complete_task(first.id)

    everything = service.list_tasks_by_date("2026-03-01")
    open_only = service.list_tasks_by_date(date(2026, 3, 1), include_completed=False)

    assert [task.id for task in everything] == [second.id, first.id]
    assert [task.id for task in open_only] == [second.id]


def test_get_task_validates_id(service) -> None:
    with pytest.raises(InvalidInput):
        service.get_task("not-a-uuid")
    with pytest.raises(TaskNotFound):
        service.get_task(UNKNOWN_ID)


def test_update_task_accepts_camel_case_payload(service, fake_calendar, connected) -> None:
    task = service.create_task("Quarterly review")

    updated = service.update_task(
        task.id,
        {
            "deadline": "2026-03-05T17:00:00Z",
            "hasCalendarIntegration": True,
            "reminderFrequency": "every-3-hours",
            "calendarEmail": "me@example.com",
        },
    )

    assert updated.deadline == datetime(2026, 3, 5, 17, 0, tzinfo=timezone.utc)
    assert updated.reminder_frequency is ReminderFrequency.EVERY_3_HOURS
    assert updated.calendar_email == "me@example.com"
    assert fake_calendar.ops() == ["create"]


def test_update_task_keeps_omitted_fields_and_clears_empty_notes(service) -> None:
    task = service.create_task("Draft")
    service.update_task(task.id, {"notes": "first pass", "reminder_frequency": "hourly"})

    updated = service.update_task(task.id, {"notes": "", "title": "Draft v2"})

    assert updated.title == "Draft v2"
    assert updated.notes is None
    assert updated.reminder_frequency is ReminderFrequency.HOURLY


@pytest.mark.parametrize(
    "payload",
    [
        {"reminder_frequency": "weekly"},
        {"deadline": "next friday"},
        {"deadline": "2026-03-05T17:00:00"},
        {"has_calendar_integration": "yes"},
        {"title": ""},
        {"priority": 3},
    ],
)
def test_update_task_rejects_malformed_input(service, payload) -> None:
    task = service.create_task("Draft")

    with pytest.raises(InvalidInput):
        service.update_task(task.id, payload)


def test_lifecycle_timestamps(service, clock) -> None:
    task = service.create_task("Focus block")

    started = service.start_task(task.id)
    clock.advance(minutes=25)
    paused = service.pause_task(task.id)
    clock.advance(minutes=5)
    resumed = service.resume_task(task.id)
    clock.advance(minutes=25)
    completed = service.complete_task(task.id)

    assert started.started_at == resumed.started_at
    assert paused.paused_at == started.started_at + timedelta(minutes=25)
    assert resumed.paused_at is None
    assert completed.status is TaskStatus.COMPLETED
    assert completed.completed_at == clock.now


def test_reset_clears_progress(service) -> None:
    task = service.create_task("Retry")
    service.start_task(task.id)
    service.pause_task(task.id)

    reset = service.reset_task(task.id)

    assert reset.status is TaskStatus.NOT_STARTED
    assert reset.started_at is None
    assert reset.paused_at is None
    assert reset.completed_at is None


def test_delete_task(service) -> None:
    task = service.create_task("Throwaway")

    service.delete_task(task.id)

    with pytest.raises(TaskNotFound):
        service.get_task(task.id)
    with pytest.raises(TaskNotFound):
        service.delete_task(task.id)
