from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import Any, Mapping

from .enums import ReminderFrequency, TaskStatus
from .errors import InvalidInput
from .patches import UNSET, SettingsPatch, TaskPatch

_TASK_FIELDS = {
    "title": "title",
    "notes": "notes",
    "deadline": "deadline",
    "has_calendar_integration": "has_calendar_integration",
    "hasCalendarIntegration": "has_calendar_integration",
    "calendar_email": "calendar_email",
    "calendarEmail": "calendar_email",
    "reminder_frequency": "reminder_frequency",
    "reminderFrequency": "reminder_frequency",
}

_SETTINGS_FIELDS = {
    "dark_mode": "dark_mode",
    "darkMode": "dark_mode",
    "notifications_enabled": "notifications_enabled",
    "notificationsEnabled": "notifications_enabled",
    "default_reminder_frequency": "default_reminder_frequency",
    "defaultReminderFrequency": "default_reminder_frequency",
}


def parse_task_id(value: str) -> str:
    try:
        return str(uuid.UUID(str(value).strip()))
    except (ValueError, AttributeError) as exc:
        raise InvalidInput(f"Invalid task id: {value!r}") from exc


def parse_instant(value: str | datetime) -> datetime:
    """Parse an RFC 3339 instant and normalize it to aware UTC."""
    if isinstance(value, datetime):
        parsed = value
    else:
        raw = str(value).strip()
        if raw.endswith(("Z", "z")):
            raw = raw[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError as exc:
            raise InvalidInput(f"Invalid datetime format: {value!r}") from exc
    if parsed.tzinfo is None:
        raise InvalidInput(f"Datetime must carry a UTC offset: {value!r}")
    return parsed.astimezone(timezone.utc)


def parse_day(value: str | date) -> date:
    if isinstance(value, datetime):
        return parse_instant(value).date()
    if isinstance(value, date):
        return value
    raw = str(value).strip()
    try:
        return date.fromisoformat(raw)
    except ValueError:
        return parse_instant(raw).date()


def parse_reminder_frequency(value: str | ReminderFrequency) -> ReminderFrequency:
    try:
        return ReminderFrequency(value)
    except ValueError as exc:
        raise InvalidInput(f"Invalid reminder frequency: {value!r}") from exc


def parse_status(value: str | TaskStatus) -> TaskStatus:
    try:
        return TaskStatus(value)
    except ValueError as exc:
        raise InvalidInput(f"Invalid task status: {value!r}") from exc


def _parse_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    raise InvalidInput(f"{name} must be a boolean, got {value!r}")


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


def task_patch_from_payload(payload: Mapping[str, Any]) -> TaskPatch:
    """Build a ``TaskPatch`` from a loosely typed payload.

    Keys may be snake_case or camelCase. Empty ``notes``/``calendar_email``
    clear the column; a ``None`` deadline clears the deadline.
    """
    values: dict[str, Any] = {}
    for key, raw in payload.items():
        name = _TASK_FIELDS.get(key)
        if name is None:
            raise InvalidInput(f"Unknown task field: {key}")
        values[name] = raw

    title = values.get("title", UNSET)
    if title is not UNSET:
        if title is None or not str(title).strip():
            raise InvalidInput("title cannot be empty")
        title = str(title).strip()

    notes = values.get("notes", UNSET)
    if notes is not UNSET:
        notes = _optional_text(notes)

    deadline = values.get("deadline", UNSET)
    if deadline is not UNSET and deadline is not None:
        deadline = parse_instant(deadline)

    enabled = values.get("has_calendar_integration", UNSET)
    if enabled is not UNSET:
        enabled = _parse_bool("has_calendar_integration", enabled)

    email = values.get("calendar_email", UNSET)
    if email is not UNSET:
        email = _optional_text(email)

    frequency = values.get("reminder_frequency", UNSET)
    if frequency is not UNSET:
        frequency = parse_reminder_frequency(frequency)

    return TaskPatch(
        title=title,
        notes=notes,
        deadline=deadline,
        has_calendar_integration=enabled,
        calendar_email=email,
        reminder_frequency=frequency,
    )


def settings_patch_from_payload(payload: Mapping[str, Any]) -> SettingsPatch:
    values: dict[str, Any] = {}
    for key, raw in payload.items():
        name = _SETTINGS_FIELDS.get(key)
        if name is None:
            raise InvalidInput(f"Unknown settings field: {key}")
        values[name] = raw

    dark_mode = values.get("dark_mode", UNSET)
    if dark_mode is not UNSET:
        dark_mode = _parse_bool("dark_mode", dark_mode)

    notifications = values.get("notifications_enabled", UNSET)
    if notifications is not UNSET:
        notifications = _parse_bool("notifications_enabled", notifications)

    frequency = values.get("default_reminder_frequency", UNSET)
    if frequency is not UNSET:
        frequency = parse_reminder_frequency(frequency)

    return SettingsPatch(
        dark_mode=dark_mode,
        notifications_enabled=notifications,
        default_reminder_frequency=frequency,
    )
