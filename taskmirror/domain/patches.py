"""Partial-update deltas.

Each field is tri-state: ``UNSET`` leaves the stored value alone, ``None``
clears a nullable column and anything else replaces it.
"""
from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

from .enums import ReminderFrequency


class _Unset(Enum):
    UNSET = "UNSET"

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET = _Unset.UNSET


def is_set(value: Any) -> bool:
    return value is not UNSET


class _Patch:
    _non_nullable: frozenset[str] = frozenset()

    def changes(self) -> dict[str, Any]:
        return {
            field.name: getattr(self, field.name)
            for field in fields(self)  # type: ignore[arg-type]
            if is_set(getattr(self, field.name))
        }

    def is_empty(self) -> bool:
        return not self.changes()

    def __post_init__(self) -> None:
        for name in self._non_nullable:
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be cleared")


@dataclass(frozen=True)
class TaskPatch(_Patch):
    title: Union[str, _Unset] = UNSET
    notes: Union[Optional[str], _Unset] = UNSET
    deadline: Union[Optional[datetime], _Unset] = UNSET
    has_calendar_integration: Union[bool, _Unset] = UNSET
    calendar_email: Union[Optional[str], _Unset] = UNSET
    reminder_frequency: Union[ReminderFrequency, _Unset] = UNSET

    _non_nullable = frozenset({"title", "has_calendar_integration", "reminder_frequency"})


@dataclass(frozen=True)
class SettingsPatch(_Patch):
    dark_mode: Union[bool, _Unset] = UNSET
    notifications_enabled: Union[bool, _Unset] = UNSET
    default_reminder_frequency: Union[ReminderFrequency, _Unset] = UNSET

    _non_nullable = frozenset({"dark_mode", "notifications_enabled", "default_reminder_frequency"})
