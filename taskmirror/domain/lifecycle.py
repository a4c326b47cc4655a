from __future__ import annotations

from .enums import TaskStatus
from .errors import InvalidInput

ALLOWED_SOURCES: dict[TaskStatus, frozenset[TaskStatus]] = {
    TaskStatus.ONGOING: frozenset({TaskStatus.NOT_STARTED, TaskStatus.PAUSED}),
    TaskStatus.PAUSED: frozenset({TaskStatus.ONGOING}),
    TaskStatus.COMPLETED: frozenset(
        {TaskStatus.NOT_STARTED, TaskStatus.ONGOING, TaskStatus.PAUSED}
    ),
    TaskStatus.NOT_STARTED: frozenset(TaskStatus),
}


def check_transition(current: TaskStatus, target: TaskStatus) -> None:
    if current not in ALLOWED_SOURCES[target]:
        raise InvalidInput(f"Cannot move a task from {current} to {target}")
