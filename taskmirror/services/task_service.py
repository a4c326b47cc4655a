from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Mapping, Union

from taskmirror.domain.entities import TaskEntity
from taskmirror.domain.errors import InvalidInput
from taskmirror.domain.filters import TaskFilters
from taskmirror.domain.parsing import (
    parse_day,
    parse_instant,
    parse_task_id,
    task_patch_from_payload,
)
from taskmirror.domain.patches import TaskPatch
from taskmirror.infra.credentials import SettingsRepository
from taskmirror.infra.repository import TaskRepository

from .calendar_sync import CalendarSyncEngine

logger = logging.getLogger(__name__)


class TaskService:
    def __init__(
        self,
        repo: TaskRepository,
        sync: CalendarSyncEngine,
        settings: SettingsRepository,
    ) -> None:
        self._repo = repo
        self._sync = sync
        self._settings = settings

    def create_task(
        self,
        title: str,
        created_at: Union[str, datetime, None] = None,
    ) -> TaskEntity:
        if not title or not title.strip():
            raise InvalidInput("title cannot be empty")
        created = parse_instant(created_at) if created_at is not None else None
        defaults = self._settings.get()
        task = self._repo.create_task(
            title.strip(),
            created_at=created,
            reminder_frequency=defaults.default_reminder_frequency,
        )
        logger.info("Task created id=%s", task.id)
        return task

    def get_task(self, task_id: str) -> TaskEntity:
        return self._repo.get_task(parse_task_id(task_id))

    def list_tasks_by_date(
        self,
        day: Union[str, date],
        *,
        include_completed: bool = True,
    ) -> list[TaskEntity]:
        filters = TaskFilters(day=parse_day(day), include_completed=include_completed)
        return self._repo.list_tasks(filters)

    def start_task(self, task_id: str) -> TaskEntity:
        return self._sync.start_task(parse_task_id(task_id))

    def pause_task(self, task_id: str) -> TaskEntity:
        return self._sync.pause_task(parse_task_id(task_id))

    def resume_task(self, task_id: str) -> TaskEntity:
        return self._sync.resume_task(parse_task_id(task_id))

    def complete_task(self, task_id: str) -> TaskEntity:
        return self._sync.complete_task(parse_task_id(task_id))

    def reset_task(self, task_id: str) -> TaskEntity:
        return self._sync.reset_task(parse_task_id(task_id))

    def delete_task(self, task_id: str) -> None:
        self._sync.delete_task(parse_task_id(task_id))

    def update_task(
        self,
        task_id: str,
        data: Union[Mapping[str, Any], TaskPatch],
    ) -> TaskEntity:
        patch = data if isinstance(data, TaskPatch) else task_patch_from_payload(data)
        return self._sync.update_task(parse_task_id(task_id), patch)
