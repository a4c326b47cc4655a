from __future__ import annotations

import logging
import os
import time
import uuid
from collections.abc import Callable
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from taskmirror.domain.entities import TaskEntity
from taskmirror.domain.enums import ReminderFrequency, TaskStatus
from taskmirror.domain.errors import TaskNotFound
from taskmirror.domain.filters import TaskFilters
from taskmirror.domain.lifecycle import check_transition
from taskmirror.domain.patches import TaskPatch

from .db import Database
from .models import CalendarEventModel, TaskModel, utcnow

logger = logging.getLogger(__name__)

STATUS_COMPLETED = TaskStatus.COMPLETED.value


def new_task_id() -> str:
    """Time-ordered UUID: 48-bit millisecond timestamp, version 7, RFC 4122 variant."""
    millis = int(time.time() * 1000) & ((1 << 48) - 1)
    random_bits = int.from_bytes(os.urandom(10), "big")
    value = (millis << 80) | random_bits
    value = (value & ~(0xF << 76)) | (0x7 << 76)
    value = (value & ~(0x3 << 62)) | (0x2 << 62)
    return str(uuid.UUID(int=value))


def _to_entity(model: TaskModel) -> TaskEntity:
    return TaskEntity(
        id=model.id,
        title=model.title,
        notes=model.notes,
        status=TaskStatus(model.status),
        created_at=model.created_at,
        updated_at=model.updated_at,
        deadline=model.deadline,
        has_calendar_integration=bool(model.has_calendar_integration),
        calendar_email=model.calendar_email,
        reminder_frequency=ReminderFrequency(model.reminder_frequency),
        started_at=model.started_at,
        paused_at=model.paused_at,
        completed_at=model.completed_at,
    )


def _apply_status(model: TaskModel, status: TaskStatus, now: datetime) -> None:
    if status is TaskStatus.ONGOING:
        model.started_at = model.started_at or now
        model.paused_at = None
        model.completed_at = None
    elif status is TaskStatus.PAUSED:
        model.paused_at = now
    elif status is TaskStatus.COMPLETED:
        model.completed_at = now
        model.paused_at = None
    else:
        model.started_at = None
        model.paused_at = None
        model.completed_at = None
    model.status = status.value
    model.updated_at = now


class TaskRepository:
    def __init__(self, database: Database, clock: Callable[[], datetime] = utcnow) -> None:
        self._db = database
        self._clock = clock

    def list_tasks(self, filters: TaskFilters) -> list[TaskEntity]:
        start, end = filters.bounds()
        with self._db.session() as session:
            stmt = select(TaskModel).where(
                TaskModel.created_at >= start,
                TaskModel.created_at < end,
            )
            if not filters.include_completed:
                stmt = stmt.where(TaskModel.status != STATUS_COMPLETED)
            stmt = stmt.order_by(TaskModel.created_at.desc(), TaskModel.id.desc())
            return [_to_entity(task) for task in session.scalars(stmt)]

    def get_task(self, task_id: str) -> TaskEntity:
        with self._db.session() as session:
            return _to_entity(self._load(session, task_id))

    def create_task(
        self,
        title: str,
        *,
        created_at: Optional[datetime] = None,
        reminder_frequency: ReminderFrequency = ReminderFrequency.NONE,
    ) -> TaskEntity:
        now = self._clock()
        with self._db.session() as session:
            task = TaskModel(
                id=new_task_id(),
                title=title,
                status=TaskStatus.NOT_STARTED.value,
                created_at=created_at or now,
                updated_at=now,
                has_calendar_integration=False,
                reminder_frequency=reminder_frequency.value,
            )
            session.add(task)
            session.flush()
            logger.debug("Task created id=%s", task.id)
            return _to_entity(task)

    def update_status(self, task_id: str, status: TaskStatus) -> TaskEntity:
        now = self._clock()
        with self._db.session() as session:
            task = self._load(session, task_id)
            check_transition(TaskStatus(task.status), status)
            _apply_status(task, status, now)
            session.flush()
            return _to_entity(task)

    def update_fields(self, task_id: str, patch: TaskPatch) -> tuple[TaskEntity, TaskEntity]:
        """Apply only the fields present in ``patch``; return (prior, updated)."""
        now = self._clock()
        with self._db.session() as session:
            task = self._load(session, task_id)
            prior = _to_entity(task)
            for key, value in patch.changes().items():
                if isinstance(value, ReminderFrequency):
                    value = value.value
                setattr(task, key, value)
            task.updated_at = now
            session.flush()
            return prior, _to_entity(task)

    def delete_task(self, task_id: str) -> int:
        with self._db.session() as session:
            session.execute(delete(CalendarEventModel).where(CalendarEventModel.task_id == task_id))
            result = session.execute(delete(TaskModel).where(TaskModel.id == task_id))
            return result.rowcount or 0

    def get_linked_event_id(self, task_id: str) -> Optional[str]:
        with self._db.session() as session:
            return session.scalar(
                select(CalendarEventModel.google_event_id).where(
                    CalendarEventModel.task_id == task_id
                )
            )

    def set_linked_event_id(self, task_id: str, event_id: str) -> None:
        now = self._clock()
        with self._db.session() as session:
            self._load(session, task_id)
            link = session.scalar(
                select(CalendarEventModel).where(CalendarEventModel.task_id == task_id)
            )
            if link is None:
                session.add(
                    CalendarEventModel(
                        task_id=task_id,
                        google_event_id=event_id,
                        created_at=now,
                        updated_at=now,
                        synced_at=now,
                    )
                )
            else:
                link.google_event_id = event_id
                link.updated_at = now
                link.synced_at = now

    def touch_linked_event(self, task_id: str) -> None:
        with self._db.session() as session:
            link = session.scalar(
                select(CalendarEventModel).where(CalendarEventModel.task_id == task_id)
            )
            if link is not None:
                link.synced_at = self._clock()

    def clear_linked_event_id(self, task_id: str) -> None:
        with self._db.session() as session:
            session.execute(delete(CalendarEventModel).where(CalendarEventModel.task_id == task_id))

    @staticmethod
    def _load(session: Session, task_id: str) -> TaskModel:
        task = session.get(TaskModel, task_id)
        if task is None:
            raise TaskNotFound(task_id)
        return task
