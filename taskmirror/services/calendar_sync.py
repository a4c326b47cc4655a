"""Keeps a task and its mirrored Google Calendar event consistent.

Every local mutation commits first, with the database lock held only for that
step. Remote I/O then runs on the shared ``AsyncRunner`` with no lock held,
and the outcome is written back to the task's linked-event-id in a second,
short storage call. How each remote error is handled is decided in one place,
``SYNC_POLICY``, and applied by ``CalendarSyncEngine._reconcile``.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from types import MappingProxyType
from typing import Optional, Protocol

from taskmirror.domain.entities import CalendarCredential, TaskEntity
from taskmirror.domain.enums import ReminderFrequency, TaskStatus
from taskmirror.domain.errors import (
    AuthRefreshFailed,
    EventNotFound,
    InvalidInput,
    NotConnected,
    RemoteFailure,
    TaskManagerError,
    TaskNotFound,
)
from taskmirror.domain.patches import TaskPatch
from taskmirror.infra.repository import TaskRepository

from .runner import AsyncRunner
from .token_supplier import TokenSupplier

logger = logging.getLogger(__name__)


class CalendarEvents(Protocol):
    async def create_event(
        self,
        access_token: str,
        *,
        title: str,
        notes: Optional[str],
        deadline: datetime,
        reminder_frequency: ReminderFrequency,
    ) -> str: ...

    async def update_event(
        self,
        access_token: str,
        event_id: str,
        *,
        title: str,
        notes: Optional[str],
        deadline: datetime,
        reminder_frequency: ReminderFrequency,
    ) -> None: ...

    async def delete_event(self, access_token: str, event_id: str) -> None: ...


class CredentialReader(Protocol):
    def get(self) -> Optional[CalendarCredential]: ...


class SyncAction(StrEnum):
    RESTORE_REMINDERS = "restore_reminders"
    SUPPRESS_REMINDERS = "suppress_reminders"
    UPDATE_EVENT = "update_event"
    CREATE_EVENT = "create_event"
    DETACH_ON_COMPLETE = "detach_on_complete"
    DETACH_ON_DELETE = "detach_on_delete"
    DETACH_ON_DISABLE = "detach_on_disable"


class Outcome(StrEnum):
    SELF_HEAL = "self_heal"
    LOG = "log"
    PROPAGATE = "propagate"


@dataclass(frozen=True)
class SyncRule:
    on_error: Mapping[type[TaskManagerError], Outcome]
    clears_link: bool = False
    default: Outcome = Outcome.LOG

    def outcome_for(self, exc: TaskManagerError) -> Outcome:
        for kind in type(exc).__mro__:
            if kind in self.on_error:
                return self.on_error[kind]
        return self.default


_BEST_EFFORT_UPDATE = MappingProxyType(
    {
        EventNotFound: Outcome.SELF_HEAL,
        RemoteFailure: Outcome.LOG,
        NotConnected: Outcome.LOG,
        AuthRefreshFailed: Outcome.LOG,
    }
)

_BEST_EFFORT_DELETE = MappingProxyType(
    {
        EventNotFound: Outcome.LOG,
        RemoteFailure: Outcome.LOG,
        NotConnected: Outcome.LOG,
        AuthRefreshFailed: Outcome.LOG,
    }
)

SYNC_POLICY: Mapping[SyncAction, SyncRule] = MappingProxyType(
    {
        SyncAction.RESTORE_REMINDERS: SyncRule(on_error=_BEST_EFFORT_UPDATE),
        SyncAction.SUPPRESS_REMINDERS: SyncRule(on_error=_BEST_EFFORT_UPDATE),
        SyncAction.UPDATE_EVENT: SyncRule(on_error=_BEST_EFFORT_UPDATE),
        SyncAction.CREATE_EVENT: SyncRule(on_error={}, default=Outcome.PROPAGATE),
        SyncAction.DETACH_ON_COMPLETE: SyncRule(on_error=_BEST_EFFORT_DELETE, clears_link=True),
        SyncAction.DETACH_ON_DELETE: SyncRule(on_error=_BEST_EFFORT_DELETE, clears_link=True),
        SyncAction.DETACH_ON_DISABLE: SyncRule(on_error=_BEST_EFFORT_DELETE, clears_link=True),
    }
)


@dataclass
class SyncReport:
    """What the last reconciliation did; useful for logging and tests."""

    action: SyncAction
    task_id: str
    event_id: Optional[str] = None
    outcome: Optional[Outcome] = None
    error: Optional[TaskManagerError] = field(default=None, repr=False)


class CalendarSyncEngine:
    def __init__(
        self,
        tasks: TaskRepository,
        credentials: CredentialReader,
        tokens: TokenSupplier,
        calendar: CalendarEvents,
        runner: AsyncRunner,
    ) -> None:
        self._tasks = tasks
        self._credentials = credentials
        self._tokens = tokens
        self._calendar = calendar
        self._runner = runner
        self.last_report: Optional[SyncReport] = None

    # ---- status transitions ----

    def start_task(self, task_id: str) -> TaskEntity:
        return self._transition(task_id, TaskStatus.ONGOING, SyncAction.RESTORE_REMINDERS)

    def resume_task(self, task_id: str) -> TaskEntity:
        return self._transition(task_id, TaskStatus.ONGOING, SyncAction.RESTORE_REMINDERS)

    def pause_task(self, task_id: str) -> TaskEntity:
        return self._transition(task_id, TaskStatus.PAUSED, SyncAction.SUPPRESS_REMINDERS)

    def reset_task(self, task_id: str) -> TaskEntity:
        return self._transition(task_id, TaskStatus.NOT_STARTED, SyncAction.RESTORE_REMINDERS)

    def complete_task(self, task_id: str) -> TaskEntity:
        task = self._tasks.update_status(task_id, TaskStatus.COMPLETED)
        event_id = self._tasks.get_linked_event_id(task_id)
        if event_id:
            self._reconcile(SyncAction.DETACH_ON_COMPLETE, task, event_id)
        return self._tasks.get_task(task_id)

    def delete_task(self, task_id: str) -> None:
        task = self._tasks.get_task(task_id)
        event_id = self._tasks.get_linked_event_id(task_id)
        if event_id:
            self._reconcile(SyncAction.DETACH_ON_DELETE, task, event_id)
        if self._tasks.delete_task(task_id) == 0:
            raise TaskNotFound(task_id)
        logger.info("Task deleted id=%s", task_id)

    def _transition(self, task_id: str, status: TaskStatus, action: SyncAction) -> TaskEntity:
        task = self._tasks.update_status(task_id, status)
        event_id = self._tasks.get_linked_event_id(task_id)
        if event_id and task.deadline is not None:
            self._reconcile(action, task, event_id)
        return self._tasks.get_task(task_id)

    # ---- field updates ----

    def update_task(self, task_id: str, patch: TaskPatch) -> TaskEntity:
        _, task = self._tasks.update_fields(task_id, patch)
        event_id = self._tasks.get_linked_event_id(task_id)

        if task.has_calendar_integration and task.deadline is not None:
            if event_id:
                self._reconcile(SyncAction.UPDATE_EVENT, task, event_id)
            else:
                self._reconcile(SyncAction.CREATE_EVENT, task)
        elif not task.has_calendar_integration and event_id:
            self._reconcile(SyncAction.DETACH_ON_DISABLE, task, event_id)

        return self._tasks.get_task(task_id)

    # ---- reconciliation ----

    def _reconcile(
        self,
        action: SyncAction,
        task: TaskEntity,
        event_id: Optional[str] = None,
    ) -> None:
        rule = SYNC_POLICY[action]
        report = SyncReport(action=action, task_id=task.id, event_id=event_id)
        self.last_report = report
        credential = self._credentials.get()

        try:
            created = self._runner.run(self._perform(action, task, event_id, credential))
        except TaskManagerError as exc:
            report.error = exc
            report.outcome = rule.outcome_for(exc)
            if report.outcome is Outcome.PROPAGATE:
                logger.error("Calendar %s for task %s failed: %s", action, task.id, exc)
                raise
            if report.outcome is Outcome.SELF_HEAL:
                logger.info(
                    "Calendar event %s for task %s no longer exists; unlinking",
                    event_id,
                    task.id,
                )
                self._tasks.clear_linked_event_id(task.id)
            else:
                logger.warning(
                    "Calendar %s for task %s (event %s) failed, keeping local state: %s",
                    action,
                    task.id,
                    event_id,
                    exc,
                )
        else:
            if created is not None:
                report.event_id = created
                self._tasks.set_linked_event_id(task.id, created)
                logger.info("Task %s linked to calendar event %s", task.id, created)
            elif not rule.clears_link:
                self._tasks.touch_linked_event(task.id)

        if rule.clears_link:
            self._tasks.clear_linked_event_id(task.id)

    async def _perform(
        self,
        action: SyncAction,
        task: TaskEntity,
        event_id: Optional[str],
        credential: Optional[CalendarCredential],
    ) -> Optional[str]:
        token, _ = await self._tokens.ensure_valid_token(credential)

        if action is SyncAction.CREATE_EVENT:
            return await self._calendar.create_event(
                token,
                title=task.title,
                notes=task.notes,
                deadline=task.deadline,
                reminder_frequency=_effective_frequency(task),
            )
        if event_id is None:
            raise InvalidInput(f"Calendar {action} for task {task.id} needs a linked event")

        if action in (SyncAction.RESTORE_REMINDERS, SyncAction.UPDATE_EVENT):
            await self._calendar.update_event(
                token,
                event_id,
                title=task.title,
                notes=task.notes,
                deadline=task.deadline,
                reminder_frequency=_effective_frequency(task),
            )
        elif action is SyncAction.SUPPRESS_REMINDERS:
            await self._calendar.update_event(
                token,
                event_id,
                title=task.title,
                notes=task.notes,
                deadline=task.deadline,
                reminder_frequency=ReminderFrequency.NONE,
            )
        else:
            await self._calendar.delete_event(token, event_id)
        return None


def _effective_frequency(task: TaskEntity) -> ReminderFrequency:
    if task.status in (TaskStatus.PAUSED, TaskStatus.COMPLETED):
        return ReminderFrequency.NONE
    return task.reminder_frequency
