from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from taskmirror.domain.entities import CalendarCredential
from taskmirror.domain.enums import ReminderFrequency
from taskmirror.domain.errors import TaskManagerError
from taskmirror.infra.credentials import CredentialRepository, SettingsRepository
from taskmirror.infra.db import Database
from taskmirror.infra.google_oauth import RefreshedToken
from taskmirror.infra.repository import TaskRepository
from taskmirror.services.calendar_sync import CalendarSyncEngine
from taskmirror.services.runner import AsyncRunner
from taskmirror.services.task_service import TaskService
from taskmirror.services.token_supplier import TokenSupplier

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeCalendar:
    """Records every call; ``errors`` maps an operation name to the error it raises."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.errors: dict[str, TaskManagerError] = {}
        self._next_id = 1

    async def create_event(
        self,
        access_token: str,
        *,
        title: str,
        notes: Optional[str],
        deadline: datetime,
        reminder_frequency: ReminderFrequency,
    ) -> str:
        self.calls.append(("create", access_token, title, deadline, reminder_frequency))
        if "create" in self.errors:
            raise self.errors["create"]
        event_id = f"evt-{self._next_id}"
        self._next_id += 1
        return event_id

    async def update_event(
        self,
        access_token: str,
        event_id: str,
        *,
        title: str,
        notes: Optional[str],
        deadline: datetime,
        reminder_frequency: ReminderFrequency,
    ) -> None:
        self.calls.append(("update", event_id, title, deadline, reminder_frequency))
        if "update" in self.errors:
            raise self.errors["update"]

    async def delete_event(self, access_token: str, event_id: str) -> None:
        self.calls.append(("delete", event_id))
        if "delete" in self.errors:
            raise self.errors["delete"]

    def ops(self) -> list[str]:
        return [call[0] for call in self.calls]


class FakeRefresher:
    def __init__(self, access_token: str = "fresh-token", expires_in: int = 3600) -> None:
        self.access_token = access_token
        self.expires_in = expires_in
        self.error: Optional[TaskManagerError] = None
        self.calls: list[str] = []

    async def refresh(self, refresh_token: str) -> RefreshedToken:
        self.calls.append(refresh_token)
        if self.error is not None:
            raise self.error
        return RefreshedToken(access_token=self.access_token, expires_in=self.expires_in)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def database():
    db = Database("sqlite://")
    db.create_schema()
    yield db
    db.dispose()


@pytest.fixture()
def runner():
    async_runner = AsyncRunner(name="taskmirror-test")
    yield async_runner
    async_runner.close()


@pytest.fixture()
def task_repo(database: Database, clock: FakeClock) -> TaskRepository:
    return TaskRepository(database, clock=clock)


@pytest.fixture()
def credential_repo(database: Database, clock: FakeClock) -> CredentialRepository:
    return CredentialRepository(database, clock=clock)


@pytest.fixture()
def settings_repo(database: Database, clock: FakeClock) -> SettingsRepository:
    return SettingsRepository(database, clock=clock)


@pytest.fixture()
def credential(clock: FakeClock) -> CalendarCredential:
    return CalendarCredential(
        email="me@example.com",
        access_token="stored-token",
        refresh_token="refresh-token",
        token_expiry=clock.now + timedelta(hours=1),
    )


@pytest.fixture()
def connected(credential_repo: CredentialRepository, credential: CalendarCredential):
    credential_repo.save(credential)
    return credential


@pytest.fixture()
def fake_calendar() -> FakeCalendar:
    return FakeCalendar()


@pytest.fixture()
def refresher() -> FakeRefresher:
    return FakeRefresher()


@pytest.fixture()
def engine(
    task_repo: TaskRepository,
    credential_repo: CredentialRepository,
    refresher: FakeRefresher,
    fake_calendar: FakeCalendar,
    runner: AsyncRunner,
    clock: FakeClock,
) -> CalendarSyncEngine:
    tokens = TokenSupplier(credential_repo, refresher, clock=clock)
    return CalendarSyncEngine(task_repo, credential_repo, tokens, fake_calendar, runner)


@pytest.fixture()
def service(
    task_repo: TaskRepository,
    engine: CalendarSyncEngine,
    settings_repo: SettingsRepository,
) -> TaskService:
    return TaskService(task_repo, engine, settings_repo)
