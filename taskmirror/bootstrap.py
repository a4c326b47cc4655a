from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta

from taskmirror.config import SETTINGS, Settings
from taskmirror.infra.credentials import CredentialRepository, SettingsRepository
from taskmirror.infra.db import Database, init_db
from taskmirror.infra.google_calendar import GoogleCalendarClient
from taskmirror.infra.google_oauth import GoogleTokenClient
from taskmirror.infra.repository import TaskRepository
from taskmirror.services.calendar_service import CalendarService
from taskmirror.services.calendar_sync import CalendarSyncEngine
from taskmirror.services.runner import AsyncRunner, get_runner
from taskmirror.services.settings_service import SettingsService
from taskmirror.services.task_service import TaskService
from taskmirror.services.token_supplier import TokenSupplier

logger = logging.getLogger(__name__)


@dataclass
class App:
    database: Database
    runner: AsyncRunner
    tasks: TaskService
    calendar: CalendarService
    settings: SettingsService
    _calendar_client: GoogleCalendarClient
    _token_client: GoogleTokenClient

    def close(self) -> None:
        try:
            self.runner.run(self._calendar_client.aclose())
            self.runner.run(self._token_client.aclose())
        finally:
            self.runner.close()
            self.database.dispose()


def build_app(settings: Settings = SETTINGS) -> App:
    database = init_db(settings.database_url)
    runner = get_runner()

    task_repo = TaskRepository(database)
    credential_repo = CredentialRepository(database)
    settings_repo = SettingsRepository(database)

    token_client = GoogleTokenClient(
        token_url=settings.google_token_url,
        client_id=settings.google_client_id,
        client_secret=settings.google_client_secret,
        timeout=settings.http_timeout_seconds,
    )
    calendar_client = GoogleCalendarClient(
        base_url=settings.google_calendar_api_url,
        calendar_id=settings.google_calendar_id,
        timeout=settings.http_timeout_seconds,
    )
    tokens = TokenSupplier(
        credential_repo,
        token_client,
        refresh_margin=timedelta(seconds=settings.token_refresh_margin_seconds),
    )
    engine = CalendarSyncEngine(task_repo, credential_repo, tokens, calendar_client, runner)
    logger.debug("Application wired calendar_id=%s", settings.google_calendar_id)

    return App(
        database=database,
        runner=runner,
        tasks=TaskService(task_repo, engine, settings_repo),
        calendar=CalendarService(credential_repo),
        settings=SettingsService(settings_repo),
        _calendar_client=calendar_client,
        _token_client=token_client,
    )
