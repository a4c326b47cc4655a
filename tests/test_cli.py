from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from taskmirror.bootstrap import App
from taskmirror.main import cli
from taskmirror.services.calendar_service import CalendarService
from taskmirror.services.settings_service import SettingsService


@pytest.fixture()
def app(database, runner, service, credential_repo, settings_repo, fake_calendar, refresher, clock):
    return App(
        database=database,
        runner=runner,
        tasks=service,
        calendar=CalendarService(credential_repo, clock=clock),
        settings=SettingsService(settings_repo),
        _calendar_client=fake_calendar,
        _token_client=refresher,
    )


@pytest.fixture()
def invoke(app):
    cli_runner = CliRunner()

    def _invoke(*args: str):
        return cli_runner.invoke(cli, list(args), obj=app)

    return _invoke


def test_create_and_show_task(invoke) -> None:
    created = invoke("tasks", "create", "Write report", "--created-at", "2026-03-02T08:00:00Z")
    assert created.exit_code == 0, created.output
    task = json.loads(created.stdout)

    shown = invoke("tasks", "show", task["id"])

    assert shown.exit_code == 0
    assert json.loads(shown.stdout)["title"] == "Write report"
    assert task["status"] == "not-started"
    assert task["created_at"] == "2026-03-02T08:00:00+00:00"


def test_list_tasks_for_a_day(invoke) -> None:
    invoke("tasks", "create", "Morning", "--created-at", "2026-03-01T08:00:00Z")
    invoke("tasks", "create", "Later", "--created-at", "2026-03-03T08:00:00Z")

    result = invoke("tasks", "list", "--date", "2026-03-01")

    assert result.exit_code == 0
    assert [task["title"] for task in json.loads(result.stdout)] == ["Morning"]


def test_update_with_calendar_creates_event(invoke, connected, fake_calendar) -> None:
    task = json.loads(invoke("tasks", "create", "Demo").stdout)

    result = invoke(
        "tasks",
        "update",
        task["id"],
        "--deadline",
        "2026-03-04T15:00:00Z",
        "--calendar",
        "--reminders",
        "hourly",
    )

    assert result.exit_code == 0, result.output
    updated = json.loads(result.stdout)
    assert updated["has_calendar_integration"] is True
    assert updated["reminder_frequency"] == "hourly"
    assert fake_calendar.ops() == ["create"]


def test_domain_errors_become_cli_errors(invoke) -> None:
    task = json.loads(invoke("tasks", "create", "Idle").stdout)

    result = invoke("tasks", "pause", task["id"])

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "not-started" in result.output


def test_conflicting_deadline_flags_are_rejected(invoke) -> None:
    task = json.loads(invoke("tasks", "create", "Idle").stdout)

    result = invoke(
        "tasks", "update", task["id"], "--deadline", "2026-03-04T15:00:00Z", "--clear-deadline"
    )

    assert result.exit_code == 2


def test_calendar_connect_status_disconnect(invoke) -> None:
    assert invoke("calendar", "status").stdout.strip() == "Not connected"

    connected = invoke(
        "calendar",
        "connect",
        "--email",
        "me@example.com",
        "--access-token",
        "access",
        "--refresh-token",
        "refresh",
    )
    assert connected.exit_code == 0, connected.output
    assert "Connected as me@example.com" in invoke("calendar", "status").stdout

    invoke("calendar", "disconnect")
    assert invoke("calendar", "status").stdout.strip() == "Not connected"


def test_settings_update(invoke) -> None:
    result = invoke("settings", "update", "--dark-mode", "--default-reminders", "daily")

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["dark_mode"] is True
    assert payload["default_reminder_frequency"] == "daily"
