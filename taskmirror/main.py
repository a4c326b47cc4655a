from __future__ import annotations

import functools
import json
from dataclasses import asdict
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable

import click

from taskmirror.bootstrap import App, build_app
from taskmirror.domain.errors import TaskManagerError
from taskmirror.infra.logging import setup_logging


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Cannot serialize {type(value).__name__}")


def _emit(value: Any) -> None:
    if value is None:
        click.echo("null")
        return
    if isinstance(value, list):
        payload = [asdict(item) for item in value]
    else:
        payload = asdict(value)
    click.echo(json.dumps(payload, default=_json_default, indent=2))


def _app(ctx: click.Context) -> App:
    root = ctx.find_root()
    if root.obj is None:
        setup_logging()
        root.obj = build_app()
        root.call_on_close(root.obj.close)
    return root.obj


def reports_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except TaskManagerError as exc:
            raise click.ClickException(str(exc)) from exc

    return wrapper


@click.group()
@click.version_option(version="0.1.0")
def cli() -> None:
    """Task manager that mirrors tasks onto Google Calendar."""


# ---- tasks ----


@cli.group()
def tasks() -> None:
    """Create, inspect and move tasks through their lifecycle."""


@tasks.command("create")
@click.argument("title")
@click.option("--created-at", default=None, help="RFC 3339 creation instant (defaults to now)")
@click.pass_context
@reports_errors
def create_task(ctx: click.Context, title: str, created_at: str | None) -> None:
    _emit(_app(ctx).tasks.create_task(title, created_at))


@tasks.command("list")
@click.option("--date", "day", required=True, help="ISO date or RFC 3339 instant")
@click.option("--open-only", is_flag=True, help="Hide completed tasks")
@click.pass_context
@reports_errors
def list_tasks(ctx: click.Context, day: str, open_only: bool) -> None:
    _emit(_app(ctx).tasks.list_tasks_by_date(day, include_completed=not open_only))


@tasks.command("show")
@click.argument("task_id")
@click.pass_context
@reports_errors
def show_task(ctx: click.Context, task_id: str) -> None:
    _emit(_app(ctx).tasks.get_task(task_id))


def _status_command(name: str, method: str, help_text: str) -> None:
    @tasks.command(name, help=help_text)
    @click.argument("task_id")
    @click.pass_context
    @reports_errors
    def command(ctx: click.Context, task_id: str) -> None:
        _emit(getattr(_app(ctx).tasks, method)(task_id))


_status_command("start", "start_task", "Start a task.")
_status_command("pause", "pause_task", "Pause a task and silence its calendar reminders.")
_status_command("resume", "resume_task", "Resume a paused task.")
_status_command("complete", "complete_task", "Complete a task and remove its calendar event.")
_status_command("reset", "reset_task", "Move a task back to not-started.")


@tasks.command("delete")
@click.argument("task_id")
@click.pass_context
@reports_errors
def delete_task(ctx: click.Context, task_id: str) -> None:
    _app(ctx).tasks.delete_task(task_id)
    click.echo(f"Deleted {task_id}")


@tasks.command("update")
@click.argument("task_id")
@click.option("--title", default=None)
@click.option("--notes", default=None, help="Empty string clears the notes")
@click.option("--deadline", default=None, help="RFC 3339 instant")
@click.option("--clear-deadline", is_flag=True)
@click.option("--calendar/--no-calendar", "calendar", default=None)
@click.option("--calendar-email", default=None, help="Empty string clears the email")
@click.option(
    "--reminders",
    type=click.Choice(["none", "hourly", "every-3-hours", "daily"]),
    default=None,
)
@click.pass_context
@reports_errors
def update_task(
    ctx: click.Context,
    task_id: str,
    title: str | None,
    notes: str | None,
    deadline: str | None,
    clear_deadline: bool,
    calendar: bool | None,
    calendar_email: str | None,
    reminders: str | None,
) -> None:
    if deadline is not None and clear_deadline:
        raise click.UsageError("--deadline and --clear-deadline are mutually exclusive")

    payload: dict[str, Any] = {}
    if title is not None:
        payload["title"] = title
    if notes is not None:
        payload["notes"] = notes
    if deadline is not None:
        payload["deadline"] = deadline
    if clear_deadline:
        payload["deadline"] = None
    if calendar is not None:
        payload["has_calendar_integration"] = calendar
    if calendar_email is not None:
        payload["calendar_email"] = calendar_email
    if reminders is not None:
        payload["reminder_frequency"] = reminders
    _emit(_app(ctx).tasks.update_task(task_id, payload))


# ---- calendar ----


@cli.group()
def calendar() -> None:
    """Google Calendar connection."""


@calendar.command("status")
@click.pass_context
@reports_errors
def calendar_status(ctx: click.Context) -> None:
    credential = _app(ctx).calendar.get_status()
    if credential is None:
        click.echo("Not connected")
        return
    expiry = credential.token_expiry.isoformat()
    click.echo(f"Connected as {credential.email} (token expires {expiry})")


@calendar.command("connect")
@click.option("--email", required=True)
@click.option("--access-token", required=True)
@click.option("--refresh-token", required=True)
@click.option("--expires-in", type=int, default=3600, show_default=True)
@click.pass_context
@reports_errors
def calendar_connect(
    ctx: click.Context,
    email: str,
    access_token: str,
    refresh_token: str,
    expires_in: int,
) -> None:
    """Store a credential obtained from Google's OAuth consent flow."""
    credential = _app(ctx).calendar.connect(
        email=email,
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=expires_in,
    )
    click.echo(f"Connected as {credential.email}")


@calendar.command("disconnect")
@click.pass_context
@reports_errors
def calendar_disconnect(ctx: click.Context) -> None:
    _app(ctx).calendar.disconnect()
    click.echo("Disconnected")


# ---- settings ----


@cli.group()
def settings() -> None:
    """Application settings."""


@settings.command("show")
@click.pass_context
@reports_errors
def settings_show(ctx: click.Context) -> None:
    _emit(_app(ctx).settings.get_settings())


@settings.command("update")
@click.option("--dark-mode/--light-mode", "dark_mode", default=None)
@click.option("--notifications/--no-notifications", "notifications", default=None)
@click.option(
    "--default-reminders",
    type=click.Choice(["none", "hourly", "every-3-hours", "daily"]),
    default=None,
)
@click.pass_context
@reports_errors
def settings_update(
    ctx: click.Context,
    dark_mode: bool | None,
    notifications: bool | None,
    default_reminders: str | None,
) -> None:
    payload: dict[str, Any] = {}
    if dark_mode is not None:
        payload["dark_mode"] = dark_mode
    if notifications is not None:
        payload["notifications_enabled"] = notifications
    if default_reminders is not None:
        payload["default_reminder_frequency"] = default_reminders
    _emit(_app(ctx).settings.update_settings(payload))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
