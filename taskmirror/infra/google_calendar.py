"""Google Calendar events client.

Three single-attempt operations with a small outcome taxonomy:

- success: ``create_event`` returns the new event id, the others return None
- ``EventNotFound``: 404/410 on update (delete treats it as success)
- ``RemoteFailure``: transport errors and every other non-2xx status
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from urllib.parse import quote

import httpx

from taskmirror.domain.enums import ReminderFrequency
from taskmirror.domain.errors import EventNotFound, RemoteFailure
from taskmirror.domain.reminders import build_reminders

from .google_http import is_success, safe_google_error_message

logger = logging.getLogger(__name__)

GOOGLE_CALENDAR_API_BASE_URL = "https://www.googleapis.com/calendar/v3"
NOT_FOUND_STATUS_CODES = frozenset({404, 410})
EVENT_DURATION = timedelta(hours=1)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _google_rfc3339(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def build_event_body(
    *,
    title: str,
    notes: Optional[str],
    deadline: datetime,
    reminder_frequency: ReminderFrequency,
    now: datetime,
) -> dict[str, Any]:
    return {
        "summary": title,
        # null clears the description on PATCH
        "description": notes or None,
        "start": {"dateTime": _google_rfc3339(deadline - EVENT_DURATION), "timeZone": "UTC"},
        "end": {"dateTime": _google_rfc3339(deadline), "timeZone": "UTC"},
        "reminders": {
            "useDefault": False,
            "overrides": [
                reminder.to_payload()
                for reminder in build_reminders(reminder_frequency, deadline, now)
            ],
        },
    }


class GoogleCalendarClient:
    def __init__(
        self,
        *,
        base_url: str = GOOGLE_CALENDAR_API_BASE_URL,
        calendar_id: str = "primary",
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._calendar_id = calendar_id
        self._timeout = timeout
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout)
        self._clock = clock

    def _events_url(self, event_id: str | None = None) -> str:
        url = f"{self._base_url}/calendars/{quote(self._calendar_id, safe='')}/events"
        if event_id is not None:
            url = f"{url}/{quote(event_id, safe='')}"
        return url

    async def _send(
        self,
        method: str,
        url: str,
        access_token: str,
        *,
        json_body: dict[str, Any] | None = None,
    ) -> httpx.Response:
        request = self._http_client.request(
            method,
            url,
            json=json_body,
            headers={"Authorization": f"Bearer {access_token}"},
        )
        try:
            return await asyncio.wait_for(request, self._timeout)
        except TimeoutError as exc:
            raise RemoteFailure(
                f"Google Calendar {method} request timed out after {self._timeout}s"
            ) from exc
        except httpx.HTTPError as exc:
            raise RemoteFailure(f"Google Calendar {method} request failed: {exc}") from exc

    async def create_event(
        self,
        access_token: str,
        *,
        title: str,
        notes: Optional[str],
        deadline: datetime,
        reminder_frequency: ReminderFrequency,
    ) -> str:
        body = build_event_body(
            title=title,
            notes=notes,
            deadline=deadline,
            reminder_frequency=reminder_frequency,
            now=self._clock(),
        )
        response = await self._send("POST", self._events_url(), access_token, json_body=body)
        if not is_success(response):
            raise RemoteFailure(
                f"Failed to create event: {safe_google_error_message(response)}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise RemoteFailure("Google Calendar returned invalid JSON for a created event") from exc

        event_id = payload.get("id") if isinstance(payload, dict) else None
        if not isinstance(event_id, str) or not event_id.strip():
            raise RemoteFailure("Google Calendar create response is missing the event id")
        logger.debug("Calendar event created id=%s", event_id)
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
        body = build_event_body(
            title=title,
            notes=notes,
            deadline=deadline,
            reminder_frequency=reminder_frequency,
            now=self._clock(),
        )
        response = await self._send(
            "PATCH", self._events_url(event_id), access_token, json_body=body
        )
        if response.status_code in NOT_FOUND_STATUS_CODES:
            raise EventNotFound(event_id)
        if not is_success(response):
            raise RemoteFailure(
                f"Failed to update event: {safe_google_error_message(response)}",
                status_code=response.status_code,
            )

    async def delete_event(self, access_token: str, event_id: str) -> None:
        response = await self._send("DELETE", self._events_url(event_id), access_token)
        if response.status_code in NOT_FOUND_STATUS_CODES:
            logger.debug("Calendar event %s already gone (status=%s)", event_id, response.status_code)
            return
        if not is_success(response):
            raise RemoteFailure(
                f"Failed to delete event: {safe_google_error_message(response)}",
                status_code=response.status_code,
            )

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http_client.aclose()
