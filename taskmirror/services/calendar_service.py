from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from taskmirror.domain.entities import CalendarCredential
from taskmirror.domain.errors import InvalidInput
from taskmirror.domain.parsing import parse_instant
from taskmirror.infra.credentials import CredentialRepository

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CalendarService:
    """Connection state of the Google Calendar account.

    The OAuth consent flow itself happens outside this application; ``connect``
    stores the credential it produced.
    """

    def __init__(
        self,
        credentials: CredentialRepository,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._credentials = credentials
        self._clock = clock

    def get_status(self) -> Optional[CalendarCredential]:
        return self._credentials.get()

    def connect(
        self,
        *,
        email: str,
        access_token: str,
        refresh_token: str,
        expires_in: Optional[int] = None,
        token_expiry: Union[str, datetime, None] = None,
    ) -> CalendarCredential:
        if not email.strip() or not access_token.strip():
            raise InvalidInput("email and access token are required")
        if token_expiry is not None:
            expiry = parse_instant(token_expiry)
        elif expires_in is not None:
            if expires_in <= 0:
                raise InvalidInput("expires_in must be positive")
            expiry = self._clock() + timedelta(seconds=expires_in)
        else:
            raise InvalidInput("either expires_in or token_expiry is required")

        credential = CalendarCredential(
            email=email.strip(),
            access_token=access_token.strip(),
            refresh_token=refresh_token.strip(),
            token_expiry=expiry,
        )
        self._credentials.save(credential)
        return credential

    def disconnect(self) -> None:
        # Linked events stay on the calendar and keep their task links.
        self._credentials.clear()
        logger.info("Google Calendar disconnected")
