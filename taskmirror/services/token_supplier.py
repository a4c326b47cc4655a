from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol

from taskmirror.domain.entities import CalendarCredential
from taskmirror.domain.errors import NotConnected
from taskmirror.infra.google_oauth import RefreshedToken

logger = logging.getLogger(__name__)

REFRESH_MARGIN = timedelta(minutes=5)


class CredentialStore(Protocol):
    def get(self) -> Optional[CalendarCredential]: ...

    def save(self, credential: CalendarCredential) -> None: ...


class TokenRefresher(Protocol):
    async def refresh(self, refresh_token: str) -> RefreshedToken: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenSupplier:
    def __init__(
        self,
        credentials: CredentialStore,
        refresher: TokenRefresher,
        *,
        clock: Callable[[], datetime] = _utcnow,
        refresh_margin: timedelta = REFRESH_MARGIN,
    ) -> None:
        self._credentials = credentials
        self._refresher = refresher
        self._clock = clock
        self._refresh_margin = refresh_margin

    def needs_refresh(self, credential: CalendarCredential) -> bool:
        return credential.token_expiry - self._clock() < self._refresh_margin

    async def ensure_valid_token(
        self, credential: Optional[CalendarCredential]
    ) -> tuple[str, CalendarCredential]:
        """Return a usable access token and the credential it belongs to.

        A refreshed credential is persisted before returning. A failed refresh
        raises ``AuthRefreshFailed`` and leaves the stored credential as is.
        """
        if credential is None or credential.is_placeholder:
            raise NotConnected()
        if not self.needs_refresh(credential):
            return credential.access_token, credential

        logger.info(
            "Access token for %s expires at %s, refreshing",
            credential.email,
            credential.token_expiry.isoformat(),
        )
        refreshed = await self._refresher.refresh(credential.refresh_token)
        updated = replace(
            credential,
            access_token=refreshed.access_token,
            token_expiry=self._clock() + timedelta(seconds=refreshed.expires_in),
        )
        # worker thread: the store waits on the database lock
        await asyncio.to_thread(self._credentials.save, updated)
        return updated.access_token, updated

    async def access_token(self) -> str:
        token, _ = await self.ensure_valid_token(self._credentials.get())
        return token
