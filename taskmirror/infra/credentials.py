from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Optional

from sqlalchemy import delete

from taskmirror.domain.entities import CalendarCredential, SettingsEntity
from taskmirror.domain.enums import ReminderFrequency
from taskmirror.domain.patches import SettingsPatch

from .db import Database
from .models import (
    SINGLETON_ID,
    CalendarCredentialModel,
    SettingsModel,
    ensure_singleton_rows,
    utcnow,
)

logger = logging.getLogger(__name__)


class CredentialRepository:
    """Single-row store for the Google Calendar OAuth credential."""

    def __init__(self, database: Database, clock: Callable[[], datetime] = utcnow) -> None:
        self._db = database
        self._clock = clock

    def get(self) -> Optional[CalendarCredential]:
        with self._db.session() as session:
            row = session.get(CalendarCredentialModel, SINGLETON_ID)
            if row is None:
                return None
            credential = CalendarCredential(
                email=row.email,
                access_token=row.access_token,
                refresh_token=row.refresh_token,
                token_expiry=row.token_expiry,
            )
        if credential.is_placeholder:
            return None
        return credential

    def save(self, credential: CalendarCredential) -> None:
        if credential.is_placeholder:
            raise ValueError("credential must carry an email and an access token")
        now = self._clock()
        with self._db.session() as session:
            row = session.get(CalendarCredentialModel, SINGLETON_ID)
            if row is None:
                row = CalendarCredentialModel(id=SINGLETON_ID, created_at=now)
                session.add(row)
            row.email = credential.email
            row.access_token = credential.access_token
            row.refresh_token = credential.refresh_token
            row.token_expiry = credential.token_expiry
            row.updated_at = now
        logger.info(
            "Calendar credential saved email=%s expiry=%s",
            credential.email,
            credential.token_expiry.isoformat(),
        )

    def clear(self) -> None:
        with self._db.session() as session:
            session.execute(delete(CalendarCredentialModel))
        logger.info("Calendar credential cleared")


def _to_settings(model: SettingsModel) -> SettingsEntity:
    return SettingsEntity(
        dark_mode=bool(model.dark_mode),
        notifications_enabled=bool(model.notifications_enabled),
        default_reminder_frequency=ReminderFrequency(model.default_reminder_frequency),
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


class SettingsRepository:
    def __init__(self, database: Database, clock: Callable[[], datetime] = utcnow) -> None:
        self._db = database
        self._clock = clock

    def get(self) -> SettingsEntity:
        with self._db.session() as session:
            ensure_singleton_rows(session)
            session.flush()
            return _to_settings(session.get(SettingsModel, SINGLETON_ID))

    def update(self, patch: SettingsPatch) -> SettingsEntity:
        with self._db.session() as session:
            ensure_singleton_rows(session)
            session.flush()
            row = session.get(SettingsModel, SINGLETON_ID)
            for key, value in patch.changes().items():
                if isinstance(value, ReminderFrequency):
                    value = value.value
                setattr(row, key, value)
            row.updated_at = self._clock()
            session.flush()
            return _to_settings(row)
