from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


def _resolve_project_root() -> Path:
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[1]


PROJECT_ROOT = _resolve_project_root()


def load_env() -> None:
    env_name = os.getenv("APP_ENV", "development")
    candidates = [Path.cwd(), PROJECT_ROOT]
    for base in candidates:
        env_path = base / ".env"
        if env_path.exists():
            load_dotenv(env_path)
            break

    for base in candidates:
        env_specific = base / f".env.{env_name}"
        if env_specific.exists():
            load_dotenv(env_specific, override=True)
            break


@dataclass(frozen=True)
class Settings:
    database_url: str
    log_level: str = "INFO"
    log_dir: str = "logs"
    google_client_id: str = ""
    google_client_secret: str = ""
    google_token_url: str = "https://oauth2.googleapis.com/token"
    google_calendar_api_url: str = "https://www.googleapis.com/calendar/v3"
    google_calendar_id: str = "primary"
    http_timeout_seconds: float = 30.0
    token_refresh_margin_seconds: int = 300


def _default_database_url() -> str:
    return f"sqlite:///{PROJECT_ROOT / 'data' / 'taskmirror.db'}"


load_env()

DATABASE_URL = os.getenv("DATABASE_URL", "").strip() or _default_database_url()

SETTINGS = Settings(
    database_url=DATABASE_URL,
    log_level=os.getenv("LOG_LEVEL", "INFO"),
    log_dir=os.getenv("LOG_DIR", "logs"),
    google_client_id=os.getenv("GOOGLE_CLIENT_ID", "").strip(),
    google_client_secret=os.getenv("GOOGLE_CLIENT_SECRET", "").strip(),
    google_token_url=os.getenv("GOOGLE_TOKEN_URL", "https://oauth2.googleapis.com/token"),
    google_calendar_api_url=os.getenv(
        "GOOGLE_CALENDAR_API_URL", "https://www.googleapis.com/calendar/v3"
    ).rstrip("/"),
    google_calendar_id=os.getenv("GOOGLE_CALENDAR_ID", "primary").strip() or "primary",
    http_timeout_seconds=float(os.getenv("HTTP_TIMEOUT_SECONDS", "30")),
    token_refresh_margin_seconds=int(os.getenv("TOKEN_REFRESH_MARGIN_SECONDS", "300")),
)
