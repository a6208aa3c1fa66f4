"""Centralized configuration for environment variables."""

import os
from pathlib import Path

DB_PATH_ENV = "OICOACH_DB_PATH"
LOG_LEVEL_ENV = "OICOACH_LOG_LEVEL"
SECRET_KEY_ENV = "OICOACH_SECRET_KEY"
SEED_ENV = "OICOACH_SEED"

DEFAULT_DB_PATH = Path(__file__).resolve().parent / "data" / "game.db"


def get_db_path() -> Path:
    """Return the save DB path; OICOACH_DB_PATH overrides the default under data/."""
    raw = os.environ.get(DB_PATH_ENV, "")
    return Path(raw).expanduser() if raw else DEFAULT_DB_PATH


def get_log_level() -> str:
    return os.environ.get(LOG_LEVEL_ENV, "INFO").upper()


def get_secret_key() -> str:
    return os.environ.get(SECRET_KEY_ENV, "dev-secret-change-in-production")


def get_default_seed() -> int | str | None:
    """Seed for new games when the request does not pass one. Digits become an int."""
    raw = os.environ.get(SEED_ENV, "").strip()
    if not raw:
        return None
    return int(raw) if raw.lstrip("-").isdigit() else raw
