"""Database configuration helpers."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

DEFAULT_DB_FILENAME = "delivery_dates.db"
DB_PATH_ENV_VAR = "DELIVERY_BOT_DB_PATH"


def get_database_path(environ: Mapping[str, str] | None = None) -> Path:
    """Return configured SQLite database path."""
    source = os.environ if environ is None else environ
    configured = source.get(DB_PATH_ENV_VAR, "").strip()
    if configured:
        return Path(configured).expanduser().resolve()

    return (Path.home() / ".delivery-dates-bot" / DEFAULT_DB_FILENAME).resolve()


def make_sqlite_url(database_path: Path) -> str:
    """Build SQLAlchemy SQLite URL from path."""
    return f"sqlite:///{database_path.as_posix()}"
