"""Process configuration loaded from environment variables and keyring."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Protocol

from delivery_dates_bot.infrastructure.db.config import get_database_path
from delivery_dates_bot.infrastructure.errors import ConfigurationError
from delivery_dates_bot.infrastructure.security.keyring_store import SecretStoreError
from delivery_dates_bot.infrastructure.supabase.config import SupabaseConfig

LOGGER = logging.getLogger(__name__)

TELEGRAM_BOT_TOKEN_ENV_VAR = "TELEGRAM_BOT_TOKEN"
SUPABASE_URL_ENV_VAR = "SUPABASE_URL"
SUPABASE_SERVICE_ROLE_KEY_ENV_VAR = "SUPABASE_SERVICE_ROLE_KEY"
ADMIN_USER_ID_ENV_VAR = "ADMIN_USER_ID"
STORE_ENV_VAR = "DELIVERY_BOT_STORE"
CITY_ALIASES_ENV_VAR = "DELIVERY_BOT_CITY_ALIASES"

# Secrets that may live in the OS keyring instead of the environment.
SECRET_NAMES: tuple[str, ...] = (
    TELEGRAM_BOT_TOKEN_ENV_VAR,
    SUPABASE_SERVICE_ROLE_KEY_ENV_VAR,
)


class StoreBackend(StrEnum):
    """Supported delivery-date stores."""

    SUPABASE = "supabase"
    SQLITE = "sqlite"


class SecretSource(Protocol):
    """Fallback lookup for secrets missing from the environment."""

    def get_secret(self, name: str) -> str | None:
        """Return secret value or None."""
        ...


@dataclass(frozen=True)
class BotConfig:
    """Validated settings for running the bot."""

    telegram_bot_token: str
    store_backend: StoreBackend
    admin_user_id: int | None = None
    supabase: SupabaseConfig | None = None
    database_path: Path | None = None
    city_aliases_path: Path | None = None


def load_bot_config(
    environ: Mapping[str, str] | None = None,
    *,
    secret_store: SecretSource | None = None,
) -> BotConfig:
    """Build bot config, failing fast on missing or malformed settings."""
    source = os.environ if environ is None else environ

    token = _resolve_secret(source, TELEGRAM_BOT_TOKEN_ENV_VAR, secret_store)
    if token is None:
        raise ConfigurationError(f"{TELEGRAM_BOT_TOKEN_ENV_VAR} is not set.")

    backend = resolve_store_backend(source)
    supabase_config: SupabaseConfig | None = None
    database_path: Path | None = None
    if backend is StoreBackend.SUPABASE:
        supabase_config = SupabaseConfig(
            url=_read(source, SUPABASE_URL_ENV_VAR) or "",
            service_role_key=_resolve_secret(
                source,
                SUPABASE_SERVICE_ROLE_KEY_ENV_VAR,
                secret_store,
            )
            or "",
        )
    else:
        database_path = get_database_path(source)

    return BotConfig(
        telegram_bot_token=token,
        store_backend=backend,
        admin_user_id=_parse_admin_user_id(source),
        supabase=supabase_config,
        database_path=database_path,
        city_aliases_path=resolve_city_aliases_path(source),
    )


def resolve_store_backend(environ: Mapping[str, str]) -> StoreBackend:
    raw_value = _read(environ, STORE_ENV_VAR)
    if raw_value is None:
        return StoreBackend.SUPABASE
    try:
        return StoreBackend(raw_value.lower())
    except ValueError as exc:
        supported = ", ".join(backend.value for backend in StoreBackend)
        raise ConfigurationError(
            f"{STORE_ENV_VAR} must be one of: {supported}; got {raw_value!r}."
        ) from exc


def resolve_city_aliases_path(environ: Mapping[str, str]) -> Path | None:
    raw_value = _read(environ, CITY_ALIASES_ENV_VAR)
    if raw_value is None:
        return None
    return Path(raw_value).expanduser().resolve()


def _parse_admin_user_id(environ: Mapping[str, str]) -> int | None:
    raw_value = _read(environ, ADMIN_USER_ID_ENV_VAR)
    if raw_value is None:
        return None
    try:
        return int(raw_value)
    except ValueError as exc:
        raise ConfigurationError(
            f"{ADMIN_USER_ID_ENV_VAR} must be an integer Telegram user id."
        ) from exc


def _resolve_secret(
    environ: Mapping[str, str],
    name: str,
    secret_store: SecretSource | None,
) -> str | None:
    value = _read(environ, name)
    if value is not None or secret_store is None:
        return value
    try:
        return secret_store.get_secret(name)
    except SecretStoreError as exc:
        # Headless hosts often have no usable keyring backend.
        LOGGER.warning(
            "event=secret_store_unavailable name=%s error_type=%s",
            name,
            type(exc.__cause__ or exc).__name__,
        )
        return None


def _read(environ: Mapping[str, str], name: str) -> str | None:
    resolved = environ.get(name, "").strip()
    return resolved if resolved else None
