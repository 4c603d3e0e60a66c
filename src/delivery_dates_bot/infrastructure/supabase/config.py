"""Supabase connection settings."""

from __future__ import annotations

from dataclasses import dataclass

from delivery_dates_bot.infrastructure.errors import ConfigurationError
from delivery_dates_bot.infrastructure.supabase.retry import RetryPolicy

DEFAULT_TABLE_NAME = "delivery_dates"


@dataclass(frozen=True)
class SupabaseConfig:
    """Project URL and service-role key for PostgREST access.

    Construction fails fast when either credential is blank.
    """

    url: str
    service_role_key: str
    table_name: str = DEFAULT_TABLE_NAME
    timeout_seconds: float = 15.0
    retry_policy: RetryPolicy = RetryPolicy()

    def __post_init__(self) -> None:
        if not self.url.strip() or not self.service_role_key.strip():
            raise ConfigurationError("Supabase URL and service role key are required.")
        if self.timeout_seconds <= 0:
            raise ConfigurationError("Supabase timeout must be positive.")

    @property
    def rest_base_url(self) -> str:
        return f"{self.url.strip().rstrip('/')}/rest/v1"
