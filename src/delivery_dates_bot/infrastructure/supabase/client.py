"""Thin PostgREST client for Supabase tables over httpx."""

from __future__ import annotations

from collections.abc import Mapping
from typing import cast

import httpx

from delivery_dates_bot.infrastructure.supabase.config import SupabaseConfig
from delivery_dates_bot.infrastructure.supabase.errors import (
    SupabaseConflictError,
    SupabaseRateLimitError,
    SupabaseRequestError,
    SupabaseResponseError,
    SupabaseServerError,
)
from delivery_dates_bot.infrastructure.supabase.retry import RetryExecutor

JsonRow = dict[str, object]


class SupabaseRestClient:
    """Explicitly constructed PostgREST client bound to one Supabase project."""

    def __init__(
        self,
        config: SupabaseConfig,
        *,
        http_client: httpx.Client | None = None,
        retry_executor: RetryExecutor | None = None,
    ) -> None:
        self._config = config
        self._http_client = http_client or httpx.Client(base_url=config.rest_base_url)
        self._owns_client = http_client is None
        self._retry = retry_executor or RetryExecutor(config.retry_policy)

    @property
    def config(self) -> SupabaseConfig:
        return self._config

    def close(self) -> None:
        """Close owned HTTP client."""
        if self._owns_client:
            self._http_client.close()

    def select(
        self,
        table: str,
        *,
        columns: str,
        filters: Mapping[str, str] | None = None,
        order: str | None = None,
    ) -> list[JsonRow]:
        """Return rows matching PostgREST ``filters`` like ``{"city_name": "eq.Тула"}``."""
        params: dict[str, str] = {"select": columns}
        if filters:
            params.update(filters)
        if order:
            params["order"] = order

        response = self._send("GET", table, params=params)
        return _read_json_rows(response)

    def insert(self, table: str, row: Mapping[str, object]) -> None:
        """Insert one row."""
        self._send(
            "POST",
            table,
            json=dict(row),
            extra_headers={"Prefer": "return=minimal"},
        )

    def update(
        self,
        table: str,
        values: Mapping[str, object],
        *,
        filters: Mapping[str, str],
    ) -> None:
        """Update rows matching ``filters``."""
        if not filters:
            raise ValueError("update requires at least one filter")
        self._send(
            "PATCH",
            table,
            params=dict(filters),
            json=dict(values),
            extra_headers={"Prefer": "return=minimal"},
        )

    def _send(
        self,
        method: str,
        table: str,
        *,
        params: Mapping[str, str] | None = None,
        json: object | None = None,
        extra_headers: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        headers = {
            "apikey": self._config.service_role_key,
            "Authorization": f"Bearer {self._config.service_role_key}",
            "content-type": "application/json",
        }
        if extra_headers:
            headers.update(extra_headers)

        def operation() -> httpx.Response:
            response = self._http_client.request(
                method,
                f"/{table}",
                params=params,
                json=json,
                headers=headers,
                timeout=self._config.timeout_seconds,
            )
            _raise_for_status(response)
            return response

        return self._retry.run(operation, method=method)


def _raise_for_status(response: httpx.Response) -> None:
    status_code = response.status_code
    if status_code < 400:
        return

    message = f"supabase request failed with status={status_code}."
    detail = _extract_error_detail(response)
    if detail:
        message = f"{message} detail={detail}"
    if status_code == 429:
        raise SupabaseRateLimitError(message, _parse_retry_after(response))
    if status_code == 409:
        raise SupabaseConflictError(message)
    if 500 <= status_code <= 599:
        raise SupabaseServerError(message)
    raise SupabaseRequestError(message)


def _parse_retry_after(response: httpx.Response) -> float | None:
    # Only the delta-seconds form; an HTTP-date falls back to plain backoff.
    raw_value = response.headers.get("Retry-After", "").strip()
    try:
        seconds = float(raw_value)
    except ValueError:
        return None
    return seconds if seconds >= 0 else None


def _extract_error_detail(response: httpx.Response) -> str | None:
    try:
        payload = response.json()
    except ValueError:
        text = response.text.strip()
        return _truncate_error_detail(text) if text else None

    if isinstance(payload, dict):
        payload_obj = cast(dict[str, object], payload)
        for key in ("message", "error", "hint"):
            value = payload_obj.get(key)
            if isinstance(value, str) and value.strip():
                return _truncate_error_detail(value.strip())

    return None


def _truncate_error_detail(value: str, *, max_length: int = 300) -> str:
    if len(value) <= max_length:
        return value
    return f"{value[:max_length]}..."


def _read_json_rows(response: httpx.Response) -> list[JsonRow]:
    try:
        payload = response.json()
    except ValueError as exc:
        raise SupabaseResponseError("supabase returned invalid JSON payload.") from exc

    if not isinstance(payload, list):
        raise SupabaseResponseError("supabase response root must be a JSON array.")

    rows: list[JsonRow] = []
    for item in cast(list[object], payload):
        if not isinstance(item, dict):
            raise SupabaseResponseError("supabase response rows must be JSON objects.")
        rows.append({str(key): value for key, value in cast(dict[object, object], item).items()})
    return rows
