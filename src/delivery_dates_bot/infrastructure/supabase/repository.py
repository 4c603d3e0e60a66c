"""Supabase-backed repository and unit-of-work for delivery dates."""

from __future__ import annotations

import logging
from datetime import datetime
from types import TracebackType
from typing import TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from delivery_dates_bot.application.delivery_persistence import (
    DeliveryDateRepository,
    DeliveryUnitOfWork,
)
from delivery_dates_bot.domain.delivery import ParsedRecord, StoredDeliveryDate, UpsertAction
from delivery_dates_bot.infrastructure.supabase.client import JsonRow, SupabaseRestClient
from delivery_dates_bot.infrastructure.supabase.errors import (
    SupabaseConflictError,
    SupabaseResponseError,
    SupabaseServerError,
)
from delivery_dates_bot.infrastructure.supabase.schemas import DeliveryDateRow, ExistingCityRow

LOGGER = logging.getLogger(__name__)

TRow = TypeVar("TRow", bound=BaseModel)


class SupabaseDeliveryDateRepository(DeliveryDateRepository):
    """Create-or-update delivery dates through PostgREST."""

    def __init__(self, client: SupabaseRestClient) -> None:
        self._client = client
        self._table = client.config.table_name

    def upsert_delivery_date(self, record: ParsedRecord, updated_at: datetime) -> UpsertAction:
        values: dict[str, object] = {
            "delivery_date": record.date,
            "restrictions": record.restrictions,
            "updated_at": updated_at.isoformat(),
        }
        city_filter = {"city_name": f"eq.{record.city}"}

        if self._city_exists(city_filter):
            self._client.update(self._table, values, filters=city_filter)
            return UpsertAction.UPDATED

        try:
            self._client.insert(self._table, {"city_name": record.city, **values})
        except SupabaseConflictError:
            # Another writer created the city after the existence check.
            self._client.update(self._table, values, filters=city_filter)
            return UpsertAction.UPDATED
        except (httpx.TransportError, SupabaseServerError) as exc:
            # The insert may have been committed before the response was lost.
            if not self._city_exists(city_filter):
                raise
            LOGGER.warning(
                "event=supabase_insert_confirmed_after_error city=%s error_type=%s",
                record.city,
                exc.__class__.__name__,
            )
            self._client.update(self._table, values, filters=city_filter)
        return UpsertAction.CREATED

    def list_delivery_dates(self) -> list[StoredDeliveryDate]:
        rows = self._client.select(
            self._table,
            columns="city_name,delivery_date,restrictions,updated_at",
            order="city_name.asc",
        )
        return [
            StoredDeliveryDate(
                city_name=row.city_name,
                delivery_date=row.delivery_date,
                restrictions=row.restrictions,
                updated_at=row.updated_at,
            )
            for row in _validate_rows(rows, DeliveryDateRow)
        ]

    def _city_exists(self, city_filter: dict[str, str]) -> bool:
        rows = self._client.select(
            self._table,
            columns="id,city_name",
            filters={**city_filter, "limit": "1"},
        )
        return bool(_validate_rows(rows, ExistingCityRow))


def _validate_rows(
    rows: list[JsonRow],
    schema: type[TRow],
) -> list[TRow]:
    try:
        return [schema.model_validate(row) for row in rows]
    except ValidationError as exc:
        raise SupabaseResponseError(f"supabase returned unexpected row shape: {exc}") from exc


class SupabaseDeliveryUnitOfWork(DeliveryUnitOfWork):
    """Scope object over the Supabase repository.

    PostgREST applies every request atomically, so commit and rollback have
    nothing to flush or undo.
    """

    def __init__(self, client: SupabaseRestClient) -> None:
        self._client = client
        self.deliveries: DeliveryDateRepository = SupabaseDeliveryDateRepository(client)

    def __enter__(self) -> SupabaseDeliveryUnitOfWork:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        return None

    def commit(self) -> None:
        return None

    def rollback(self) -> None:
        return None
