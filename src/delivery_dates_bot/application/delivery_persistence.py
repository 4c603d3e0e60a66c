"""Application ports and use-cases for delivery-date persistence."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from types import TracebackType
from typing import Protocol
from uuid import uuid4

from delivery_dates_bot.domain.delivery import (
    DeliveryUpdateFailure,
    DeliveryUpdateReport,
    DeliveryUpdateSuccess,
    ParsedRecord,
    StoredDeliveryDate,
    UpsertAction,
)

LOGGER = logging.getLogger(__name__)


class DeliveryDateRepository(Protocol):
    """Repository port for delivery dates keyed by city name."""

    def upsert_delivery_date(self, record: ParsedRecord, updated_at: datetime) -> UpsertAction:
        """Create or update the row for ``record.city``.

        ``restrictions`` is always written, ``None`` clears stale exceptions.
        """
        ...

    def list_delivery_dates(self) -> list[StoredDeliveryDate]:
        """Return stored rows ordered by city name."""
        ...


class DeliveryUnitOfWork(Protocol):
    """Unit-of-work port around delivery-date persistence operations."""

    deliveries: DeliveryDateRepository

    def __enter__(self) -> DeliveryUnitOfWork:
        """Start transactional scope."""
        ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        """Finalize transactional scope."""
        ...

    def commit(self) -> None:
        """Commit current transaction."""
        ...

    def rollback(self) -> None:
        """Rollback current transaction."""
        ...


DeliveryUnitOfWorkFactory = Callable[[], DeliveryUnitOfWork]
Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class UpdateDeliveryDatesUseCase:
    """Write parsed records one by one, collecting per-record outcome."""

    def __init__(
        self,
        uow_factory: DeliveryUnitOfWorkFactory,
        *,
        clock: Clock = _utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def execute(self, records: Sequence[ParsedRecord]) -> DeliveryUpdateReport:
        """Persist every record; a failing record never stops the batch."""
        correlation_id = str(uuid4())
        success: list[DeliveryUpdateSuccess] = []
        failed: list[DeliveryUpdateFailure] = []

        for record in records:
            try:
                with self._uow_factory() as uow:
                    action = uow.deliveries.upsert_delivery_date(record, self._clock())
                    uow.commit()
            except Exception as exc:
                LOGGER.exception(
                    (
                        "event=delivery_upsert_failed correlation_id=%s city=%s "
                        "delivery_date=%s error_type=%s"
                    ),
                    correlation_id,
                    record.city,
                    record.date,
                    exc.__class__.__name__,
                )
                failed.append(DeliveryUpdateFailure(city=record.city, error=str(exc)))
                continue

            success.append(DeliveryUpdateSuccess(city=record.city, action=action, date=record.date))

        report = DeliveryUpdateReport(
            total=len(records),
            success=tuple(success),
            failed=tuple(failed),
        )
        LOGGER.info(
            (
                "event=delivery_update_completed correlation_id=%s total=%s "
                "success_count=%s failed_count=%s"
            ),
            correlation_id,
            report.total,
            len(report.success),
            len(report.failed),
        )
        return report


class ListDeliveryDatesUseCase:
    """Read all stored delivery dates."""

    def __init__(self, uow_factory: DeliveryUnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def execute(self) -> list[StoredDeliveryDate]:
        """Return stored rows ordered by city name."""
        correlation_id = str(uuid4())
        with self._uow_factory() as uow:
            rows = uow.deliveries.list_delivery_dates()

        LOGGER.info(
            "event=delivery_dates_listed correlation_id=%s items_count=%s",
            correlation_id,
            len(rows),
        )
        return rows
