"""SQLAlchemy unit-of-work implementation for delivery-date persistence."""

from __future__ import annotations

from datetime import datetime
from types import TracebackType

from sqlalchemy.orm import Session, sessionmaker

from delivery_dates_bot.application.delivery_persistence import (
    DeliveryDateRepository,
    DeliveryUnitOfWork,
)
from delivery_dates_bot.domain.delivery import ParsedRecord, StoredDeliveryDate, UpsertAction
from delivery_dates_bot.infrastructure.db.delivery_repository import (
    SqlAlchemyDeliveryDateRepository,
)


class _UninitializedRepository(DeliveryDateRepository):
    """Placeholder repository before entering unit-of-work context."""

    def upsert_delivery_date(self, record: ParsedRecord, updated_at: datetime) -> UpsertAction:
        raise RuntimeError("Unit of work is not active.")

    def list_delivery_dates(self) -> list[StoredDeliveryDate]:
        raise RuntimeError("Unit of work is not active.")


class SqlAlchemyDeliveryUnitOfWork(DeliveryUnitOfWork):
    """Manage transactional scope for delivery-date persistence."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory
        self._session: Session | None = None
        self.deliveries: DeliveryDateRepository = _UninitializedRepository()

    def __enter__(self) -> SqlAlchemyDeliveryUnitOfWork:
        self._session = self._session_factory()
        self.deliveries = SqlAlchemyDeliveryDateRepository(self._session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        if exc is not None:
            self.rollback()

        session = self._session
        self._session = None
        self.deliveries = _UninitializedRepository()
        if session is not None:
            session.close()

    def commit(self) -> None:
        session = self._require_session()
        session.commit()

    def rollback(self) -> None:
        session = self._session
        if session is not None:
            session.rollback()

    def _require_session(self) -> Session:
        if self._session is None:
            raise RuntimeError("Unit of work is not active.")
        return self._session
