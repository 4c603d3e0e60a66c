"""SQLAlchemy repository implementation for delivery dates."""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from delivery_dates_bot.application.delivery_persistence import DeliveryDateRepository
from delivery_dates_bot.domain.delivery import ParsedRecord, StoredDeliveryDate, UpsertAction
from delivery_dates_bot.infrastructure.db.models import DeliveryDateModel


class SqlAlchemyDeliveryDateRepository(DeliveryDateRepository):
    """Create-or-update delivery dates via SQLAlchemy session."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def upsert_delivery_date(self, record: ParsedRecord, updated_at: datetime) -> UpsertAction:
        statement = select(DeliveryDateModel).where(DeliveryDateModel.city_name == record.city)
        existing = self._session.execute(statement).scalars().first()

        if existing is not None:
            existing.delivery_date = record.date
            existing.restrictions = record.restrictions
            existing.updated_at = updated_at
            return UpsertAction.UPDATED

        self._session.add(
            DeliveryDateModel(
                id=str(uuid4()),
                city_name=record.city,
                delivery_date=record.date,
                restrictions=record.restrictions,
                updated_at=updated_at,
            )
        )
        return UpsertAction.CREATED

    def list_delivery_dates(self) -> list[StoredDeliveryDate]:
        statement = select(DeliveryDateModel).order_by(DeliveryDateModel.city_name)
        return [
            StoredDeliveryDate(
                city_name=model.city_name,
                delivery_date=model.delivery_date,
                restrictions=model.restrictions,
                updated_at=model.updated_at,
            )
            for model in self._session.execute(statement).scalars()
        ]
