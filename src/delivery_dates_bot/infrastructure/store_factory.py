"""Wire the configured delivery-date store into a unit-of-work factory."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from delivery_dates_bot.application.delivery_persistence import DeliveryUnitOfWorkFactory
from delivery_dates_bot.infrastructure.config import BotConfig, StoreBackend
from delivery_dates_bot.infrastructure.db.base import Base
from delivery_dates_bot.infrastructure.db.session import (
    create_session_factory,
    create_sqlite_engine,
)
from delivery_dates_bot.infrastructure.db.unit_of_work import SqlAlchemyDeliveryUnitOfWork
from delivery_dates_bot.infrastructure.errors import ConfigurationError
from delivery_dates_bot.infrastructure.supabase.client import SupabaseRestClient
from delivery_dates_bot.infrastructure.supabase.repository import SupabaseDeliveryUnitOfWork

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeliveryStore:
    """Unit-of-work factory plus a hook releasing its connections."""

    uow_factory: DeliveryUnitOfWorkFactory
    close: Callable[[], None]


def create_delivery_store(config: BotConfig) -> DeliveryStore:
    """Create store for configured backend."""
    if config.store_backend is StoreBackend.SUPABASE:
        if config.supabase is None:
            raise ConfigurationError("Supabase store selected without Supabase settings.")
        client = SupabaseRestClient(config.supabase)
        LOGGER.info(
            "event=delivery_store_ready backend=%s table=%s",
            config.store_backend.value,
            config.supabase.table_name,
        )
        return DeliveryStore(
            uow_factory=lambda: SupabaseDeliveryUnitOfWork(client),
            close=client.close,
        )

    if config.database_path is None:
        raise ConfigurationError("SQLite store selected without database path.")
    engine = create_sqlite_engine(config.database_path)
    Base.metadata.create_all(engine)
    session_factory = create_session_factory(engine)
    LOGGER.info(
        "event=delivery_store_ready backend=%s database_path=%s",
        config.store_backend.value,
        config.database_path,
    )
    return DeliveryStore(
        uow_factory=lambda: SqlAlchemyDeliveryUnitOfWork(session_factory),
        close=engine.dispose,
    )
