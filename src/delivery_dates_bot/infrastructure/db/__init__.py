"""Database infrastructure package."""

from delivery_dates_bot.infrastructure.db.config import get_database_path, make_sqlite_url
from delivery_dates_bot.infrastructure.db.session import (
    create_session_factory,
    create_sqlite_engine,
)
from delivery_dates_bot.infrastructure.db.unit_of_work import SqlAlchemyDeliveryUnitOfWork

__all__ = [
    "SqlAlchemyDeliveryUnitOfWork",
    "create_session_factory",
    "create_sqlite_engine",
    "get_database_path",
    "make_sqlite_url",
]
