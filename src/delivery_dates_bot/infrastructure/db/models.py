"""SQLAlchemy models for delivery-date persistence."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from delivery_dates_bot.infrastructure.db.base import Base


class DeliveryDateModel(Base):
    """Current delivery start date per city."""

    __tablename__ = "delivery_dates"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    city_name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    delivery_date: Mapped[str] = mapped_column(String(5), nullable=False)
    restrictions: Mapped[str | None] = mapped_column(Text, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
