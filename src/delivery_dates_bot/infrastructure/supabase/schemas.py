"""Pydantic schemas for PostgREST payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ExistingCityRow(BaseModel):
    """Row returned by the city existence check."""

    model_config = ConfigDict(extra="ignore")

    id: int | str
    city_name: str


class DeliveryDateRow(BaseModel):
    """Row returned by the delivery-date listing."""

    model_config = ConfigDict(extra="ignore")

    city_name: str
    delivery_date: str
    restrictions: str | None = None
    updated_at: datetime | None = None
