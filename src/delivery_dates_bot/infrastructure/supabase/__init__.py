"""Supabase infrastructure package."""

from delivery_dates_bot.infrastructure.supabase.client import SupabaseRestClient
from delivery_dates_bot.infrastructure.supabase.config import SupabaseConfig
from delivery_dates_bot.infrastructure.supabase.repository import (
    SupabaseDeliveryDateRepository,
    SupabaseDeliveryUnitOfWork,
)

__all__ = [
    "SupabaseConfig",
    "SupabaseDeliveryDateRepository",
    "SupabaseDeliveryUnitOfWork",
    "SupabaseRestClient",
]
