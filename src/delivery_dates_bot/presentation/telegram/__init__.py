"""Telegram transport for the delivery-dates bot."""

from delivery_dates_bot.presentation.telegram.app import create_application
from delivery_dates_bot.presentation.telegram.handlers import DeliveryBotHandlers

__all__ = ["DeliveryBotHandlers", "create_application"]
