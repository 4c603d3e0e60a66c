"""Telegram bot for city delivery-date updates."""
