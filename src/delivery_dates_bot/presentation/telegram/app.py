"""python-telegram-bot application wiring."""

from __future__ import annotations

from telegram.ext import Application, ApplicationBuilder, CommandHandler, MessageHandler, filters

from delivery_dates_bot.presentation.telegram.handlers import DeliveryBotHandlers


def create_application(token: str, handlers: DeliveryBotHandlers) -> Application:
    """Build polling application with command and text handlers registered."""
    application = ApplicationBuilder().token(token).build()
    application.add_handler(CommandHandler("start", handlers.start))
    application.add_handler(CommandHandler("help", handlers.help))
    application.add_handler(CommandHandler("dates", handlers.list_dates))
    application.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handlers.handle_text))
    application.add_error_handler(handlers.on_error)
    return application
