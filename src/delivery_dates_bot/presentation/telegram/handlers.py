"""Telegram update handlers for delivery-date messages."""

from __future__ import annotations

import asyncio
import logging
from uuid import uuid4

from telegram import Message, Update
from telegram.constants import ParseMode
from telegram.error import TelegramError
from telegram.ext import ContextTypes

from delivery_dates_bot.application.city_normalizer import CityNormalizer
from delivery_dates_bot.application.delivery_parser import parse_batch_with_diagnostics
from delivery_dates_bot.application.delivery_persistence import (
    ListDeliveryDatesUseCase,
    UpdateDeliveryDatesUseCase,
)
from delivery_dates_bot.application.result_formatter import (
    format_parsed_results,
    format_recognition_summary,
    format_stored_dates,
    format_update_report,
)
from delivery_dates_bot.presentation.telegram.messages import (
    ACCESS_DENIED_MESSAGE,
    EMPTY_TEXT_MESSAGE,
    HELP_MESSAGE,
    NOTHING_RECOGNIZED_MESSAGE,
    PROCESSING_MESSAGE,
    SAVING_MESSAGE,
    START_MESSAGE,
    error_message,
    split_message,
)

LOGGER = logging.getLogger(__name__)


class DeliveryBotHandlers:
    """Parse incoming chat text, preview it and persist the records."""

    def __init__(
        self,
        *,
        update_use_case: UpdateDeliveryDatesUseCase,
        list_use_case: ListDeliveryDatesUseCase,
        admin_user_id: int | None = None,
        city_normalizer: CityNormalizer | None = None,
    ) -> None:
        self._update_use_case = update_use_case
        self._list_use_case = list_use_case
        self._admin_user_id = admin_user_id
        self._city_normalizer = city_normalizer

    async def start(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        message = update.effective_message
        if message is not None:
            await message.reply_text(START_MESSAGE, parse_mode=ParseMode.HTML)

    async def help(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        message = update.effective_message
        if message is not None:
            await message.reply_text(HELP_MESSAGE, parse_mode=ParseMode.HTML)

    async def list_dates(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        message = update.effective_message
        if message is None:
            return
        if not self._is_allowed(update):
            await message.reply_text(ACCESS_DENIED_MESSAGE)
            return

        correlation_id = str(uuid4())
        try:
            rows = await asyncio.to_thread(self._list_use_case.execute)
        except Exception as exc:
            LOGGER.exception(
                "event=bot_list_dates_failed correlation_id=%s error_type=%s",
                correlation_id,
                exc.__class__.__name__,
            )
            await message.reply_text(error_message(correlation_id))
            return

        for chunk in split_message(format_stored_dates(rows)):
            await message.reply_text(chunk, parse_mode=ParseMode.HTML)

    async def handle_text(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        message = update.effective_message
        if message is None:
            return
        if not self._is_allowed(update):
            LOGGER.warning(
                "event=bot_access_denied user_id=%s",
                _user_id(update),
            )
            await message.reply_text(ACCESS_DENIED_MESSAGE)
            return

        text = message.text or ""
        if not text.strip():
            await message.reply_text(EMPTY_TEXT_MESSAGE)
            return

        correlation_id = str(uuid4())
        try:
            await _notify(message, PROCESSING_MESSAGE, correlation_id=correlation_id)
            result = parse_batch_with_diagnostics(text, city_normalizer=self._city_normalizer)
            if not result.records:
                await message.reply_text(NOTHING_RECOGNIZED_MESSAGE)
                return

            preview = format_parsed_results(result.records)
            summary = format_recognition_summary(result)
            if summary is not None:
                preview = f"{preview}\n\n{summary}"
            await _notify(
                message,
                f"{preview}\n\n{SAVING_MESSAGE}",
                correlation_id=correlation_id,
            )

            report = await asyncio.to_thread(self._update_use_case.execute, result.records)
            for chunk in split_message(format_update_report(report)):
                await message.reply_text(chunk, parse_mode=ParseMode.HTML)
        except Exception as exc:
            LOGGER.exception(
                "event=bot_message_failed correlation_id=%s user_id=%s error_type=%s",
                correlation_id,
                _user_id(update),
                exc.__class__.__name__,
            )
            await message.reply_text(error_message(correlation_id))
            return

        LOGGER.info(
            (
                "event=bot_message_processed correlation_id=%s user_id=%s "
                "total_lines=%s recognized_lines=%s failed_count=%s"
            ),
            correlation_id,
            _user_id(update),
            result.total_lines,
            result.recognized_lines,
            len(report.failed),
        )

    async def on_error(self, update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
        LOGGER.error(
            "event=bot_update_error error_type=%s",
            context.error.__class__.__name__,
            exc_info=context.error,
        )

    def _is_allowed(self, update: Update) -> bool:
        if self._admin_user_id is None:
            return True
        return _user_id(update) == self._admin_user_id


def _user_id(update: Update) -> int | None:
    user = update.effective_user
    return user.id if user is not None else None


async def _notify(message: Message, text: str, *, correlation_id: str) -> None:
    # Progress notices are best effort; saving goes on if Telegram rejects one.
    for chunk in split_message(text):
        try:
            await message.reply_text(chunk)
        except TelegramError as exc:
            LOGGER.warning(
                "event=bot_notice_failed correlation_id=%s error_type=%s error=%s",
                correlation_id,
                exc.__class__.__name__,
                exc,
            )
            return
