"""Application entrypoint."""

from __future__ import annotations

import argparse
import getpass
import logging
import os
import sys
from collections.abc import Sequence
from pathlib import Path
from uuid import uuid4

from delivery_dates_bot.application.city_normalizer import (
    CityAliasTableError,
    CityNormalizer,
    default_city_normalizer,
)
from delivery_dates_bot.application.delivery_parser import parse_batch_with_diagnostics
from delivery_dates_bot.application.delivery_persistence import (
    ListDeliveryDatesUseCase,
    UpdateDeliveryDatesUseCase,
)
from delivery_dates_bot.application.result_formatter import (
    format_parsed_results,
    format_recognition_summary,
)
from delivery_dates_bot.infrastructure.config import (
    SECRET_NAMES,
    load_bot_config,
    resolve_city_aliases_path,
)
from delivery_dates_bot.infrastructure.errors import ConfigurationError
from delivery_dates_bot.infrastructure.logging_config import configure_logging
from delivery_dates_bot.infrastructure.security.keyring_store import KeyringSecretStore
from delivery_dates_bot.infrastructure.store_factory import create_delivery_store
from delivery_dates_bot.presentation.telegram import DeliveryBotHandlers, create_application

LOGGER = logging.getLogger(__name__)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the bot or one of the helper commands."""
    args = _build_parser().parse_args(argv)
    configure_logging()
    try:
        if args.command == "preview":
            return _preview()
        if args.command == "set-secret":
            return _set_secret(args.name)
        return _run_bot()
    except (ConfigurationError, CityAliasTableError) as exc:
        LOGGER.error("event=config_invalid error=%s", exc)
        print(f"Ошибка конфигурации: {exc}", file=sys.stderr)
        return 2
    except Exception:
        correlation_id = str(uuid4())
        LOGGER.exception("event=app_start_failed correlation_id=%s", correlation_id)
        print(
            f"Не удалось запустить бота. correlation_id={correlation_id}",
            file=sys.stderr,
        )
        return 1


def _run_bot() -> int:
    config = load_bot_config(secret_store=KeyringSecretStore())
    city_normalizer = _city_normalizer(config.city_aliases_path)
    store = create_delivery_store(config)
    try:
        handlers = DeliveryBotHandlers(
            update_use_case=UpdateDeliveryDatesUseCase(store.uow_factory),
            list_use_case=ListDeliveryDatesUseCase(store.uow_factory),
            admin_user_id=config.admin_user_id,
            city_normalizer=city_normalizer,
        )
        application = create_application(config.telegram_bot_token, handlers)
        LOGGER.info(
            "event=bot_started store=%s admin_restricted=%s",
            config.store_backend.value,
            config.admin_user_id is not None,
        )
        application.run_polling()
    finally:
        store.close()
        LOGGER.info("event=bot_stopped")
    return 0


def _preview() -> int:
    city_normalizer = _city_normalizer(resolve_city_aliases_path(os.environ))
    result = parse_batch_with_diagnostics(sys.stdin.read(), city_normalizer=city_normalizer)
    print(format_parsed_results(result.records))
    summary = format_recognition_summary(result)
    if summary is not None:
        print()
        print(summary)
    return 0 if result.records else 1


def _set_secret(name: str) -> int:
    value = getpass.getpass(f"{name}: ")
    KeyringSecretStore().set_secret(name, value)
    print(f"Секрет {name} сохранен в системном хранилище ключей.")
    return 0


def _city_normalizer(path: Path | None) -> CityNormalizer:
    if path is None:
        return default_city_normalizer()
    return CityNormalizer.from_file(path)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="delivery-dates-bot",
        description="Telegram bot for city delivery-date updates.",
    )
    subcommands = parser.add_subparsers(dest="command")
    subcommands.add_parser("run", help="start the Telegram bot (default)")
    subcommands.add_parser("preview", help="parse stdin and print the preview")
    secret = subcommands.add_parser("set-secret", help="store a secret in the OS keyring")
    secret.add_argument("name", choices=SECRET_NAMES)
    return parser


if __name__ == "__main__":
    raise SystemExit(main())
