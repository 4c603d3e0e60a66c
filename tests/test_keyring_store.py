"""Unit tests for keyring secret adapter."""

from __future__ import annotations

import keyring
import pytest
from keyring.errors import KeyringError, PasswordDeleteError

from delivery_dates_bot.infrastructure.security.keyring_store import (
    KeyringSecretStore,
    SecretStoreError,
)


def test_keyring_store_set_get_delete_roundtrip(monkeypatch: pytest.MonkeyPatch) -> None:
    memory: dict[tuple[str, str], str] = {}

    def fake_set_password(service: str, username: str, password: str) -> None:
        memory[(service, username)] = password

    def fake_get_password(service: str, username: str) -> str | None:
        return memory.get((service, username))

    def fake_delete_password(service: str, username: str) -> None:
        if (service, username) not in memory:
            raise PasswordDeleteError("missing")
        del memory[(service, username)]

    monkeypatch.setattr(keyring, "set_password", fake_set_password)
    monkeypatch.setattr(keyring, "get_password", fake_get_password)
    monkeypatch.setattr(keyring, "delete_password", fake_delete_password)

    store = KeyringSecretStore(service_name="test-service")

    store.set_secret("TELEGRAM_BOT_TOKEN", "  123:abc  ")
    assert store.get_secret("TELEGRAM_BOT_TOKEN") == "123:abc"
    assert memory == {("test-service", "TELEGRAM_BOT_TOKEN"): "123:abc"}

    store.delete_secret("TELEGRAM_BOT_TOKEN")
    store.delete_secret("TELEGRAM_BOT_TOKEN")
    assert store.get_secret("TELEGRAM_BOT_TOKEN") is None


def test_keyring_store_rejects_blank_secret() -> None:
    with pytest.raises(ValueError):
        KeyringSecretStore(service_name="test-service").set_secret("TELEGRAM_BOT_TOKEN", "   ")


def test_keyring_store_raises_on_backend_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    def failing_get_password(_: str, __: str) -> str | None:
        raise KeyringError("backend down")

    monkeypatch.setattr(keyring, "get_password", failing_get_password)

    store = KeyringSecretStore(service_name="test-service")
    with pytest.raises(SecretStoreError):
        store.get_secret("SUPABASE_SERVICE_ROLE_KEY")
