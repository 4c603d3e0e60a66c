"""Security infrastructure package."""

from delivery_dates_bot.infrastructure.security.keyring_store import (
    KeyringSecretStore,
    SecretStoreError,
)

__all__ = ["KeyringSecretStore", "SecretStoreError"]
