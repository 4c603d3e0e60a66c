"""Shared infrastructure exceptions."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when required settings are missing or invalid."""
