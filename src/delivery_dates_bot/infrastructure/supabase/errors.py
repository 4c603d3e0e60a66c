"""Exceptions for the Supabase REST adapter."""

from __future__ import annotations


class SupabaseError(RuntimeError):
    """Base error for Supabase infrastructure failures."""


class SupabaseRequestError(SupabaseError):
    """Raised when PostgREST rejects request as non-retryable client error."""


class SupabaseConflictError(SupabaseRequestError):
    """Raised on HTTP 409, e.g. a unique violation on insert."""


class SupabaseRateLimitError(SupabaseError):
    """Raised on HTTP 429 from Supabase."""

    def __init__(self, message: str, retry_after_seconds: float | None = None) -> None:
        super().__init__(message)
        self.retry_after_seconds = retry_after_seconds


class SupabaseServerError(SupabaseError):
    """Raised on server-side errors (HTTP 5xx)."""


class SupabaseResponseError(SupabaseError):
    """Raised when response shape cannot be parsed safely."""


class SupabaseRetryExhaustedError(SupabaseError):
    """Raised when retry budget is exhausted for retryable errors."""

    def __init__(self, message: str, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts
