"""Retry rules for PostgREST requests.

Whether a failed request may be sent again depends on its HTTP method.
GET and PATCH with absolute values can be repeated freely. A POST insert is
repeated only when the server cannot have applied it: a 429 rejection or a
connection that was never established. A read timeout or a 5xx after the
body went out may hide a committed insert, so those surface to the caller.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

import httpx

from delivery_dates_bot.infrastructure.supabase.errors import (
    SupabaseRateLimitError,
    SupabaseRetryExhaustedError,
    SupabaseServerError,
)

LOGGER = logging.getLogger(__name__)

TResult = TypeVar("TResult")

IDEMPOTENT_METHODS = frozenset({"GET", "HEAD", "PATCH", "PUT", "DELETE"})

# The request never reached PostgREST.
_NOT_SENT_ERRORS: tuple[type[Exception], ...] = (
    httpx.ConnectError,
    httpx.ConnectTimeout,
    httpx.PoolTimeout,
)


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt budget, backoff curve and the cap on server-requested waits."""

    max_attempts: int = 3
    base_delay_seconds: float = 0.25
    max_delay_seconds: float = 2.0
    backoff_multiplier: float = 2.0
    max_retry_after_seconds: float = 10.0


def is_retryable_supabase_error(error: Exception, *, method: str = "GET") -> bool:
    """Return whether ``method`` may be re-sent after ``error``."""
    if isinstance(error, (SupabaseRateLimitError, *_NOT_SENT_ERRORS)):
        return True
    if method.upper() not in IDEMPOTENT_METHODS:
        return False
    return isinstance(error, (SupabaseServerError, httpx.TransportError))


class RetryExecutor:
    """Send a PostgREST request again while its failure is safe to repeat."""

    def __init__(
        self,
        policy: RetryPolicy,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if policy.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if policy.base_delay_seconds < 0 or policy.max_delay_seconds < 0:
            raise ValueError("retry delays must be >= 0")
        if policy.backoff_multiplier < 1:
            raise ValueError("backoff_multiplier must be >= 1")
        if policy.max_retry_after_seconds < 0:
            raise ValueError("max_retry_after_seconds must be >= 0")

        self._policy = policy
        self._sleep = sleep

    def run(self, operation: Callable[[], TResult], *, method: str = "GET") -> TResult:
        """Run ``operation`` sending ``method``; raise once retries stop being safe."""
        attempt = 1
        while True:
            try:
                return operation()
            except Exception as exc:
                if not is_retryable_supabase_error(exc, method=method):
                    raise
                if attempt >= self._policy.max_attempts:
                    raise SupabaseRetryExhaustedError(
                        f"{method} gave up after {attempt} attempts.",
                        attempts=attempt,
                    ) from exc

                delay_seconds = self.delay_for(attempt, exc)
                LOGGER.warning(
                    "event=supabase_retry method=%s attempt=%s delay_seconds=%s error_type=%s",
                    method,
                    attempt,
                    delay_seconds,
                    exc.__class__.__name__,
                )
                self._sleep(delay_seconds)
                attempt += 1

    def delay_for(self, attempt: int, error: Exception) -> float:
        """Backoff for ``attempt``, stretched to the server's Retry-After on 429."""
        policy = self._policy
        delay_seconds = min(
            policy.max_delay_seconds,
            policy.base_delay_seconds * (policy.backoff_multiplier ** (attempt - 1)),
        )
        if isinstance(error, SupabaseRateLimitError) and error.retry_after_seconds is not None:
            requested = min(error.retry_after_seconds, policy.max_retry_after_seconds)
            delay_seconds = max(delay_seconds, requested)
        return delay_seconds
