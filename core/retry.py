"""Backoff for remote record store requests.

Updates:
  v0.3.0 - 2026-10-18 - Narrow to the remote store: fixed backoff cap, retry logging, no jitter.
  v0.2.0 - 2026-04-19 - Retry remote record loads/saves; drop unused async variant.
  v0.1.0 - 2026-02-04 - Add exponential backoff retry helper.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from collections.abc import Callable

BASE_DELAY_SECONDS = 0.25
MAX_DELAY_SECONDS = 2.0

_TRANSIENT_STATUS_CODES = {408, 429}

logger = logging.getLogger("return_tracker.retry")


def is_transient_remote_error(exc: Exception) -> bool:
    """Return ``True`` for timeouts, transport failures, and 408/429/5xx responses."""
    if isinstance(exc, httpx.HTTPStatusError):
        status_code = exc.response.status_code
        return status_code in _TRANSIENT_STATUS_CODES or 500 <= status_code < 600
    return isinstance(exc, (httpx.TimeoutException, httpx.TransportError))


def backoff_delay(attempt: int) -> float:
    """Seconds to wait after failed *attempt* (1-based): doubling, capped."""
    return min(MAX_DELAY_SECONDS, BASE_DELAY_SECONDS * (2 ** (attempt - 1)))


def retry[T](
    operation: Callable[[], T],
    *,
    max_attempts: int,
    should_retry: Callable[[Exception], bool] = is_transient_remote_error,
) -> T:
    """Call *operation* up to *max_attempts* times, sleeping between transient failures.

    The last exception is re-raised once attempts run out or *should_retry*
    rejects it.
    """
    attempts = max(1, int(max_attempts))
    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except Exception as exc:
            if attempt >= attempts or not should_retry(exc):
                raise
            delay = backoff_delay(attempt)
            logger.info(
                "Remote request failed (attempt %d of %d): %s; retrying in %.2fs",
                attempt,
                attempts,
                exc,
                delay,
            )
            time.sleep(delay)
    raise RuntimeError("retry exhausted retries")  # pragma: no cover


__all__ = ["backoff_delay", "is_transient_remote_error", "retry"]
