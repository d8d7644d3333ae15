"""
Retry policy for requests forwarded to the Bun Docs API.

Provides the exponential backoff schedule and the predicates that decide
whether a failed attempt is worth repeating.
"""

from dataclasses import dataclass
from typing import Optional

import httpx

# Maximum number of attempts for one forwarded request
MAX_RETRIES = 3

# Base delay for exponential backoff (milliseconds)
BACKOFF_BASE_MS = 200

# Maximum backoff delay (milliseconds)
BACKOFF_MAX_MS = 1000

TRANSIENT_STATUS_CODES = frozenset({429, 500, 502, 503, 504})

# Connection failures, timeouts and request-construction failures
TRANSIENT_NETWORK_ERRORS = (
    httpx.ConnectError,
    httpx.TimeoutException,
    httpx.UnsupportedProtocol,
    httpx.LocalProtocolError,
    httpx.InvalidURL,
)


def backoff_delay_ms(attempt: int) -> int:
    """
    Calculate the backoff delay before the attempt following ``attempt``.

    200ms, 400ms, 800ms, then capped at 1000ms.

    Args:
        attempt: The attempt that just failed (1-based).

    Returns:
        The delay in milliseconds.
    """
    if attempt < 1:
        raise ValueError(f"attempt must be >= 1, got {attempt}")
    return min(BACKOFF_BASE_MS * (1 << (attempt - 1)), BACKOFF_MAX_MS)


def is_transient_status(status_code: int) -> bool:
    """Rate limiting (429) and 500/502/503/504 are worth retrying."""
    return status_code in TRANSIENT_STATUS_CODES


def is_transient_network_error(error: BaseException) -> bool:
    """Return True for network errors that an identical retry could fix."""
    return isinstance(error, TRANSIENT_NETWORK_ERRORS)


@dataclass(frozen=True)
class RetryState:
    """Attempt counter and last recorded failure of a single forward call."""
    attempt: int = 1
    last_error: Optional[Exception] = None

    @property
    def has_attempts_left(self) -> bool:
        return self.attempt < MAX_RETRIES

    def next(self, error: Exception) -> "RetryState":
        return RetryState(attempt=self.attempt + 1, last_error=error)
