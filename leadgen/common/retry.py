"""
Retrying caller for outbound provider calls.

Wraps a zero-argument coroutine factory in tenacity's AsyncRetrying. Only
transient failures are retried: HTTP 429, HTTP 5xx, or an explicit
RetryableError. The wait honours a numeric Retry-After header and otherwise
doubles from the initial delay. Anything else is re-raised unchanged.

Usage:
    result = await api_call_with_retry(
        lambda: client.post("/v1/people/enrich", json=payload),
        on_retry=lambda attempt, delay_ms: logger.info(f"retry {attempt} in {delay_ms}ms"),
    )
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt
from tenacity.wait import wait_base

from leadgen.common.config import Config
from leadgen.common.error_handling import RetryableError, get_status_code

logger = logging.getLogger(__name__)

T = TypeVar("T")

OnRetry = Callable[[int, int], Any]


def is_retryable(exc: BaseException) -> bool:
    """True for rate limiting, server errors and explicit RetryableError."""
    if isinstance(exc, RetryableError):
        return True
    status = get_status_code(exc)
    if status is None:
        return False
    return status == 429 or status >= 500


def _retry_after_ms(exc: Optional[BaseException]) -> Optional[int]:
    """Server-requested wait in milliseconds, when the header is numeric."""
    response = getattr(exc, "response", None)
    headers = getattr(response, "headers", None)
    if not headers:
        return None
    value = headers.get("retry-after") or headers.get("Retry-After")
    if value is None:
        return None
    try:
        seconds = float(str(value).strip())
    except ValueError:
        # HTTP-date form is not honoured; fall back to backoff
        return None
    if seconds < 0:
        return None
    return int(seconds * 1000)


def compute_delay_ms(exc: Optional[BaseException], attempt_number: int, initial_delay_ms: int) -> int:
    """Retry-After when present, else initial_delay_ms * 2^(attempt-1)."""
    retry_after = _retry_after_ms(exc)
    if retry_after is not None:
        return retry_after
    return initial_delay_ms * (2 ** (attempt_number - 1))


class wait_retry_after_or_exponential(wait_base):
    """tenacity wait strategy reading Retry-After from the failed attempt."""

    def __init__(self, initial_delay_ms: int):
        self.initial_delay_ms = initial_delay_ms

    def __call__(self, retry_state: RetryCallState) -> float:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        delay_ms = compute_delay_ms(exc, retry_state.attempt_number, self.initial_delay_ms)
        return delay_ms / 1000.0


def _before_sleep(on_retry: Optional[OnRetry]) -> Callable[[RetryCallState], None]:
    def callback(retry_state: RetryCallState) -> None:
        delay_ms = int(round(retry_state.next_action.sleep * 1000)) if retry_state.next_action else 0
        attempt = retry_state.attempt_number
        if on_retry is not None:
            on_retry(attempt, delay_ms)
            return
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(f"Attempt {attempt} failed ({exc}); retrying in {delay_ms}ms")

    return callback


async def api_call_with_retry(
    operation: Callable[[], Awaitable[T]],
    on_retry: Optional[OnRetry] = None,
    max_attempts: Optional[int] = None,
    initial_delay_ms: Optional[int] = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> T:
    """
    Run `operation` with retries on transient failures.

    Args:
        operation: Zero-argument callable returning an awaitable
        on_retry: Called as on_retry(attempt_number, delay_ms) before each wait
        max_attempts: Total attempts including the first (default RETRY_MAX_ATTEMPTS)
        initial_delay_ms: Backoff base (default RETRY_INITIAL_DELAY_MS)
        sleep: Awaitable sleep taking seconds, injectable for tests

    Returns:
        The operation's result

    Raises:
        The last exception, unchanged, once attempts are exhausted or the
        failure is not retryable.
    """
    attempts = max_attempts if max_attempts is not None else Config.RETRY_MAX_ATTEMPTS
    delay_ms = initial_delay_ms if initial_delay_ms is not None else Config.RETRY_INITIAL_DELAY_MS
    if attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    retrying = AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait_retry_after_or_exponential(delay_ms),
        retry=retry_if_exception(is_retryable),
        before_sleep=_before_sleep(on_retry),
        reraise=True,
        sleep=sleep,
    )

    async for attempt in retrying:
        with attempt:
            result = await operation()
    return result
