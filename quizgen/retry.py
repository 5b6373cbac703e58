"""Bounded retries with exponential backoff for unreliable async calls."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

import httpx

from quizgen.errors import AbortedError, OperationTimeoutError

_log = logging.getLogger("quizgen.retry")

T = TypeVar("T")

RATE_LIMIT_MESSAGES = ("RESOURCE_EXHAUSTED", "Too Many Requests")


def _status_code(exc: BaseException) -> int | None:
    """Pull an HTTP status out of SDK or httpx errors, if there is one."""
    status = getattr(exc, "status_code", None)
    if status is None:
        status = getattr(exc, "status", None)
    if status is None:
        response = getattr(exc, "response", None)
        status = getattr(response, "status_code", None)
    return status if isinstance(status, int) else None


def is_timeout(exc: BaseException) -> bool:
    return isinstance(exc, (TimeoutError, httpx.TimeoutException)) or "timeout" in str(exc)


def is_rate_limited(exc: BaseException) -> bool:
    if _status_code(exc) == 429:
        return True
    message = str(exc)
    return any(m in message for m in RATE_LIMIT_MESSAGES)


def is_retryable(exc: BaseException) -> bool:
    """True for rate limiting, aborts and timeouts; everything else is fatal."""
    if isinstance(exc, (AbortedError, asyncio.CancelledError)):
        return True
    return is_timeout(exc) or is_rate_limited(exc)


def _caller_cancelled() -> bool:
    task = asyncio.current_task()
    return task is not None and task.cancelling() > 0


async def _attempt(operation: Callable[[], Awaitable[T]], timeout_ms: int) -> T:
    """Run one attempt; the operation is cancelled if the timer fires first."""
    try:
        async with asyncio.timeout(timeout_ms / 1000) as deadline:
            return await operation()
    except TimeoutError:
        if deadline.expired():
            raise OperationTimeoutError(timeout_ms) from None
        raise


async def execute_with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    timeout_ms: int = 10000,
    initial_delay_ms: int = 500,
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
) -> T:
    """Await *operation* with a per-attempt timeout, retrying transient failures.

    Retryable failures (see :func:`is_retryable`) are retried after
    ``initial_delay_ms * 2**attempt`` milliseconds until *max_attempts* is
    used up.  Fatal failures are re-raised on the spot.  The error that ends
    the loop is always the most recent one, re-raised unchanged.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1 (got {max_attempts})")
    if timeout_ms <= 0:
        raise ValueError(f"timeout_ms must be positive (got {timeout_ms})")
    if initial_delay_ms <= 0:
        raise ValueError(f"initial_delay_ms must be positive (got {initial_delay_ms})")

    for attempt in range(max_attempts):
        try:
            return await _attempt(operation, timeout_ms)
        except (Exception, asyncio.CancelledError) as e:
            # Our own caller going away is not an operation failure
            if isinstance(e, asyncio.CancelledError) and _caller_cancelled():
                raise
            if not is_retryable(e) or attempt >= max_attempts - 1:
                _log.error(
                    "Attempt %d/%d failed with non-retryable error or max retries reached: %s",
                    attempt + 1, max_attempts, str(e) or type(e).__name__,
                )
                if isinstance(e, asyncio.CancelledError):
                    raise AbortedError("operation was aborted") from e
                raise
            delay = initial_delay_ms * (2 ** attempt)
            _log.warning(
                "Attempt %d/%d failed: %s. Retrying in %dms...",
                attempt + 1, max_attempts, str(e) or type(e).__name__, delay,
            )
            await sleep(delay / 1000)

    raise AssertionError("unreachable")  # loop always returns or raises
