"""Retry logic with structured logging using tenacity."""

from __future__ import annotations

import functools
from typing import TYPE_CHECKING, ParamSpec, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from resumable_batch.utils.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

P = ParamSpec("P")
T = TypeVar("T")

logger = get_logger(__name__)

# Transient network and I/O errors (requests/httpx errors inherit from OSError)
_RETRYABLE_EXCEPTIONS: tuple[type[BaseException], ...] = (
    ConnectionError,
    TimeoutError,
    OSError,
)


def _log_retry(function_name: str, retry_state: RetryCallState) -> None:
    """Log retry attempt with structured context."""
    logger.warning(
        "retrying_operation",
        attempt=retry_state.attempt_number,
        function=function_name,
        error=str(retry_state.outcome.exception()) if retry_state.outcome else "unknown",
    )


def retry_with_logging(
    max_attempts: int = 3,
    min_wait: float = 2,
    max_wait: float = 10,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Decorator retrying a coroutine function on transient errors.

    Intended for caller-supplied page fetchers and item processors; the batch
    drivers themselves never retry. Uses exponential backoff between
    ``min_wait`` and ``max_wait`` seconds and re-raises the last error.
    """

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            retrying = AsyncRetrying(
                stop=stop_after_attempt(max_attempts),
                wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
                retry=retry_if_exception_type(_RETRYABLE_EXCEPTIONS),
                before_sleep=functools.partial(_log_retry, func.__name__),
                reraise=True,
            )
            async for attempt in retrying:
                with attempt:
                    return await func(*args, **kwargs)
            msg = "retry loop exited without a result"
            raise RuntimeError(msg)

        return wrapper

    return decorator
