"""Bounded admission gate for concurrent async tasks."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

T = TypeVar("T")


class ConcurrencyGate:
    """Admit at most ``limit`` zero-argument async tasks at a time.

    Excess tasks wait on an ``asyncio.Semaphore``, whose waiters are woken in
    FIFO order. Each task's result or exception goes back to its own caller;
    a failing task never cancels its siblings.
    """

    def __init__(self, limit: int) -> None:
        if limit <= 0:
            msg = "concurrency limit must be greater than 0"
            raise ValueError(msg)
        self.limit = limit
        self._semaphore = asyncio.Semaphore(limit)
        self._active = 0
        self.peak_active = 0

    @property
    def active(self) -> int:
        """Number of admitted tasks that have not settled yet."""
        return self._active

    async def run(self, task: Callable[[], Awaitable[T]]) -> T:
        """Wait for a free slot, then run ``task`` and return its result."""
        async with self._semaphore:
            self._active += 1
            self.peak_active = max(self.peak_active, self._active)
            try:
                return await task()
            finally:
                self._active -= 1
