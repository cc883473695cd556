"""Batch processing with automatic snapshot persistence."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from resumable_batch.models.batch_options import BatchOptions, PaginatedBatchOptions
from resumable_batch.services.batch_processor import (
    call_hook,
    process_batches,
    process_paginated_batches,
)
from resumable_batch.services.state_manager import StateManager

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping
    from pathlib import Path

    from resumable_batch.models.batch_result import BatchResult
    from resumable_batch.models.snapshot import Snapshot
    from resumable_batch.services.protocols import StateStore

logger = structlog.get_logger(__name__)


def _as_fields(
    options: BatchOptions | PaginatedBatchOptions | Mapping[str, Any] | None,
) -> dict[str, Any]:
    """Flatten an options object or mapping into keyword fields."""
    return {} if options is None else dict(options)


class ResumableBatchProcessor:
    """Runs batch drivers seeded from, and saving back to, a state store.

    Each run loads the persisted snapshot as its initial state, so a halted
    run continues its counters (and page cursor) on the next call.
    """

    def __init__(
        self,
        process_function: Callable[..., Any],
        state_manager: StateStore,
        save_state_on_batch: bool = True,
        save_state_on_item: bool = False,
        save_state_interval: int = 5,
    ) -> None:
        if save_state_interval <= 0:
            msg = "save_state_interval must be greater than 0"
            raise ValueError(msg)
        self.process_function = process_function
        self.state_manager = state_manager
        self.save_state_on_batch = save_state_on_batch
        self.save_state_on_item = save_state_on_item
        self.save_state_interval = save_state_interval

    async def process(
        self,
        items: Iterable[Any],
        options: BatchOptions | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> BatchResult:
        """Process ``items`` through :func:`process_batches` with state auto-saved."""
        fields = {**_as_fields(options), **overrides}
        user_state_update = fields.get("on_state_update")
        user_item_success = fields.get("on_item_success")

        async def on_state_update(
            state: Snapshot,
            batch_number: int | None = None,
            total_batches: int | None = None,
        ) -> None:
            if self.save_state_on_batch and batch_number is not None and total_batches is not None:
                await self.state_manager.save_state(state)
            await call_hook(user_state_update, state, batch_number, total_batches)

        fields["initial_state"] = await self.state_manager.load_state()
        fields["on_state_update"] = on_state_update
        fields["on_item_success"] = self._wrap_item_success(user_item_success)
        return await process_batches(items, self.process_function, BatchOptions(**fields))

    async def process_pages(
        self,
        fetch_page: Callable[..., Any],
        options: PaginatedBatchOptions | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> BatchResult:
        """Process paginated items through :func:`process_paginated_batches` with state auto-saved.

        The paginated driver reports every state replacement without a batch
        number, so each one is saved when ``save_state_on_batch`` is set.
        """
        fields = {**_as_fields(options), **overrides}
        user_state_update = fields.get("on_state_update")

        async def on_state_update(state: Snapshot) -> None:
            if self.save_state_on_batch:
                await self.state_manager.save_state(state)
            await call_hook(user_state_update, state)

        fields["initial_state"] = await self.state_manager.load_state()
        fields["on_state_update"] = on_state_update
        fields["on_item_success"] = self._wrap_item_success(fields.get("on_item_success"))
        return await process_paginated_batches(
            fetch_page, self.process_function, PaginatedBatchOptions(**fields)
        )

    async def clear_state(self) -> None:
        """Delete the persisted snapshot."""
        await self.state_manager.clear_state()

    async def get_state(self) -> Snapshot:
        """Return the currently persisted snapshot."""
        return await self.state_manager.load_state()

    def _wrap_item_success(
        self, user_item_success: Callable[..., Any] | None
    ) -> Callable[..., Any]:
        async def on_item_success(
            item: Any, result: Any, total_processed: int, state: Snapshot
        ) -> None:
            if self.save_state_on_item and total_processed % self.save_state_interval == 0:
                await self.state_manager.save_state(state)
            await call_hook(user_item_success, item, result, total_processed, state)

        return on_item_success


def create_batch_processor_with_state(
    process_function: Callable[..., Any],
    state_file_path: str | Path,
    *,
    save_state_on_batch: bool = True,
    save_state_on_item: bool = False,
    save_state_interval: int = 5,
) -> ResumableBatchProcessor:
    """Build a :class:`ResumableBatchProcessor` backed by a JSON state file."""
    logger.debug("resumable_processor_created", state_file=str(state_file_path))
    return ResumableBatchProcessor(
        process_function,
        StateManager(state_file_path),
        save_state_on_batch=save_state_on_batch,
        save_state_on_item=save_state_on_item,
        save_state_interval=save_state_interval,
    )
