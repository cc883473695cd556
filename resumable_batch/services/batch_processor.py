"""Concurrency-limited batch drivers over in-memory and paginated sources."""

from __future__ import annotations

import asyncio
import functools
import inspect
import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

import structlog

from resumable_batch.models.batch_options import BatchOptions, PaginatedBatchOptions
from resumable_batch.models.batch_result import BatchResult
from resumable_batch.models.page_data import PageData
from resumable_batch.services.concurrency_gate import ConcurrencyGate
from resumable_batch.utils.clock import to_iso_timestamp

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from datetime import datetime

    from resumable_batch.models.batch_options import _DriverOptions
    from resumable_batch.models.snapshot import Snapshot

logger = structlog.get_logger(__name__)

OptionsT = TypeVar("OptionsT", BatchOptions, PaginatedBatchOptions)


async def call_hook(callback: Callable[..., Any] | None, *args: Any) -> Any:
    """Invoke a sync or async callable and wait for it to finish."""
    if callback is None:
        return None
    result = callback(*args)
    if inspect.isawaitable(result):
        return await result
    return result


def _resolve_options(
    options_cls: type[OptionsT],
    options: OptionsT | Mapping[str, Any] | None,
    overrides: dict[str, Any],
) -> OptionsT:
    """Build validated options from an options object, a mapping, and keyword overrides."""
    if options is None:
        return options_cls(**overrides)
    if isinstance(options, Mapping):
        return options_cls(**{**options, **overrides})
    if overrides:
        return options_cls(**{**dict(options), **overrides})
    return options


@dataclass
class _RunState:
    """Counters and current snapshot owned by one driver call."""

    total_processed: int
    total_failed: int
    state: Snapshot
    clock: Callable[[], datetime]

    def refresh(self, **changes: Any) -> Snapshot:
        """Replace the snapshot with one carrying the latest counters and timestamp."""
        self.state = self.state.updated(
            total_processed=self.total_processed,
            total_failed=self.total_failed,
            last_updated=to_iso_timestamp(self.clock()),
            **changes,
        )
        return self.state


async def _run_items(
    run: _RunState,
    items: Sequence[Any],
    process_function: Callable[..., Any],
    options: _DriverOptions,
    state_update_args: tuple[Any, ...],
) -> int:
    """Run one batch or page of items through the gate.

    Returns the number of items that succeeded. Item failures are counted
    and reported; exceptions raised by hooks abort the remaining items and
    propagate.
    """
    gate = ConcurrencyGate(options.concurrency_limit)
    group_processed = 0

    async def run_item(item: Any, index: int) -> None:
        nonlocal group_processed
        try:
            result = await call_hook(process_function, item, index, run.state)
        except Exception as exc:
            run.total_failed += 1
            logger.error(
                "batch_item_failed",
                item=str(item)[:100],
                index=index,
                error=str(exc),
            )
            await call_hook(options.on_item_error, item, exc, run.total_failed, run.state)
            return

        run.total_processed += 1
        group_processed += 1
        await call_hook(options.on_item_success, item, result, run.total_processed, run.state)

        if (
            group_processed % options.state_update_interval == 0
            or group_processed == len(items)
        ):
            run.refresh()
            await call_hook(options.on_state_update, run.state, *state_update_args)

    try:
        async with asyncio.TaskGroup() as group:
            for index, item in enumerate(items):
                group.create_task(gate.run(functools.partial(run_item, item, index)))
    except BaseExceptionGroup as exc_group:
        # Surface the hook's own exception rather than the group wrapper
        raise exc_group.exceptions[0] from None

    return group_processed


async def process_batches(
    items: Iterable[Any],
    process_function: Callable[..., Any],
    options: BatchOptions | Mapping[str, Any] | None = None,
    **overrides: Any,
) -> BatchResult:
    """Process ``items`` in sequential batches with bounded concurrency.

    ``process_function(item, index_within_batch, state)`` may be sync or
    async. Each batch is a barrier: batch N+1 starts only after every item
    of batch N has settled and its completion hooks have returned.
    """
    opts = _resolve_options(BatchOptions, options, overrides)
    items = list(items)
    initial = opts.initial_state
    run = _RunState(
        total_processed=initial.total_processed or 0,
        total_failed=initial.total_failed or 0,
        state=initial,
        clock=opts.clock,
    )
    total_batches = math.ceil(len(items) / opts.batch_size)

    for batch_number, start in enumerate(range(0, len(items), opts.batch_size), start=1):
        batch = items[start : start + opts.batch_size]
        logger.info(
            "batch_started",
            batch_number=batch_number,
            total_batches=total_batches,
            batch_size=len(batch),
        )
        await call_hook(opts.on_batch_start, batch_number, total_batches, batch, run.state)

        await _run_items(run, batch, process_function, opts, (batch_number, total_batches))

        run.refresh()
        await call_hook(opts.on_state_update, run.state, batch_number, total_batches)
        logger.info(
            "batch_completed",
            batch_number=batch_number,
            total_batches=total_batches,
            total_processed=run.total_processed,
            total_failed=run.total_failed,
        )
        await call_hook(
            opts.on_batch_complete,
            batch_number,
            total_batches,
            batch,
            run.total_processed,
            run.total_failed,
            run.state,
        )

    return BatchResult(processed=run.total_processed, failed=run.total_failed, state=run.state)


async def process_paginated_batches(
    fetch_page: Callable[..., Any],
    process_function: Callable[..., Any],
    options: PaginatedBatchOptions | Mapping[str, Any] | None = None,
    **overrides: Any,
) -> BatchResult:
    """Fetch pages one at a time and process each page's items with bounded concurrency.

    ``fetch_page(page, state)`` returns a :class:`PageData` or an equivalent
    mapping. The page count is learned from the responses, so the loop
    condition is re-checked after every page. A failing ``fetch_page``
    aborts the run.
    """
    opts = _resolve_options(PaginatedBatchOptions, options, overrides)
    initial = opts.initial_state
    current_page = initial.current_page or opts.initial_page
    total_pages = initial.total_pages or 1
    run = _RunState(
        total_processed=initial.total_processed or 0,
        total_failed=initial.total_failed or 0,
        state=initial,
        clock=opts.clock,
    )
    run.state = initial.updated(
        current_page=current_page,
        total_pages=total_pages,
        total_processed=run.total_processed,
        total_failed=run.total_failed,
    )

    while current_page <= total_pages:
        logger.info("page_started", page=current_page, total_pages=total_pages)
        await call_hook(opts.on_page_start, current_page, total_pages, run.state)

        try:
            raw_page = await call_hook(fetch_page, current_page, run.state)
            page = raw_page if isinstance(raw_page, PageData) else PageData.model_validate(raw_page)
        except Exception as exc:
            logger.error("page_fetch_failed", page=current_page, error=str(exc))
            raise

        if page.total_pages and page.total_pages != total_pages:
            logger.info(
                "page_total_changed",
                previous_total=total_pages,
                total_pages=page.total_pages,
            )
            total_pages = page.total_pages
            run.state = run.state.updated(total_pages=total_pages)
            await call_hook(opts.on_state_update, run.state)

        page_items = page.page_items
        if not page_items:
            logger.info("empty_page", page=current_page)
            current_page += 1
            run.state = run.state.updated(current_page=current_page)
            await call_hook(opts.on_state_update, run.state)
            continue

        page_processed = await _run_items(run, page_items, process_function, opts, ())

        completed_page = current_page
        current_page += 1
        run.refresh(current_page=current_page)
        await call_hook(opts.on_state_update, run.state)
        logger.info(
            "page_completed",
            page=completed_page,
            total_pages=total_pages,
            page_processed=page_processed,
            total_processed=run.total_processed,
        )
        await call_hook(
            opts.on_page_complete,
            completed_page,
            total_pages,
            page_processed,
            run.total_processed,
            run.state,
        )

    return BatchResult(processed=run.total_processed, failed=run.total_failed, state=run.state)
