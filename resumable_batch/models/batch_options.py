"""Per-call configuration for the batch drivers."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from resumable_batch.models.snapshot import Snapshot
from resumable_batch.utils.clock import utc_now

# Lifecycle hooks may be plain functions or coroutine functions.
Callback = Callable[..., Any]


def _require_positive(name: str, value: int) -> int:
    if value <= 0:
        msg = f"{name} must be greater than 0"
        raise ValueError(msg)
    return value


class _DriverOptions(BaseModel):
    """Fields shared by both drivers."""

    # Misspelled or camelCase option names fail validation instead of being ignored.
    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    concurrency_limit: int = 10
    state_update_interval: int = 5
    on_item_success: Callback | None = None
    on_item_error: Callback | None = None
    on_state_update: Callback | None = None
    initial_state: Snapshot = Field(default_factory=Snapshot)
    clock: Callable[[], datetime] = utc_now

    @field_validator("concurrency_limit")
    @classmethod
    def validate_concurrency_limit(cls, value: int) -> int:
        """Concurrency limit must be positive."""
        return _require_positive("concurrency_limit", value)

    @field_validator("state_update_interval")
    @classmethod
    def validate_state_update_interval(cls, value: int) -> int:
        """State update interval must be positive."""
        return _require_positive("state_update_interval", value)

    @field_validator("initial_state", mode="before")
    @classmethod
    def coerce_initial_state(cls, value: Any) -> Any:
        """Accept ``None`` as an empty snapshot."""
        return Snapshot() if value is None else value


class BatchOptions(_DriverOptions):
    """Options for :func:`process_batches`.

    Hooks, all optional:
        on_batch_start(batch_number, total_batches, batch, state)
        on_batch_complete(batch_number, total_batches, batch, total_processed, total_failed, state)
        on_item_success(item, result, total_processed, state)
        on_item_error(item, error, total_failed, state)
        on_state_update(state, batch_number, total_batches)
    """

    batch_size: int = 20
    on_batch_start: Callback | None = None
    on_batch_complete: Callback | None = None

    @field_validator("batch_size")
    @classmethod
    def validate_batch_size(cls, value: int) -> int:
        """Batch size must be positive."""
        return _require_positive("batch_size", value)


class PaginatedBatchOptions(_DriverOptions):
    """Options for :func:`process_paginated_batches`.

    Hooks, all optional:
        on_page_start(current_page, total_pages, state)
        on_page_complete(page_number, total_pages, page_processed, total_processed, state)
        on_item_success(item, result, total_processed, state)
        on_item_error(item, error, total_failed, state)
        on_state_update(state)
    """

    initial_page: int = 1
    on_page_start: Callback | None = None
    on_page_complete: Callback | None = None

    @field_validator("initial_page")
    @classmethod
    def validate_initial_page(cls, value: int) -> int:
        """Pages are numbered from 1."""
        return _require_positive("initial_page", value)
