"""Progress tracking utilities for batch operations."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from resumable_batch.models.snapshot import Snapshot
from resumable_batch.utils.clock import to_epoch_millis, to_iso_timestamp, utc_now
from resumable_batch.utils.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

logger = get_logger(__name__)


def format_time(seconds: float) -> str:
    """Format seconds as ``1h 2m 3s``; negative values are ``unknown``."""
    if seconds < 0:
        return "unknown"

    hrs = int(seconds // 3600)
    mins = int((seconds % 3600) // 60)
    secs = int(seconds % 60)

    result = ""
    if hrs > 0:
        result += f"{hrs}h "
    if mins > 0 or hrs > 0:
        result += f"{mins}m "
    result += f"{secs}s"
    return result


@dataclass(frozen=True)
class ProgressStats:
    """Point-in-time progress figures."""

    processed: int
    failed: int
    total: int
    percent: float
    elapsed: float
    estimated_remaining: float
    items_per_second: float


@dataclass
class StateTracker:
    """Track progress of a batch run against a known item total.

    Keeps a snapshot seeded from ``initial_state``; ``startTime`` and
    ``startedAt`` from a previous run are preserved. Elapsed time and speed
    are measured from when this tracker was created.
    """

    total_items: int
    initial_state: Snapshot | None = None
    clock: Callable[[], datetime] = utc_now
    start_monotonic: float = field(default_factory=time.monotonic)
    state: Snapshot = field(init=False)

    def __post_init__(self) -> None:
        initial = self.initial_state or Snapshot()
        now = self.clock()
        self.state = initial.updated(
            total_processed=initial.total_processed or 0,
            total_failed=initial.total_failed or 0,
            start_time=initial.start_time or to_epoch_millis(now),
            started_at=initial.started_at or to_iso_timestamp(now),
            last_updated=to_iso_timestamp(now),
        )

    def get_state(self) -> Snapshot:
        """Return the current snapshot."""
        return self.state

    def update_progress(self, processed: int, failed: int, **additional: Any) -> Snapshot:
        """Record new counter values, merging any extra fields into the snapshot."""
        self.state = self.state.updated(
            **additional,
            total_processed=processed,
            total_failed=failed,
            last_updated=to_iso_timestamp(self.clock()),
        )
        return self.state

    @property
    def elapsed_seconds(self) -> float:
        """Time elapsed since this tracker was created."""
        return time.monotonic() - self.start_monotonic

    def get_progress(self) -> ProgressStats:
        """Compute percentage, speed and remaining-time estimates."""
        processed = self.state.total_processed or 0
        failed = self.state.total_failed or 0
        elapsed = self.elapsed_seconds
        percent = (processed / self.total_items) * 100.0 if self.total_items > 0 else 0.0
        items_per_second = processed / elapsed if elapsed > 0 else 0.0
        estimated_remaining = (
            (self.total_items - processed) / items_per_second if items_per_second > 0 else -1.0
        )
        return ProgressStats(
            processed=processed,
            failed=failed,
            total=self.total_items,
            percent=percent,
            elapsed=elapsed,
            estimated_remaining=estimated_remaining,
            items_per_second=items_per_second,
        )

    def format_progress(self, show_speed: bool = True) -> str:
        """Human-readable one-line progress summary."""
        progress = self.get_progress()
        result = f"Progress: {progress.processed}/{progress.total} ({progress.percent:.1f}%)"

        if progress.failed > 0:
            result += f", Failed: {progress.failed}"

        if show_speed:
            result += f", Speed: {progress.items_per_second:.2f} items/sec"
            if progress.estimated_remaining > 0:
                result += f", ETA: {format_time(progress.estimated_remaining)}"

        return result

    def log_progress(self, every_n: int = 10) -> None:
        """Log progress every N processed items."""
        progress = self.get_progress()
        if progress.processed % every_n == 0 or progress.processed == progress.total:
            logger.info(
                "batch_progress",
                processed=progress.processed,
                total=progress.total,
                failed=progress.failed,
                percentage=f"{progress.percent:.1f}%",
                elapsed=f"{progress.elapsed:.1f}s",
            )
