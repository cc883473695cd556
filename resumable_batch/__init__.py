"""Resumable, concurrency-limited batch processing."""

from resumable_batch.models.batch_options import BatchOptions, PaginatedBatchOptions
from resumable_batch.models.batch_result import BatchResult
from resumable_batch.models.page_data import PageData
from resumable_batch.models.snapshot import Snapshot
from resumable_batch.services.batch_processor import (
    process_batches,
    process_paginated_batches,
)
from resumable_batch.services.concurrency_gate import ConcurrencyGate
from resumable_batch.services.resumable_processor import (
    ResumableBatchProcessor,
    create_batch_processor_with_state,
)
from resumable_batch.services.state_manager import StateManager
from resumable_batch.utils.progress import StateTracker

__all__ = [
    "BatchOptions",
    "BatchResult",
    "ConcurrencyGate",
    "PageData",
    "PaginatedBatchOptions",
    "ResumableBatchProcessor",
    "Snapshot",
    "StateManager",
    "StateTracker",
    "create_batch_processor_with_state",
    "process_batches",
    "process_paginated_batches",
]
