"""Pydantic data models for resumable batch processing."""

from resumable_batch.models.batch_options import BatchOptions, PaginatedBatchOptions
from resumable_batch.models.batch_result import BatchResult
from resumable_batch.models.config import Config
from resumable_batch.models.page_data import PageData
from resumable_batch.models.snapshot import RESERVED_FIELDS, Snapshot

__all__ = [
    "RESERVED_FIELDS",
    "BatchOptions",
    "BatchResult",
    "Config",
    "PageData",
    "PaginatedBatchOptions",
    "Snapshot",
]
