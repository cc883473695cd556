"""Batch result model for a finished run."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from resumable_batch.models.snapshot import Snapshot


class BatchResult(BaseModel):
    """Final counters and snapshot of a completed batch run."""

    model_config = ConfigDict(frozen=True)

    processed: int
    failed: int
    state: Snapshot
