"""Shared test fixtures for resumable batch processing."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import pytest

from resumable_batch.models.snapshot import Snapshot

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

FIXED_NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=UTC)
FIXED_NOW_ISO = "2024-01-15T12:00:00.000Z"


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """Clock that always returns FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def state_file(tmp_path: Path) -> Path:
    """Provide a temporary state file path inside a not-yet-created directory."""
    return tmp_path / "state" / "batch-state.json"


@pytest.fixture
def seeded_state() -> Snapshot:
    """Snapshot as left behind by a halted earlier run."""
    return Snapshot.model_validate(
        {
            "totalProcessed": 5,
            "totalFailed": 1,
            "lastUpdated": "2024-01-14T08:30:00.000Z",
            "jobName": "nightly-sync",
        }
    )


class EventRecorder:
    """Collects hook invocations as (name, args) tuples in call order."""

    def __init__(self) -> None:
        self.events: list[tuple[str, tuple[Any, ...]]] = []

    def hook(self, name: str) -> Callable[..., None]:
        def record(*args: Any) -> None:
            self.events.append((name, args))

        return record

    def named(self, name: str) -> list[tuple[Any, ...]]:
        return [args for event, args in self.events if event == name]

    def names(self) -> list[str]:
        return [event for event, _ in self.events]


@pytest.fixture
def recorder() -> EventRecorder:
    """Fresh hook recorder."""
    return EventRecorder()
