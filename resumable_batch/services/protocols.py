"""Service protocols defining interfaces for dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from resumable_batch.models.snapshot import Snapshot


class StateStore(Protocol):
    """Protocol for snapshot persistence backends."""

    async def save_state(self, state: Snapshot) -> None: ...

    async def load_state(self) -> Snapshot: ...

    async def clear_state(self) -> None: ...
