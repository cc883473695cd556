"""File-backed persistence of batch progress snapshots."""

from __future__ import annotations

import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError

from resumable_batch.models.snapshot import Snapshot

logger = structlog.get_logger(__name__)


class StateManager:
    """Saves, loads and clears a snapshot stored as a single JSON document.

    Saves and clears are serialized, so item tasks saving concurrently replace
    the file one at a time, in the order they asked to.
    """

    def __init__(self, state_file_path: str | Path) -> None:
        self.file_path = Path(state_file_path)
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = asyncio.Lock()

    async def save_state(self, state: Snapshot) -> None:
        """Replace the state file with ``state``."""
        async with self._lock:
            await asyncio.to_thread(self._write, state.to_dict())
        logger.debug("state_saved", path=str(self.file_path))

    async def load_state(self) -> Snapshot:
        """Load the saved snapshot.

        Returns an empty snapshot when the file is missing or unreadable.
        Reserved fields with invalid values are dropped; the rest is kept.
        """
        return await asyncio.to_thread(self._read)

    async def clear_state(self) -> None:
        """Delete the state file if it exists."""
        async with self._lock:
            await asyncio.to_thread(self.file_path.unlink, missing_ok=True)
        logger.debug("state_cleared", path=str(self.file_path))

    def _write(self, data: dict[str, Any]) -> None:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=self.file_path.parent,
            prefix=f".{self.file_path.name}.",
            suffix=".tmp",
            delete=False,
        ) as handle:
            json.dump(data, handle, indent=2)
            tmp_path = Path(handle.name)

        try:
            os.replace(tmp_path, self.file_path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise

    def _read(self) -> Snapshot:
        if not self.file_path.exists():
            return Snapshot()

        try:
            raw = self.file_path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.warning("state_load_failed", path=str(self.file_path), error=str(exc))
            return Snapshot()

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning(
                "state_load_failed",
                path=str(self.file_path),
                error=f"Invalid state file format: {exc}",
            )
            return Snapshot()

        if not isinstance(data, dict):
            logger.warning(
                "state_load_failed",
                path=str(self.file_path),
                error="State file does not contain a JSON object",
            )
            return Snapshot()

        try:
            return Snapshot.from_dict(data)
        except ValidationError as exc:
            invalid = {str(error["loc"][0]) for error in exc.errors() if error["loc"]}
            logger.warning(
                "state_fields_dropped",
                path=str(self.file_path),
                fields=sorted(invalid),
                error=str(exc),
            )

        try:
            return Snapshot.from_dict({k: v for k, v in data.items() if k not in invalid})
        except ValidationError as exc:
            logger.warning("state_load_failed", path=str(self.file_path), error=str(exc))
            return Snapshot()
