"""Unit tests for the pydantic models.

These call the real constructors with no mocking.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from resumable_batch.models.batch_options import BatchOptions, PaginatedBatchOptions
from resumable_batch.models.batch_result import BatchResult
from resumable_batch.models.config import Config
from resumable_batch.models.page_data import PageData
from resumable_batch.models.snapshot import RESERVED_FIELDS, Snapshot

# ──────────────────────────────────────────────────────────────────────
# Snapshot
# ──────────────────────────────────────────────────────────────────────


class TestSnapshot:
    """Tests for Snapshot."""

    def test_empty(self) -> None:
        state = Snapshot()
        assert state.is_empty is True
        assert state.to_dict() == {}
        assert state.total_processed is None

    def test_reads_camel_case_keys(self) -> None:
        state = Snapshot.model_validate({"totalProcessed": 3, "currentPage": 2})
        assert state.total_processed == 3
        assert state.current_page == 2

    def test_accepts_snake_case_names(self) -> None:
        state = Snapshot(total_failed=4)
        assert state.to_dict() == {"totalFailed": 4}

    def test_serializes_with_camel_case_keys(self) -> None:
        state = Snapshot(
            total_processed=1,
            total_failed=2,
            last_updated="2024-01-15T12:00:00.000Z",
            start_time=1705320000000,
            started_at="2024-01-15T12:00:00.000Z",
            current_page=3,
            total_pages=9,
        )
        assert set(state.to_dict()) == set(RESERVED_FIELDS.values())
        assert state.to_dict()["startTime"] == 1705320000000

    def test_extension_fields_round_trip(self) -> None:
        state = Snapshot.model_validate({"totalProcessed": 1, "cursor": "abc", "note": None})
        assert state.extra_fields == {"cursor": "abc", "note": None}
        assert state.to_dict() == {"totalProcessed": 1, "cursor": "abc", "note": None}

    def test_negative_counter_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Snapshot(total_processed=-1)

    def test_frozen(self) -> None:
        state = Snapshot(total_processed=1)
        with pytest.raises(ValidationError):
            state.total_processed = 2  # type: ignore[misc]

    def test_updated_returns_new_snapshot(self) -> None:
        original = Snapshot.model_validate({"totalProcessed": 1, "cursor": "abc"})
        changed = original.updated(total_processed=2, lastUpdated="now", tag="x")

        assert original.total_processed == 1
        assert original.get("tag") is None
        assert changed.total_processed == 2
        assert changed.last_updated == "now"
        assert changed.extra_fields == {"cursor": "abc", "tag": "x"}

    def test_updated_validates(self) -> None:
        with pytest.raises(ValidationError):
            Snapshot().updated(total_failed=-5)

    def test_get_by_any_name(self) -> None:
        state = Snapshot.model_validate({"totalPages": 7, "owner": "ops"})
        assert state.get("total_pages") == 7
        assert state.get("totalPages") == 7
        assert state.get("owner") == "ops"
        assert state.get("missing", "fallback") == "fallback"

    def test_from_dict_keeps_snake_case_caller_fields(self) -> None:
        state = Snapshot.from_dict({"totalProcessed": 2, "total_processed": "legacy"})
        assert state.total_processed == 2
        assert state.extra_fields == {"total_processed": "legacy"}
        assert state.to_dict() == {"totalProcessed": 2, "total_processed": "legacy"}

    def test_updated_keeps_snake_case_caller_fields(self) -> None:
        state = Snapshot.from_dict({"started_at": "yesterday"})
        changed = state.updated(total_processed=1)
        assert changed.started_at is None
        assert changed.extra_fields == {"started_at": "yesterday"}
        assert changed.to_dict() == {"totalProcessed": 1, "started_at": "yesterday"}



# ──────────────────────────────────────────────────────────────────────
# Options
# ──────────────────────────────────────────────────────────────────────


class TestBatchOptions:
    """Tests for BatchOptions and PaginatedBatchOptions."""

    def test_defaults(self) -> None:
        options = BatchOptions()
        assert options.batch_size == 20
        assert options.concurrency_limit == 10
        assert options.state_update_interval == 5
        assert options.initial_state == Snapshot()
        assert options.on_batch_start is None

    def test_paginated_defaults(self) -> None:
        options = PaginatedBatchOptions()
        assert options.initial_page == 1
        assert options.concurrency_limit == 10
        assert options.state_update_interval == 5

    def test_initial_state_from_mapping(self) -> None:
        options = BatchOptions(initial_state={"totalProcessed": 5, "totalFailed": 1})
        assert options.initial_state.total_processed == 5
        assert options.initial_state.total_failed == 1

    def test_initial_state_none_is_empty(self) -> None:
        assert BatchOptions(initial_state=None).initial_state.is_empty

    @pytest.mark.parametrize("value", [0, -1])
    def test_batch_size_must_be_positive(self, value: int) -> None:
        with pytest.raises(ValidationError, match="batch_size"):
            BatchOptions(batch_size=value)

    def test_hooks_must_be_callable(self) -> None:
        with pytest.raises(ValidationError):
            BatchOptions(on_item_success="not callable")

    def test_frozen(self) -> None:
        options = BatchOptions()
        with pytest.raises(ValidationError):
            options.batch_size = 3  # type: ignore[misc]

    @pytest.mark.parametrize("name", ["batchSize", "on_batch_started", "initialPage"])
    def test_unknown_names_rejected(self, name: str) -> None:
        with pytest.raises(ValidationError, match=name):
            BatchOptions(**{name: 2})

    def test_paginated_rejects_array_only_fields(self) -> None:
        with pytest.raises(ValidationError, match="batch_size"):
            PaginatedBatchOptions(batch_size=5)



# ──────────────────────────────────────────────────────────────────────
# PageData / BatchResult
# ──────────────────────────────────────────────────────────────────────


class TestPageData:
    """Tests for PageData."""

    def test_items_preferred(self) -> None:
        page = PageData(items=[1], results=[2])
        assert page.page_items == [1]

    def test_empty_items_still_preferred(self) -> None:
        page = PageData.model_validate({"items": [], "results": [2]})
        assert page.page_items == []

    def test_results_fallback(self) -> None:
        assert PageData(results=[2, 3]).page_items == [2, 3]

    def test_no_items(self) -> None:
        assert PageData().page_items == []

    def test_total_pages_alias_and_extras(self) -> None:
        page = PageData.model_validate({"items": [], "totalPages": 4, "nextCursor": "c2"})
        assert page.total_pages == 4
        assert page.model_extra == {"nextCursor": "c2"}


class TestBatchResult:
    """Tests for BatchResult."""

    def test_fields(self) -> None:
        result = BatchResult(processed=3, failed=1, state=Snapshot(total_processed=3))
        assert result.processed == 3
        assert result.failed == 1
        assert result.state.total_processed == 3


# ──────────────────────────────────────────────────────────────────────
# Config
# ──────────────────────────────────────────────────────────────────────


class TestConfig:
    """Tests for Config."""

    @pytest.fixture(autouse=True)
    def _isolate_env(self, monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:  # noqa: ANN001
        monkeypatch.chdir(tmp_path)
        for key in (
            "RESUMABLE_BATCH_STATE_FILE_PATH",
            "RESUMABLE_BATCH_LOG_LEVEL",
            "RESUMABLE_BATCH_BATCH_SIZE",
        ):
            monkeypatch.delenv(key, raising=False)

    def test_defaults(self) -> None:
        config = Config()
        assert config.state_file_path == "data/batch-state.json"
        assert config.log_level == "INFO"
        assert config.batch_size == 20
        assert config.save_state_on_batch is True
        assert config.save_state_on_item is False

    def test_reads_prefixed_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RESUMABLE_BATCH_BATCH_SIZE", "7")
        monkeypatch.setenv("RESUMABLE_BATCH_LOG_LEVEL", "debug")
        config = Config()
        assert config.batch_size == 7
        assert config.log_level == "DEBUG"

    def test_creates_state_directory(self, tmp_path) -> None:  # noqa: ANN001
        target = tmp_path / "nested" / "dir" / "state.json"
        Config(state_file_path=str(target))
        assert target.parent.is_dir()

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValidationError, match="log_level"):
            Config(log_level="LOUD")

    def test_non_positive_interval(self) -> None:
        with pytest.raises(ValidationError):
            Config(save_state_interval=0)
