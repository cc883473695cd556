"""Snapshot model for resumable batch progress state."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Reserved attribute name -> persisted JSON key
RESERVED_FIELDS: dict[str, str] = {
    "total_processed": "totalProcessed",
    "total_failed": "totalFailed",
    "last_updated": "lastUpdated",
    "start_time": "startTime",
    "started_at": "startedAt",
    "current_page": "currentPage",
    "total_pages": "totalPages",
}


class Snapshot(BaseModel):
    """Immutable progress record threaded through a batch run.

    Reserved fields are typed attributes serialized under their camelCase
    names. Any other key is caller-owned passthrough data kept as a pydantic
    extra, so it survives every update untouched.
    """

    # Attribute names are accepted for programmatic construction; persisted
    # mappings go through from_dict, which matches camelCase keys only.
    model_config = ConfigDict(
        frozen=True, extra="allow", validate_by_name=True, validate_by_alias=True
    )

    total_processed: int | None = Field(default=None, alias="totalProcessed")
    total_failed: int | None = Field(default=None, alias="totalFailed")
    last_updated: str | None = Field(default=None, alias="lastUpdated")
    start_time: int | float | None = Field(default=None, alias="startTime")
    started_at: str | None = Field(default=None, alias="startedAt")
    current_page: int | None = Field(default=None, alias="currentPage")
    total_pages: int | None = Field(default=None, alias="totalPages")

    @field_validator("total_processed", "total_failed")
    @classmethod
    def validate_counter(cls, value: int | None) -> int | None:
        """Counters must be non-negative."""
        if value is not None and value < 0:
            msg = "progress counters must be greater than or equal to 0"
            raise ValueError(msg)
        return value

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Snapshot:
        """Build a snapshot from its serialized mapping.

        Only camelCase keys fill reserved fields; a snake_case key such as
        ``total_processed`` is kept as a caller field.
        """
        return cls.model_validate(data, by_alias=True, by_name=False)

    @property
    def extra_fields(self) -> dict[str, Any]:
        """Caller-defined fields carried alongside the reserved ones."""
        return dict(self.__pydantic_extra__ or {})

    def updated(self, **changes: Any) -> Snapshot:
        """Return a new snapshot with ``changes`` merged over this one.

        Keys may be reserved attribute names, their camelCase aliases, or
        arbitrary extension fields. This snapshot is never modified.
        """
        data = self.to_dict()
        for key, value in changes.items():
            data[RESERVED_FIELDS.get(key, key)] = value
        return Snapshot.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted JSON mapping, omitting unset reserved fields."""
        data = self.model_dump(by_alias=True, exclude_none=True)
        # extras are caller data; keep explicit None values
        data.update(self.extra_fields)
        return data

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a field by attribute name, camelCase key, or extension name."""
        data = self.to_dict()
        return data.get(RESERVED_FIELDS.get(key, key), default)

    @property
    def is_empty(self) -> bool:
        """True when no field at all has been recorded."""
        return not self.to_dict()
