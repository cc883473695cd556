"""Page payload model returned by paginated fetch functions."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PageData(BaseModel):
    """One fetched page.

    ``items`` is the primary item list and ``results`` an accepted synonym;
    when both are present ``items`` wins, even if it is empty. Any other
    keys in the payload are kept as extras.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    items: list[Any] | None = None
    results: list[Any] | None = None
    total_pages: int | None = Field(default=None, alias="totalPages")

    @property
    def page_items(self) -> list[Any]:
        """Items to process on this page."""
        if self.items is not None:
            return self.items
        if self.results is not None:
            return self.results
        return []
