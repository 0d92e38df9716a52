"""Pydantic models shared across the pager and the renderer."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

FetchStatus = Literal["idle", "fetching", "error", "exhausted"]


class ImageRecord(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    url: str
    title: str = ""
    description: str = ""


class CacheEntrySnapshot(BaseModel):
    """Read-only view of one term's accumulated pages."""

    model_config = ConfigDict(frozen=True)

    term: str
    generation: int = 0
    items: tuple[ImageRecord, ...] = ()
    page_count: int = 0
    next_page: int = 1
    status: FetchStatus = "idle"
    error: str | None = None
    fetched_at: float | None = None

    @property
    def has_next_page(self) -> bool:
        return self.status != "exhausted"

    @property
    def is_fetching(self) -> bool:
        return self.status == "fetching"

    @property
    def is_empty(self) -> bool:
        return not self.items


__all__ = [
    "CacheEntrySnapshot",
    "FetchStatus",
    "ImageRecord",
]
