"""Per-term page cache that drives infinite scrolling.

Each search term owns a cache entry holding the pages fetched so far, the
cursor of the next page to request, and a fetch status. The pager issues at
most one request per term at a time, appends pages strictly in order and
drops replies whose entry was reset or evicted while they were in flight.

Everything runs on a single event loop: entries are only mutated between
awaits, so no locking is needed.
"""

from __future__ import annotations

import asyncio
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Protocol

from gallery.config import CacheSettings
from gallery.domain.models import CacheEntrySnapshot, FetchStatus, ImageRecord
from gallery.logging import logger
from gallery.services.exceptions import FetchTimeout, NetworkError, StaleResponse
from gallery.utils.retry import retry_async

Clock = Callable[[], float]


class PageSource(Protocol):
    def fetch_page(
        self, term: str, page: int, per_page: int | None = None
    ) -> Awaitable[tuple[ImageRecord, ...]]: ...


@dataclass(slots=True)
class _CacheEntry:
    term: str
    pages: list[tuple[ImageRecord, ...]] = field(default_factory=list)
    next_page: int = 1
    status: FetchStatus = "idle"
    error: str | None = None
    fetched_at: float | None = None
    generation: int = 0
    task: asyncio.Task | None = None

    def snapshot(self) -> CacheEntrySnapshot:
        items = tuple(record for page in self.pages for record in page)
        return CacheEntrySnapshot(
            term=self.term,
            generation=self.generation,
            items=items,
            page_count=len(self.pages),
            next_page=self.next_page,
            status=self.status,
            error=self.error,
            fetched_at=self.fetched_at,
        )


class QueryCache:
    """Owns every term's cache entry; inject one instance per gallery."""

    def __init__(
        self,
        source: PageSource,
        *,
        page_size: int,
        settings: CacheSettings | None = None,
        request_timeout: float | None = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self._source = source
        self._page_size = page_size
        self._settings = settings or CacheSettings()
        self._request_timeout = request_timeout
        self._clock = clock
        self._entries: OrderedDict[str, _CacheEntry] = OrderedDict()
        self._active_term: str | None = None
        self._disposed = False

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def active_term(self) -> str | None:
        return self._active_term

    def terms(self) -> list[str]:
        return list(self._entries)

    def get_state(self, term: str) -> CacheEntrySnapshot:
        entry = self._entries.get(term)
        if entry is None:
            return CacheEntrySnapshot(term=term)
        return entry.snapshot()

    def activate(self, term: str) -> asyncio.Task | None:
        """Switch the active term, fetching page 1 unless a fresh entry is cached."""

        self._active_term = term
        entry = self._entries.get(term)
        if entry is not None and not self._is_stale(entry):
            self._entries.move_to_end(term)
            logger.debug("cache_entry_reused", term=term, pages=len(entry.pages))
            return entry.task if entry.status == "fetching" else None
        return self.reset(term)

    def fetch_next_page(self, term: str) -> asyncio.Task | None:
        if self._disposed:
            return None
        entry = self._entries.get(term)
        if entry is not None and entry.status != "fetching" and self._is_stale(entry):
            logger.info("cache_entry_stale", term=term, pages=len(entry.pages))
            return self.reset(term)
        if entry is None:
            entry = self._create_entry(term)
        else:
            self._entries.move_to_end(term)

        if entry.status == "fetching":
            return entry.task
        if entry.status == "exhausted":
            return None
        return self._issue(entry)

    def reset(self, term: str) -> asyncio.Task | None:
        """Discard the term's pages and fetch page 1 again."""

        if self._disposed:
            return None
        entry = self._entries.get(term)
        if entry is None:
            entry = self._create_entry(term)
        else:
            self._entries.move_to_end(term)
            self._cancel(entry)
            entry.generation += 1
            entry.pages.clear()
            entry.next_page = 1
            entry.status = "idle"
            entry.error = None
            entry.fetched_at = None
        return self._issue(entry)

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        for entry in self._entries.values():
            self._cancel(entry)
            if entry.status == "fetching":
                entry.status = "idle"

    def _create_entry(self, term: str) -> _CacheEntry:
        entry = _CacheEntry(term=term)
        self._entries[term] = entry
        self._evict(keep=term)
        return entry

    def _evict(self, keep: str) -> None:
        limit = self._settings.max_retained_terms
        if len(self._entries) <= limit:
            return
        for term in list(self._entries):
            if len(self._entries) <= limit:
                break
            entry = self._entries[term]
            if term in (keep, self._active_term) or entry.status == "fetching":
                continue
            del self._entries[term]
            logger.debug("cache_entry_evicted", term=term)

    def _is_stale(self, entry: _CacheEntry) -> bool:
        if entry.fetched_at is None:
            return False
        return self._clock() - entry.fetched_at > self._settings.stale_seconds

    @staticmethod
    def _cancel(entry: _CacheEntry) -> None:
        if entry.task is not None and not entry.task.done():
            entry.task.cancel()
        entry.task = None

    def _issue(self, entry: _CacheEntry) -> asyncio.Task:
        page = entry.next_page
        entry.status = "fetching"
        entry.error = None
        entry.task = asyncio.get_running_loop().create_task(
            self._run_fetch(entry, entry.generation, page),
            name=f"fetch-page:{entry.term!r}:{page}",
        )
        logger.debug("page_fetch_issued", term=entry.term, page=page, generation=entry.generation)
        return entry.task

    async def _fetch_once(self, term: str, page: int) -> tuple[ImageRecord, ...]:
        request = self._source.fetch_page(term, page, self._page_size)
        if self._request_timeout is None:
            return await request
        try:
            return await asyncio.wait_for(request, timeout=self._request_timeout)
        except asyncio.TimeoutError as exc:
            raise FetchTimeout(
                f"Page {page} did not arrive within {self._request_timeout:g}s"
            ) from exc

    async def _run_fetch(self, entry: _CacheEntry, generation: int, page: int) -> None:
        try:
            records = await retry_async(
                lambda: self._fetch_once(entry.term, page),
                max_attempts=self._settings.retry_attempts + 1,
                base_delay=self._settings.retry_delay_seconds,
                retry_on=(NetworkError,),
                logger=logger,
                operation_name="image_page_fetch",
            )
        except NetworkError as exc:
            if self._record_failure(entry, generation, page, exc):
                logger.warning(
                    "page_fetch_failed",
                    term=entry.term,
                    page=page,
                    error_type=exc.__class__.__name__,
                    error=entry.error,
                )
            return
        except Exception as exc:
            # Not retried, but the entry must not stay in "fetching".
            if self._record_failure(entry, generation, page, exc):
                logger.exception(
                    "page_fetch_crashed",
                    term=entry.term,
                    page=page,
                    error_type=exc.__class__.__name__,
                )
            return

        try:
            self._ensure_current(entry, generation, page)
        except StaleResponse:
            return
        entry.pages.append(tuple(records))
        entry.next_page = page + 1
        entry.fetched_at = self._clock()
        entry.task = None
        entry.status = "exhausted" if len(records) < self._page_size else "idle"
        logger.info(
            "page_fetched",
            term=entry.term,
            page=page,
            count=len(records),
            status=entry.status,
        )

    def _record_failure(
        self, entry: _CacheEntry, generation: int, page: int, exc: Exception
    ) -> bool:
        try:
            self._ensure_current(entry, generation, page)
        except StaleResponse:
            return False
        entry.status = "error"
        entry.error = str(exc) or exc.__class__.__name__
        entry.task = None
        return True

    def _ensure_current(self, entry: _CacheEntry, generation: int, page: int) -> None:
        if entry.generation == generation and self._entries.get(entry.term) is entry:
            return
        logger.debug(
            "stale_response_dropped",
            term=entry.term,
            page=page,
            generation=generation,
            current_generation=entry.generation,
        )
        raise StaleResponse(f"Page {page} for {entry.term!r} was superseded")


__all__ = ["PageSource", "QueryCache"]
