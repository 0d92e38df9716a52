"""Composition root wiring the pager, viewport and input controllers."""

from __future__ import annotations

import asyncio
import time

import httpx

from gallery.config import GallerySettings
from gallery.domain.models import CacheEntrySnapshot, ImageRecord
from gallery.logging import logger
from gallery.render.view import RenderResult, render_gallery
from gallery.render.virtualizer import VirtualizedList
from gallery.services.image_source import ImageSource
from gallery.services.pager import Clock, PageSource, QueryCache
from gallery.services.scroll_trigger import ScrollTrigger
from gallery.services.search_input import SearchInputController


class Gallery:
    """One mounted gallery.

    The gallery owns its query cache for its whole lifetime; call
    :meth:`aclose` (or use ``async with``) when it is unmounted so pending
    debounce timers and in-flight fetches are cancelled.
    """

    def __init__(
        self,
        settings: GallerySettings,
        http_client: httpx.AsyncClient | None = None,
        *,
        source: PageSource | None = None,
        initial_term: str = "",
        clock: Clock = time.monotonic,
    ) -> None:
        if source is None:
            if http_client is None:
                raise ValueError("Either http_client or source is required.")
            source = ImageSource(http_client, settings.source)
        self.settings = settings
        self.pager = QueryCache(
            source,
            page_size=settings.source.page_size,
            settings=settings.cache,
            request_timeout=settings.source.request_timeout_seconds,
            clock=clock,
        )
        self.viewport = VirtualizedList(
            viewport_height=settings.viewport.height,
            overscan_count=settings.viewport.overscan_count,
        )
        self.scroll_trigger = ScrollTrigger(self.pager, delay=settings.scroll.debounce_seconds)
        self.search_input = SearchInputController(
            self._on_term_committed,
            delay=settings.search.debounce_seconds,
            initial=initial_term,
        )
        self._closed = False

    async def __aenter__(self) -> "Gallery":
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    @property
    def term(self) -> str:
        return self.search_input.committed

    def state(self) -> CacheEntrySnapshot:
        return self.pager.get_state(self.term)

    def start(self) -> asyncio.Task | None:
        return self.pager.activate(self.search_input.committed)

    def type(self, value: str) -> None:
        self.search_input.on_input(value)

    def search(self, term: str) -> asyncio.Task | None:
        """Commit ``term`` right away, skipping the typing debounce."""

        self.search_input.submit(term)
        return self.pager.activate(self.term)

    def scroll_to(self, offset: float) -> float:
        self._sync_viewport()
        position = self.viewport.scroll_to(offset)
        self._observe_end()
        return position

    def scroll_by(self, delta: float) -> float:
        return self.scroll_to(self.viewport.scroll_offset + delta)

    def measure(self, index: int, height: int) -> None:
        self._sync_viewport()
        self.viewport.measure(index, height)

    def render(self) -> RenderResult:
        state = self._sync_viewport()
        result = render_gallery(state, self.viewport)
        if result.ok:
            self._observe_end()
        return result

    def retry(self) -> asyncio.Task | None:
        """Explicit retry after a surfaced fetch error."""

        state = self.state()
        logger.info("page_fetch_retry_requested", term=self.term, page=state.next_page)
        return self.pager.fetch_next_page(self.term)

    def next_page(self) -> asyncio.Task | None:
        state = self.state()
        if not state.has_next_page or state.is_fetching:
            return None
        return self.pager.fetch_next_page(self.term)

    def click(self, offset: float) -> ImageRecord | None:
        """Return the record under content offset ``offset``, if any."""

        self._sync_viewport()
        index = self.viewport.index_at(offset)
        if index is None:
            return None
        record = self.viewport.items[index]
        logger.info("image_clicked", image_id=record.id, index=index)
        return record

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.search_input.dispose()
        self.scroll_trigger.dispose()
        self.pager.dispose()
        # Let cancelled tasks unwind before the loop moves on.
        await asyncio.sleep(0)

    def _on_term_committed(self, term: str) -> None:
        self.pager.activate(term)
        self._sync_viewport()

    def _sync_viewport(self) -> CacheEntrySnapshot:
        state = self.state()
        self.viewport.sync(state.items, (state.term, state.generation))
        return state

    def _observe_end(self) -> None:
        self.scroll_trigger.notify(self.viewport.end_reached(self.settings.scroll.end_margin))


__all__ = ["Gallery"]
