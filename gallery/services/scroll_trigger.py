"""Request the next page when the end of the list scrolls into view."""

from __future__ import annotations

from gallery.logging import logger
from gallery.services.pager import QueryCache
from gallery.utils.debounce import Debouncer

# Statuses in which an end-of-list signal must not start a fetch. Errors wait
# for an explicit retry from the host.
_SUPPRESSED = frozenset({"fetching", "exhausted", "error"})


class ScrollTrigger:
    def __init__(self, pager: QueryCache, *, delay: float = 0.2) -> None:
        self._pager = pager
        self._debouncer: Debouncer[bool] = Debouncer(delay, self._fire)
        self._requests = 0

    @property
    def requests(self) -> int:
        """Number of page requests this trigger has issued."""

        return self._requests

    @property
    def pending(self) -> bool:
        return self._debouncer.pending

    @property
    def disposed(self) -> bool:
        return self._debouncer.disposed

    def notify(self, intersecting: bool) -> None:
        """Feed one viewport-intersects-end observation."""

        if self._debouncer.disposed:
            return
        if self._suppressed():
            self._debouncer.cancel()
            return
        self._debouncer.call(intersecting)

    def dispose(self) -> None:
        self._debouncer.dispose()

    def _suppressed(self) -> bool:
        term = self._pager.active_term
        if term is None:
            return True
        return self._pager.get_state(term).status in _SUPPRESSED

    def _fire(self, intersecting: bool) -> None:
        if not intersecting or self._suppressed():
            return
        term = self._pager.active_term
        self._requests += 1
        logger.debug("scroll_trigger_fired", term=term)
        self._pager.fetch_next_page(term)


__all__ = ["ScrollTrigger"]
