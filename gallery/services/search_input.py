"""Debounced search box state."""

from __future__ import annotations

from typing import Any, Callable

from gallery.logging import logger
from gallery.utils.debounce import Debouncer


class SearchInputController:
    """Turn raw keystrokes into committed search terms.

    Only the value present once typing pauses for ``delay`` seconds is
    committed, and ``on_commit`` runs only when it differs from the previous
    committed term. The empty string is a regular term.
    """

    def __init__(
        self,
        on_commit: Callable[[str], Any],
        *,
        delay: float = 0.5,
        initial: str = "",
    ) -> None:
        self._on_commit = on_commit
        self._value = initial
        self._committed = initial
        self._debouncer: Debouncer[str] = Debouncer(delay, self._commit)

    @property
    def value(self) -> str:
        return self._value

    @property
    def committed(self) -> str:
        return self._committed

    @property
    def hint(self) -> str:
        if self._value:
            return f"Searching for: {self._value}"
        return "Enter a search term to filter images"

    def on_input(self, value: str) -> None:
        if self._debouncer.disposed:
            return
        self._value = value
        self._debouncer.call(value)

    def submit(self, value: str) -> Any:
        """Commit ``value`` immediately, dropping any pending debounced commit."""

        if self._debouncer.disposed:
            return None
        self._debouncer.cancel()
        self._value = value
        return self._commit(value)

    def dispose(self) -> None:
        self._debouncer.dispose()

    def _commit(self, value: str) -> Any:
        if value == self._committed:
            return None
        self._committed = value
        logger.info("search_term_committed", term=value)
        return self._on_commit(value)


__all__ = ["SearchInputController"]
