"""Trailing-edge debouncing on top of the running event loop."""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Callable, Generic, TypeVar

from gallery.logging import logger

T = TypeVar("T")


class Debouncer(Generic[T]):
    """Delay ``callback(value)`` until calls stop arriving for ``delay`` seconds.

    Every call cancels the pending one, so only the last value of a burst is
    delivered. After :meth:`dispose` nothing fires and new calls are ignored.
    """

    def __init__(self, delay: float, callback: Callable[[T], Any]) -> None:
        self.delay = delay
        self._callback = callback
        self._task: asyncio.Task | None = None
        self._disposed = False

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def disposed(self) -> bool:
        return self._disposed

    def call(self, value: T) -> None:
        if self._disposed:
            return
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._delayed(value))

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def dispose(self) -> None:
        self._disposed = True
        self.cancel()

    async def _delayed(self, value: T) -> None:
        await asyncio.sleep(self.delay)
        if self._disposed:
            return
        # Detach before running so the callback may schedule a new call.
        self._task = None
        try:
            result = self._callback(value)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception(
                "debounced_callback_failed",
                callback=getattr(self._callback, "__qualname__", repr(self._callback)),
            )


__all__ = ["Debouncer"]
