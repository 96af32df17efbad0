"""
Cancellable fixed-delay debouncer.

Scheduling goes through any object exposing
`call_later(delay, callback, *args) -> handle` where `handle.cancel()` exists,
which is exactly what an asyncio event loop provides.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Generic, Optional, Protocol, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING = object()


class Cancellable(Protocol):
    def cancel(self) -> Any: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> Cancellable: ...


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class Debouncer(Generic[T]):
    """
    Applies the latest pushed value once `delay` seconds pass without a newer one.

    The very first value is applied immediately. Without an explicit scheduler
    the running asyncio loop is used; with neither, values apply immediately.
    """

    def __init__(
        self,
        apply: Callable[[T], None],
        delay: float = 0.3,
        scheduler: Optional[Scheduler] = None,
    ):
        self.apply = apply
        self.delay = delay
        self.scheduler = scheduler
        self._handle: Optional[Cancellable] = None
        self._pending: Any = _MISSING
        self._primed = False

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def push(self, value: T) -> None:
        if not self._primed:
            self._primed = True
            self.apply(value)
            return

        self.cancel()
        scheduler = self.scheduler or _running_loop()
        if scheduler is None or self.delay <= 0:
            self.apply(value)
            return

        self._pending = value
        self._handle = scheduler.call_later(self.delay, self._fire)

    def _fire(self) -> None:
        value = self._pending
        self._pending = _MISSING
        self._handle = None
        if value is not _MISSING:
            self.apply(value)

    def flush(self) -> None:
        """Apply the pending value now, if any."""
        if self._handle is None:
            return
        self._handle.cancel()
        self._fire()

    def cancel(self) -> None:
        """Drop the pending value without applying it."""
        if self._handle is not None:
            self._handle.cancel()
            logger.debug("Cancelled pending debounced value")
        self._handle = None
        self._pending = _MISSING
