"""
Virtual windowing for long lists.

Computes which rows to render for a scroll position so very large collections
stay cheap to display. Small lists (at or under the threshold) render whole.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, List, Optional, Protocol, Sequence, Tuple, TypeVar

from jobtrack.config import Settings

T = TypeVar("T")

BASE_ROW_HEIGHT = 56
DEFAULT_OVERSCAN = 5
DEFAULT_THRESHOLD = 50


class Density(str, Enum):
    COMPACT = "compact"
    COMFORTABLE = "comfortable"
    SPACIOUS = "spacious"

    @property
    def scale(self) -> float:
        return _DENSITY_SCALE[self]


_DENSITY_SCALE = {
    Density.COMPACT: 0.8,
    Density.COMFORTABLE: 1.0,
    Density.SPACIOUS: 1.4,
}


def row_height_for(density: Density, base: float = BASE_ROW_HEIGHT) -> float:
    return base * Density(density).scale


@dataclass(frozen=True)
class WindowRange:
    """Rows `[start_index, end_index)` rendered `offset_y` px from the top."""
    start_index: int
    end_index: int
    offset_y: float
    total_height: float

    @property
    def size(self) -> int:
        return self.end_index - self.start_index


def compute_window(
    count: int,
    row_height: float,
    viewport_height: float,
    scroll_offset: float,
    overscan: int = DEFAULT_OVERSCAN,
    threshold: int = DEFAULT_THRESHOLD,
) -> WindowRange:
    """
    Minimal row range covering the viewport plus `overscan` rows either side.

    Every row intersecting `[scroll_offset, scroll_offset + viewport_height)` is
    included, and the range never exceeds `ceil(V / H) + 2 * overscan + 1` rows.
    """
    if row_height <= 0:
        raise ValueError("row_height must be positive")
    count = max(0, count)
    total = count * row_height
    if count <= threshold:
        return WindowRange(0, count, 0, total)

    scroll = max(0.0, scroll_offset)
    viewport = max(0.0, viewport_height)
    first_visible = math.floor(scroll / row_height)
    start = min(max(0, first_visible - overscan), count)
    end = min(
        count,
        max(
            start + math.ceil(viewport / row_height) + 2 * overscan,
            # last partially visible row
            math.ceil((scroll + viewport) / row_height) + overscan,
        ),
    )
    return WindowRange(start, end, start * row_height, total)


# ----------------------------- Live window -----------------------------

class EventSource(Protocol):
    def subscribe(self, listener: Callable[[float], None]) -> Callable[[], None]: ...


class Signal:
    """Minimal event source: `emit(value)` calls every subscriber."""

    def __init__(self):
        self._listeners: List[Callable[[Any], None]] = []

    def subscribe(self, listener: Callable[[Any], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, value: Any) -> None:
        for listener in list(self._listeners):
            listener(value)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)


class VirtualWindow(Generic[T]):
    """
    Scroll/resize driven window over a list of records keyed by `id`.

    The range is recomputed only on scroll, resize, density or item changes;
    it never re-runs filtering.
    """

    def __init__(
        self,
        items: Sequence[T] = (),
        viewport_height: float = 600,
        density: Density = Density.COMFORTABLE,
        base_row_height: float = BASE_ROW_HEIGHT,
        overscan: int = DEFAULT_OVERSCAN,
        threshold: int = DEFAULT_THRESHOLD,
    ):
        self._items: Sequence[T] = items
        self.viewport_height = viewport_height
        self.scroll_offset = 0.0
        self.density = Density(density)
        self.base_row_height = base_row_height
        self.overscan = overscan
        self.threshold = threshold
        self._unmounts: List[Callable[[], None]] = []
        self._range = self._compute()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        items: Sequence[T] = (),
        viewport_height: float = 600,
        density: Density = Density.COMFORTABLE,
    ) -> "VirtualWindow[T]":
        """Window using the configured row height, overscan and threshold."""
        return cls(
            items,
            viewport_height=viewport_height,
            density=density,
            base_row_height=settings.row_height,
            overscan=settings.overscan,
            threshold=settings.virtualization_threshold,
        )

    @property
    def row_height(self) -> float:
        return row_height_for(self.density, self.base_row_height)

    @property
    def range(self) -> WindowRange:
        return self._range

    @property
    def is_virtualized(self) -> bool:
        return len(self._items) > self.threshold

    @property
    def mounted(self) -> bool:
        return bool(self._unmounts)

    def _compute(self) -> WindowRange:
        return compute_window(
            len(self._items),
            self.row_height,
            self.viewport_height,
            self.scroll_offset,
            overscan=self.overscan,
            threshold=self.threshold,
        )

    def _refresh(self) -> WindowRange:
        self._range = self._compute()
        return self._range

    # ----------------------------- inputs -----------------------------

    def set_items(self, items: Sequence[T]) -> WindowRange:
        self._items = items
        return self._refresh()

    def on_scroll(self, offset: float) -> WindowRange:
        self.scroll_offset = offset
        return self._refresh()

    def on_resize(self, viewport_height: float) -> WindowRange:
        self.viewport_height = viewport_height
        return self._refresh()

    def set_density(self, density: Density) -> WindowRange:
        self.density = Density(density)
        return self._refresh()

    # ----------------------------- output -----------------------------

    def visible_items(self) -> List[Tuple[int, T]]:
        r = self._range
        return [(i, self._items[i]) for i in range(r.start_index, r.end_index)]

    @staticmethod
    def row_key(item: T) -> str:
        return getattr(item, "id")

    # ----------------------------- lifecycle -----------------------------

    def mount(
        self,
        scroll_source: Optional[EventSource] = None,
        resize_source: Optional[EventSource] = None,
    ) -> None:
        """Attach to scroll/resize sources. Mounting again replaces the old ones."""
        self.unmount()
        if scroll_source is not None:
            self._unmounts.append(scroll_source.subscribe(self.on_scroll))
        if resize_source is not None:
            self._unmounts.append(resize_source.subscribe(self.on_resize))

    def unmount(self) -> None:
        for detach in self._unmounts:
            detach()
        self._unmounts = []
