"""
Derived, reactive view over the application collection.

The engine holds UI state (search, column filters, quick filters, sort,
selection) and recomputes the filtered + sorted view whenever any of it or the
collection changes. Stats are computed from the unfiltered collection and only
when the collection itself changes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Mapping, Optional, Set, Union

from jobtrack.config import Settings, get_settings
from jobtrack.models import Application, Stage
from jobtrack.query.debounce import Debouncer, Scheduler
from jobtrack.query.filters import (
    DateRange,
    FilterState,
    QuickFilters,
    SalaryFilter,
    SortDirection,
    SortSpec,
    apply_filters,
)
from jobtrack.query.sorting import sort_items
from jobtrack.query.stats import ApplicationStats, compute_stats
from jobtrack.repositories.applications import ApplicationRepository

logger = logging.getLogger(__name__)


@dataclass
class QueryResult:
    filtered_items: List[Application]
    stats: ApplicationStats


ResultListener = Callable[[QueryResult], None]


class QueryEngine:
    """
    Args:
        repository: Source collection
        settings: Debounce delay (defaults to `get_settings()`)
        scheduler: Debounce scheduler; defaults to the running asyncio loop
        search: Initial free-text search (applied immediately)
        column_filters: Initial per-column filters (applied immediately)
        quick: Initial quick filters
        sort: Initial sort (default: date_applied descending)
    """

    def __init__(
        self,
        repository: ApplicationRepository,
        settings: Optional[Settings] = None,
        scheduler: Optional[Scheduler] = None,
        search: str = "",
        column_filters: Optional[Mapping[str, str]] = None,
        quick: Optional[QuickFilters] = None,
        sort: Optional[SortSpec] = None,
    ):
        settings = settings or get_settings()
        self.repository = repository
        self.clock = repository.clock

        self._items: List[Application] = []
        self._stats = ApplicationStats()
        self._filtered: List[Application] = []
        self._state = FilterState(quick=quick or QuickFilters())
        self._sort = sort or SortSpec()
        self._requested_filters: Dict[str, str] = dict(column_filters or {})
        self._selected: Set[str] = set()
        self._listeners: List[ResultListener] = []
        self._unsubscribe_store: Optional[Callable[[], None]] = None

        self._search_debouncer: Debouncer[str] = Debouncer(
            self._apply_search, settings.debounce_s, scheduler
        )
        self._filter_debouncer: Debouncer[Dict[str, str]] = Debouncer(
            self._apply_column_filters, settings.debounce_s, scheduler
        )

        self._load()
        self._search_debouncer.push(search)
        self._filter_debouncer.push(dict(self._requested_filters))

    # ----------------------------- reactive surface -----------------------------

    @property
    def result(self) -> QueryResult:
        return QueryResult(filtered_items=list(self._filtered), stats=self._stats)

    @property
    def filtered_items(self) -> List[Application]:
        return list(self._filtered)

    @property
    def items(self) -> List[Application]:
        return list(self._items)

    @property
    def stats(self) -> ApplicationStats:
        return self._stats

    @property
    def filters(self) -> FilterState:
        """Filters as currently applied (debounced values only once they land)."""
        return self._state

    @property
    def sort(self) -> SortSpec:
        return self._sort

    def subscribe(self, listener: ResultListener) -> Callable[[], None]:
        """Call `listener` with the new result after every recomputation."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def start(self) -> None:
        """Reload whenever the repository's key changes in the store."""
        if self._unsubscribe_store is None:
            self._unsubscribe_store = self.repository.store.subscribe(self._on_store_change)

    def close(self) -> None:
        """Cancel pending debounces and detach every listener."""
        self._search_debouncer.cancel()
        self._filter_debouncer.cancel()
        if self._unsubscribe_store is not None:
            self._unsubscribe_store()
            self._unsubscribe_store = None
        self._listeners.clear()

    def _on_store_change(self, key: str) -> None:
        if key == self.repository.key:
            self.reload()

    # ----------------------------- collection -----------------------------

    def _load(self) -> None:
        self._items = self.repository.get_all()
        self._stats = compute_stats(self._items, self.clock())
        present = {app.id for app in self._items}
        self._selected &= present

    def reload(self) -> QueryResult:
        """Re-read the collection, recompute stats and the view."""
        self._load()
        return self._recompute()

    # ----------------------------- inputs -----------------------------

    def set_search(self, text: str) -> None:
        """Debounced."""
        self._search_debouncer.push(text or "")

    def set_column_filter(self, column: str, value: str) -> None:
        """Debounced; bursts across different columns are merged."""
        self._requested_filters = {**self._requested_filters, column: value or ""}
        self._filter_debouncer.push(dict(self._requested_filters))

    def set_column_filters(self, column_filters: Mapping[str, str]) -> None:
        self._requested_filters = dict(column_filters)
        self._filter_debouncer.push(dict(self._requested_filters))

    def flush(self) -> QueryResult:
        """Apply any debounced input now."""
        self._search_debouncer.flush()
        self._filter_debouncer.flush()
        return self.result

    def set_stage_filter(self, stage: Union[Stage, str]) -> QueryResult:
        return self.set_quick_filters(replace(self._state.quick, stage=stage))

    def set_date_range(self, date_range: Union[DateRange, str]) -> QueryResult:
        return self.set_quick_filters(replace(self._state.quick, date_range=date_range))

    def set_salary_filter(self, salary: Union[SalaryFilter, str]) -> QueryResult:
        return self.set_quick_filters(replace(self._state.quick, salary=salary))

    def set_quick_filters(self, quick: QuickFilters) -> QueryResult:
        self._state = replace(self._state, quick=quick)
        return self._recompute()

    def set_sort(self, column: str, direction: Union[SortDirection, str] = SortDirection.ASC) -> QueryResult:
        self._sort = SortSpec(column, direction)
        return self._recompute()

    def toggle_sort(self, column: str) -> QueryResult:
        self._sort = self._sort.toggled(column)
        return self._recompute()

    def _apply_search(self, text: str) -> None:
        self._state = replace(self._state, search=text)
        self._recompute()

    def _apply_column_filters(self, column_filters: Dict[str, str]) -> None:
        self._state = replace(self._state, column_filters=column_filters)
        self._recompute()

    # ----------------------------- derivation -----------------------------

    def _recompute(self) -> QueryResult:
        filtered = apply_filters(self._items, self._state, self.clock())
        self._filtered = sort_items(filtered, self._sort)
        result = self.result
        for listener in list(self._listeners):
            try:
                listener(result)
            except Exception as e:
                logger.warning("Query listener failed: %s", e)
        return result

    def applications_by_stage(self) -> Dict[Stage, List[Application]]:
        """Filtered view grouped by stage (kanban columns), in view order."""
        groups: Dict[Stage, List[Application]] = {stage: [] for stage in Stage.ordered()}
        for app in self._filtered:
            groups[app.stage].append(app)
        return groups

    # ----------------------------- selection -----------------------------

    @property
    def selected_ids(self) -> Set[str]:
        return set(self._selected)

    def select(self, app_id: str, selected: bool = True) -> None:
        if selected:
            self._selected.add(app_id)
        else:
            self._selected.discard(app_id)

    def toggle_selection(self, app_id: str) -> bool:
        """Returns the new selected state."""
        if app_id in self._selected:
            self._selected.discard(app_id)
            return False
        self._selected.add(app_id)
        return True

    def select_all(self) -> None:
        """Select every item in the current filtered view."""
        self._selected |= {app.id for app in self._filtered}

    def clear_selection(self) -> None:
        self._selected.clear()

    def selected_items(self) -> List[Application]:
        return [app for app in self._items if app.id in self._selected]
