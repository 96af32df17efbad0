"""
Query layer for JobTrack.

Provides:
- QueryEngine: filtered + sorted view and stats over the application collection
- Filter / sort value types and the pure functions behind them
- Debouncer for volatile inputs (search, column filters)
"""

from jobtrack.query.debounce import Debouncer
from jobtrack.query.engine import QueryEngine, QueryResult
from jobtrack.query.filters import (
    CustomDateRange,
    DateRangePreset,
    FilterState,
    QuickFilters,
    SalaryFilter,
    SortDirection,
    SortSpec,
    apply_filters,
)
from jobtrack.query.sorting import sort_items
from jobtrack.query.stats import ApplicationStats, compute_stats

__all__ = [
    "ApplicationStats",
    "CustomDateRange",
    "DateRangePreset",
    "Debouncer",
    "FilterState",
    "QueryEngine",
    "QueryResult",
    "QuickFilters",
    "SalaryFilter",
    "SortDirection",
    "SortSpec",
    "apply_filters",
    "compute_stats",
    "sort_items",
]
