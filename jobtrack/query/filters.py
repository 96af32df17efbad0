"""
Filter evaluation over applications.

All criteria are AND-combined:
1. free-text search (position, company, location, notes)
2. per-column substring filters
3. stage quick filter
4. date range (preset or custom, inclusive)
5. salary presence
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Union

from jobtrack.models import Application, Stage, ensure_utc


class DateRangePreset(str, Enum):
    LAST_7_DAYS = "7d"
    LAST_30_DAYS = "30d"
    LAST_90_DAYS = "90d"
    ALL = "all"

    @property
    def days(self) -> Optional[int]:
        return _PRESET_DAYS.get(self)


_PRESET_DAYS = {
    DateRangePreset.LAST_7_DAYS: 7,
    DateRangePreset.LAST_30_DAYS: 30,
    DateRangePreset.LAST_90_DAYS: 90,
}


class SalaryFilter(str, Enum):
    WITH = "with"
    WITHOUT = "without"
    ALL = "all"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


ALL_STAGES = "all"


def _as_bound(value: Union[date, datetime], end_of_day: bool) -> datetime:
    if isinstance(value, datetime):
        return ensure_utc(value)
    return datetime.combine(value, time.max if end_of_day else time.min, tzinfo=timezone.utc)


@dataclass
class CustomDateRange:
    """Inclusive range. Plain dates cover the whole day."""
    start: Union[date, datetime]
    end: Union[date, datetime]

    def __post_init__(self):
        self.start = _as_bound(self.start, end_of_day=False)
        self.end = _as_bound(self.end, end_of_day=True)

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


DateRange = Union[DateRangePreset, CustomDateRange]


@dataclass
class QuickFilters:
    stage: Union[Stage, str] = ALL_STAGES
    date_range: DateRange = DateRangePreset.ALL
    salary: SalaryFilter = SalaryFilter.ALL

    def __post_init__(self):
        if self.stage != ALL_STAGES:
            self.stage = Stage(self.stage)
        if not isinstance(self.date_range, CustomDateRange):
            self.date_range = DateRangePreset(self.date_range)
        self.salary = SalaryFilter(self.salary)


@dataclass
class SortSpec:
    column: str = "date_applied"
    direction: SortDirection = SortDirection.DESC

    def __post_init__(self):
        self.direction = SortDirection(self.direction)

    def toggled(self, column: str) -> "SortSpec":
        """Same column flips direction; a new column starts ascending."""
        if column == self.column:
            flipped = SortDirection.ASC if self.direction == SortDirection.DESC else SortDirection.DESC
            return SortSpec(column, flipped)
        return SortSpec(column, SortDirection.ASC)


@dataclass
class FilterState:
    """Everything that narrows the collection, as last applied."""
    search: str = ""
    column_filters: Dict[str, str] = field(default_factory=dict)
    quick: QuickFilters = field(default_factory=QuickFilters)


# ----------------------------- Column text -----------------------------

def format_date(value: datetime) -> str:
    """Date as shown in the table (MM/DD/YYYY)."""
    return value.strftime("%m/%d/%Y")


_COLUMN_TEXT: Dict[str, Callable[[Application], str]] = {
    "company": lambda a: a.company.name,
    "position": lambda a: a.position,
    "date_applied": lambda a: format_date(a.date_applied),
    "stage": lambda a: a.stage.value.capitalize(),
    "location": lambda a: a.location,
    "salary": lambda a: a.salary,
}

FILTERABLE_COLUMNS = tuple(_COLUMN_TEXT)


def column_text(app: Application, column: str) -> Optional[str]:
    """String representation a column filter matches against (None if unknown)."""
    getter = _COLUMN_TEXT.get(column)
    return getter(app) if getter else None


# ----------------------------- Predicates -----------------------------

def matches_search(app: Application, term: str) -> bool:
    term = (term or "").strip().lower()
    if not term:
        return True
    fields = (app.position, app.company.name, app.location, app.notes)
    return any(term in (f or "").lower() for f in fields)


def matches_column_filters(app: Application, column_filters: Mapping[str, str]) -> bool:
    for column, value in column_filters.items():
        needle = (value or "").strip().lower()
        if not needle:
            continue
        text = column_text(app, column)
        if text is None or needle not in text.lower():
            return False
    return True


def matches_quick_filters(app: Application, quick: QuickFilters, now: datetime) -> bool:
    if quick.stage != ALL_STAGES and app.stage != quick.stage:
        return False

    if isinstance(quick.date_range, CustomDateRange):
        if not quick.date_range.contains(app.date_applied):
            return False
    elif quick.date_range.days is not None:
        if app.date_applied < now - timedelta(days=quick.date_range.days):
            return False

    if quick.salary == SalaryFilter.WITH and not app.has_salary:
        return False
    if quick.salary == SalaryFilter.WITHOUT and app.has_salary:
        return False
    return True


def apply_filters(
    items: Iterable[Application],
    state: FilterState,
    now: datetime,
) -> List[Application]:
    """Items passing every criterion, in their original order."""
    return [
        app for app in items
        if matches_search(app, state.search)
        and matches_column_filters(app, state.column_filters)
        and matches_quick_filters(app, state.quick, now)
    ]
