"""
Stable column sorting for applications.
"""

from __future__ import annotations

import unicodedata
from typing import Any, Callable, Dict, Iterable, List

from jobtrack.models import Application
from jobtrack.query.filters import SortDirection, SortSpec


def collation_key(text: str) -> str:
    """Accent- and case-insensitive sort key ("Émile" sorts with "emile")."""
    decomposed = unicodedata.normalize("NFKD", text or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


SORT_KEYS: Dict[str, Callable[[Application], Any]] = {
    "position": lambda a: collation_key(a.position),
    "company": lambda a: collation_key(a.company.name),
    "date_applied": lambda a: a.date_applied.timestamp(),
    "stage": lambda a: collation_key(a.stage.value),
    "location": lambda a: collation_key(a.location),
    "salary": lambda a: collation_key(a.salary),
}
SORT_KEYS["company.name"] = SORT_KEYS["company"]


def sort_items(items: Iterable[Application], spec: SortSpec) -> List[Application]:
    """
    Sorted copy of `items`. Ties keep their input order in both directions;
    an unknown column returns the input order unchanged.
    """
    key = SORT_KEYS.get(spec.column)
    if key is None:
        return list(items)
    return sorted(items, key=key, reverse=spec.direction == SortDirection.DESC)
