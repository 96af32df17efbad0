"""
JobTrack: local-first data layer for a job application tracker.

Persists applications and related records in a local SQLite file and exposes
a filtered/sorted/aggregated query surface plus virtual windowing for UIs.
"""

__version__ = "1.0.0"

from jobtrack.context import TrackerContext
from jobtrack.models import Application, Company, Stage
from jobtrack.query import QueryEngine, QueryResult
from jobtrack.storage import PersistentStore, StorageKeys
from jobtrack.window import VirtualWindow, WindowRange, compute_window

__all__ = [
    "Application",
    "Company",
    "PersistentStore",
    "QueryEngine",
    "QueryResult",
    "Stage",
    "StorageKeys",
    "TrackerContext",
    "VirtualWindow",
    "WindowRange",
    "compute_window",
]
