"""
SQLite-backed key/value store with best-effort semantics.

Every value is one JSON document under a namespaced key. Reads and writes never
raise: faults are logged and surface as "key absent" (reads) or False (writes),
so callers treat "faulted" and "empty" the same way.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import os
import re
import sqlite3
import threading
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

from jobtrack.models import ensure_utc, now_utc

logger = logging.getLogger(__name__)

# Strings shaped like this are turned back into datetimes by the untyped reader.
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}")

Listener = Callable[[str], None]

# Faults the store absorbs; everything surfaces as "absent" or False.
_STORE_ERRORS = (sqlite3.Error, OSError)


class StorageKeys:
    """Logical key names; the store prefixes them with its namespace."""
    USER_PROFILE = "user_profile"
    APPLICATIONS = "applications"
    COMPANIES = "companies"
    ACTIVITIES = "activities"
    UPCOMING_EVENTS = "upcoming_events"
    MONTHLY_GOALS = "monthly_goals"
    REMINDERS = "reminders"
    APP_STATS = "app_stats"
    SETTINGS = "settings"
    LAST_SYNC = "last_sync"

    @classmethod
    def all(cls) -> List[str]:
        return [
            cls.USER_PROFILE,
            cls.APPLICATIONS,
            cls.COMPANIES,
            cls.ACTIVITIES,
            cls.UPCOMING_EVENTS,
            cls.MONTHLY_GOALS,
            cls.REMINDERS,
            cls.APP_STATS,
            cls.SETTINGS,
            cls.LAST_SYNC,
        ]


def _json_default(value: Any) -> Any:
    """Encode the non-JSON types our records carry."""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, (set, frozenset)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode(value: Any) -> str:
    """Serialize a value to JSON text (raises on cycles/unsupported types)."""
    return json.dumps(value, default=_json_default)


def revive_date_strings(obj: Any) -> Any:
    """
    Recursively replace ISO-8601-looking strings with datetimes.

    This is a shape heuristic over untyped JSON: any string that merely looks
    like a timestamp is converted. Typed readers should validate against a
    field schema instead.
    """
    if obj is None:
        return obj
    if isinstance(obj, str):
        if _ISO_DATE_RE.match(obj):
            try:
                return ensure_utc(datetime.fromisoformat(obj.replace("Z", "+00:00")))
            except ValueError:
                return obj
        return obj
    if isinstance(obj, list):
        return [revive_date_strings(item) for item in obj]
    if isinstance(obj, dict):
        return {k: revive_date_strings(v) for k, v in obj.items()}
    return obj


class PersistentStore:
    """
    Namespaced JSON key/value store in a single SQLite table.

    The connection is opened by `init()` and closed by `teardown()`; nothing
    happens at import or construction time.
    """

    def __init__(self, db_path: str = ":memory:", prefix: str = "jobtrack_"):
        """
        Args:
            db_path: SQLite database file, or ":memory:"
            prefix: Namespace prepended to every logical key
        """
        self.db_path = db_path
        self.prefix = prefix
        self._lock = threading.RLock()
        self._conn: Optional[sqlite3.Connection] = None
        self._listeners: List[Listener] = []

    # ----------------------------- lifecycle -----------------------------

    def init(self) -> bool:
        """Open the database and create the schema. Returns False on failure."""
        with self._lock:
            try:
                conn = self._get_conn()
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS kv (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at TEXT NOT NULL
                    )
                """)
                conn.commit()
                return True
            except _STORE_ERRORS as e:
                logger.error("Error initializing store at %s: %s", self.db_path, e)
                return False

    def teardown(self) -> None:
        """Close the connection and drop all listeners."""
        with self._lock:
            self._listeners.clear()
            if self._conn is not None:
                try:
                    self._conn.close()
                except _STORE_ERRORS as e:
                    logger.warning("Error closing store: %s", e)
                self._conn = None

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            if self.db_path != ":memory:":
                os.makedirs(os.path.dirname(self.db_path) or ".", exist_ok=True)
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        return self._conn

    def key(self, name: str) -> str:
        """Full namespaced key for a logical key name."""
        return f"{self.prefix}{name}"

    # ----------------------------- raw access -----------------------------

    def _read_text(self, name: str) -> Optional[str]:
        conn = self._get_conn()
        row = conn.execute(
            "SELECT value FROM kv WHERE key = ?", (self.key(name),)
        ).fetchone()
        return row[0] if row else None

    def _write_text(self, name: str, text: str) -> None:
        conn = self._get_conn()
        conn.execute(
            "INSERT OR REPLACE INTO kv (key, value, updated_at) VALUES (?, ?, ?)",
            (self.key(name), text, now_utc().isoformat()),
        )
        conn.commit()

    def _delete(self, name: str) -> None:
        conn = self._get_conn()
        conn.execute("DELETE FROM kv WHERE key = ?", (self.key(name),))
        conn.commit()

    # ----------------------------- public contract -----------------------------

    def get(self, name: str, revive_dates: bool = True) -> Any:
        """
        Read and parse a value.

        Returns None when the key is missing or the read fails for any reason.
        With `revive_dates` (default) ISO-looking strings come back as datetimes.
        """
        with self._lock:
            try:
                text = self._read_text(name)
                if text is None:
                    return None
                value = json.loads(text)
                return revive_date_strings(value) if revive_dates else value
            except (*_STORE_ERRORS, ValueError, RecursionError) as e:
                logger.error("Error getting %s from store: %s", name, e)
                return None

    def set(self, name: str, value: Any) -> bool:
        """Serialize and write a value. Returns False (and logs) on failure."""
        with self._lock:
            try:
                self._write_text(name, encode(value))
            except (*_STORE_ERRORS, TypeError, ValueError, RecursionError) as e:
                logger.error("Error setting %s in store: %s", name, e)
                return False
        self._notify(name)
        return True

    def remove(self, name: str) -> None:
        with self._lock:
            try:
                self._delete(name)
            except _STORE_ERRORS as e:
                logger.error("Error removing %s from store: %s", name, e)
                return
        self._notify(name)

    def clear(self) -> None:
        """Remove every key in this store's namespace (and nothing else)."""
        with self._lock:
            try:
                conn = self._get_conn()
                rows = conn.execute(
                    "SELECT key FROM kv WHERE substr(key, 1, ?) = ?",
                    (len(self.prefix), self.prefix),
                ).fetchall()
                conn.execute(
                    "DELETE FROM kv WHERE substr(key, 1, ?) = ?",
                    (len(self.prefix), self.prefix),
                )
                conn.commit()
            except _STORE_ERRORS as e:
                logger.error("Error clearing store: %s", e)
                return
        for (full_key,) in rows:
            self._notify(full_key[len(self.prefix):])

    def exists(self, name: str) -> bool:
        with self._lock:
            try:
                return self._read_text(name) is not None
            except _STORE_ERRORS as e:
                logger.error("Error checking %s in store: %s", name, e)
                return False

    def keys(self) -> List[str]:
        """Logical names of all keys currently stored in this namespace."""
        with self._lock:
            try:
                rows = self._get_conn().execute(
                    "SELECT key FROM kv WHERE substr(key, 1, ?) = ? ORDER BY key",
                    (len(self.prefix), self.prefix),
                ).fetchall()
            except _STORE_ERRORS as e:
                logger.error("Error listing store keys: %s", e)
                return []
        return [full_key[len(self.prefix):] for (full_key,) in rows]

    # ----------------------------- change notification -----------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a callback invoked with the logical key after each change.

        Only writes made through this process are observed. Returns a function
        that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _notify(self, name: str) -> None:
        for listener in list(self._listeners):
            try:
                listener(name)
            except Exception as e:
                logger.warning("Store listener failed for %s: %s", name, e)

    # ----------------------------- snapshots / backup -----------------------------

    def snapshot(self, names: Iterable[str]) -> Dict[str, Optional[str]]:
        """Raw stored text for each key (None when absent or unreadable)."""
        snap: Dict[str, Optional[str]] = {}
        with self._lock:
            for name in names:
                try:
                    snap[name] = self._read_text(name)
                except _STORE_ERRORS as e:
                    logger.error("Error reading %s for snapshot: %s", name, e)
                    snap[name] = None
        return snap

    def restore_snapshot(self, snap: Dict[str, Optional[str]]) -> bool:
        """Write back a snapshot taken by `snapshot()`. Returns False on failure."""
        ok = True
        for name, text in snap.items():
            with self._lock:
                try:
                    if text is None:
                        self._delete(name)
                    else:
                        self._write_text(name, text)
                except _STORE_ERRORS as e:
                    logger.error("Error restoring %s: %s", name, e)
                    ok = False
                    continue
            self._notify(name)
        return ok

    def dump(self) -> Dict[str, Any]:
        """All known keys that hold a value, parsed but not date-revived."""
        backup: Dict[str, Any] = {}
        for name in StorageKeys.all():
            value = self.get(name, revive_dates=False)
            if value is not None:
                backup[name] = value
        return backup

    def load(self, backup: Dict[str, Any]) -> int:
        """Write known keys from a `dump()` mapping. Returns keys written."""
        known = set(StorageKeys.all())
        written = 0
        for name, value in backup.items():
            if name not in known:
                logger.info("Skipping unknown backup key %s", name)
                continue
            if self.set(name, value):
                written += 1
        return written
