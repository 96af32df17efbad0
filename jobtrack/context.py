"""
Explicit wiring of the store and every repository.

Nothing is opened at import time: build a TrackerContext, call `init()`, and
`teardown()` when done (or use it as a context manager).
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from jobtrack.config import Settings, get_settings
from jobtrack.models import ensure_utc, now_utc
from jobtrack.repositories import (
    ActivityRepository,
    ApplicationRepository,
    CompanyRepository,
    EventRepository,
    GoalRepository,
    ProfileRepository,
    ReminderRepository,
    StatsRepository,
)
from jobtrack.repositories.base import Clock
from jobtrack.seed import demo_applications, demo_companies
from jobtrack.status import StatusFeed
from jobtrack.storage.store import PersistentStore, StorageKeys
from jobtrack.window import Density, VirtualWindow

logger = logging.getLogger(__name__)

BACKUP_VERSION = 1


class TrackerContext:
    """
    Store plus repositories for one local profile.

    Args:
        settings: Settings to use (defaults to `get_settings()`)
        store: Pre-built store (tests pass an in-memory one)
        clock: Source of "now" shared by every repository
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        store: Optional[PersistentStore] = None,
        clock: Clock = now_utc,
    ):
        self.settings = settings or get_settings()
        self.store = store or PersistentStore(self.settings.db_path, prefix=self.settings.key_prefix)
        self.clock = clock

        demo = self.settings.seed_demo_data
        app_seed = (lambda: demo_applications(clock)) if demo else None
        company_seed = demo_companies if demo else None

        self.activities = ActivityRepository(self.store, clock=clock)
        self.applications = ApplicationRepository(
            self.store, activities=self.activities, seed=app_seed, clock=clock
        )
        self.companies = CompanyRepository(self.store, seed=company_seed, clock=clock)
        self.events = EventRepository(self.store, clock=clock)
        self.reminders = ReminderRepository(self.store, clock=clock)
        self.goals = GoalRepository(self.store, clock=clock)
        self.stats = StatsRepository(self.store, self.applications, self.events)
        self.profile = ProfileRepository(self.store)
        self.status = StatusFeed(self.settings.status_ttl_s, clock=clock)

    # ----------------------------- lifecycle -----------------------------

    def init(self) -> bool:
        """Open the store. Returns False when the database cannot be opened."""
        ok = self.store.init()
        if ok:
            logger.debug("Opened tracker store at %s", self.store.db_path)
        return ok

    def teardown(self) -> None:
        self.store.teardown()

    def __enter__(self) -> "TrackerContext":
        self.init()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.teardown()

    def window(
        self,
        items: Sequence[Any] = (),
        viewport_height: float = 600,
        density: Density = Density.COMFORTABLE,
    ) -> VirtualWindow:
        """VirtualWindow sized by this context's settings."""
        return VirtualWindow.from_settings(
            self.settings, items, viewport_height=viewport_height, density=density
        )

    def initialize(self) -> None:
        """Touch every collection so missing ones are seeded and migrated."""
        self.profile.get()
        self.applications.get_all()
        self.companies.get_all()
        self.activities.get_all()
        self.events.get_all()
        self.reminders.get_all()
        self.goals.get_all()
        self.stats.calculate()
        self.mark_synced()

    def reset(self) -> None:
        """Drop everything in this namespace and reseed defaults."""
        self.store.clear()
        self.initialize()

    # ----------------------------- sync marker -----------------------------

    def last_sync(self) -> Optional[datetime]:
        value = self.store.get(StorageKeys.LAST_SYNC)
        return ensure_utc(value) if isinstance(value, datetime) else None

    def mark_synced(self) -> datetime:
        stamp = self.clock()
        self.store.set(StorageKeys.LAST_SYNC, stamp)
        return stamp

    # ----------------------------- backup / restore -----------------------------

    def backup(self) -> Dict[str, Any]:
        return {
            "version": BACKUP_VERSION,
            "created_at": self.clock().isoformat(),
            "data": self.store.dump(),
        }

    def backup_to_file(self, path: str) -> int:
        """Write a JSON backup. Returns the number of keys saved."""
        payload = self.backup()
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
        return len(payload["data"])

    def restore(self, payload: Dict[str, Any]) -> int:
        """
        Replace stored data with a backup. Returns keys written.

        Raises ValueError for payloads that are not a backup.
        """
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            raise ValueError("Not a jobtrack backup: missing 'data' object")
        self.store.clear()
        written = self.store.load(data)
        logger.info("Restored %d key(s) from backup", written)
        return written

    def restore_from_file(self, path: str) -> int:
        with open(path, "r", encoding="utf-8") as f:
            payload = json.load(f)
        return self.restore(payload)
