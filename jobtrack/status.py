"""
Ephemeral status messages ("Moved to Interview", ...) with a fixed lifetime.
"""

from __future__ import annotations

from datetime import timedelta
from typing import List, Optional

from jobtrack.models import StatusUpdate, now_utc
from jobtrack.repositories.base import Clock, generate_id


class StatusFeed:
    """In-memory only; expired updates are dropped when the feed is read."""

    def __init__(self, ttl_s: float = 3.0, clock: Clock = now_utc):
        self.ttl = timedelta(seconds=ttl_s)
        self.clock = clock
        self._updates: List[StatusUpdate] = []

    def push(self, message: str, app_id: Optional[str] = None) -> StatusUpdate:
        update = StatusUpdate(
            id=generate_id(self.clock),
            message=message,
            app_id=app_id,
            created_at=self.clock(),
        )
        self._updates.append(update)
        return update

    def active(self) -> List[StatusUpdate]:
        """Unexpired updates, oldest first."""
        now = self.clock()
        self._updates = [u for u in self._updates if now - u.created_at < self.ttl]
        return list(self._updates)

    def for_application(self, app_id: str) -> List[StatusUpdate]:
        return [u for u in self.active() if u.app_id == app_id]

    def dismiss(self, update_id: str) -> bool:
        before = len(self._updates)
        self._updates = [u for u in self._updates if u.id != update_id]
        return len(self._updates) < before

    def clear(self) -> None:
        self._updates = []
