"""
Upcoming events (interviews, tasks, deadlines) repository.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Callable, List, Optional, Tuple, Union

from jobtrack.models import EventType, UpcomingEvent, now_utc
from jobtrack.repositories.base import Clock, EntityRepository
from jobtrack.storage.store import PersistentStore, StorageKeys


def day_bounds(now: datetime) -> Tuple[datetime, datetime]:
    """[midnight, next midnight) of `now`'s calendar day, in `now`'s timezone."""
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


class EventRepository(EntityRepository[UpcomingEvent]):

    def __init__(
        self,
        store: PersistentStore,
        seed: Optional[Callable[[], List[Any]]] = None,
        clock: Clock = now_utc,
    ):
        super().__init__(store, StorageKeys.UPCOMING_EVENTS, UpcomingEvent, seed=seed, clock=clock)

    def get_upcoming(self, limit: Optional[int] = None) -> List[UpcomingEvent]:
        """Future events, soonest first."""
        now = self.clock()
        upcoming = sorted(
            (e for e in self.get_all() if e.date > now),
            key=lambda e: e.date,
        )
        return upcoming[:limit] if limit is not None else upcoming

    def get_today(self) -> List[UpcomingEvent]:
        start, end = day_bounds(self.clock())
        return [e for e in self.get_all() if start <= e.date < end]

    def get_by_type(self, event_type: Union[EventType, str]) -> List[UpcomingEvent]:
        event_type = EventType(event_type)
        return [e for e in self.get_all() if e.type == event_type]
