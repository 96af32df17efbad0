"""
Reminder repository.

All time-relative queries compare against the repository clock at call time;
nothing is cached.
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional, Union

from jobtrack.models import Priority, Reminder, ReminderStatus, now_utc
from jobtrack.repositories.base import Clock, EntityRepository
from jobtrack.repositories.events import day_bounds
from jobtrack.storage.store import PersistentStore, StorageKeys


class ReminderRepository(EntityRepository[Reminder]):

    def __init__(
        self,
        store: PersistentStore,
        seed: Optional[Callable[[], List[Any]]] = None,
        clock: Clock = now_utc,
    ):
        super().__init__(store, StorageKeys.REMINDERS, Reminder, seed=seed, clock=clock)

    def get_by_status(self, status: Union[ReminderStatus, str]) -> List[Reminder]:
        status = ReminderStatus(status)
        return [r for r in self.get_all() if r.status == status]

    def get_pending(self) -> List[Reminder]:
        return self.get_by_status(ReminderStatus.PENDING)

    def get_completed(self) -> List[Reminder]:
        return self.get_by_status(ReminderStatus.COMPLETED)

    def get_by_priority(self, priority: Union[Priority, str]) -> List[Reminder]:
        priority = Priority(priority)
        return [r for r in self.get_all() if r.priority == priority]

    def get_upcoming(self, limit: Optional[int] = None) -> List[Reminder]:
        """Pending reminders due in the future, soonest first."""
        now = self.clock()
        upcoming = sorted(
            (r for r in self.get_pending() if r.due_date > now),
            key=lambda r: r.due_date,
        )
        return upcoming[:limit] if limit is not None else upcoming

    def get_overdue(self) -> List[Reminder]:
        now = self.clock()
        return [r for r in self.get_pending() if r.due_date < now]

    def get_due_today(self) -> List[Reminder]:
        start, end = day_bounds(self.clock())
        return [r for r in self.get_pending() if start <= r.due_date < end]

    def get_by_application(self, application_id: str) -> List[Reminder]:
        return [
            r for r in self.get_all()
            if r.related_application is not None and r.related_application.id == application_id
        ]

    def mark_completed(self, item_id: str) -> Optional[Reminder]:
        return self.update(item_id, {"status": ReminderStatus.COMPLETED})

    def mark_pending(self, item_id: str) -> Optional[Reminder]:
        return self.update(item_id, {"status": ReminderStatus.PENDING})

    def update_priority(self, item_id: str, priority: Union[Priority, str]) -> Optional[Reminder]:
        return self.update(item_id, {"priority": Priority(priority)})
