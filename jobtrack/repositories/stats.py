"""
Cached dashboard statistics (singleton).
"""

from __future__ import annotations

from jobtrack.models import AppStats, EventType, Stage
from jobtrack.repositories.applications import ApplicationRepository
from jobtrack.repositories.base import SingletonRepository
from jobtrack.repositories.events import EventRepository
from jobtrack.storage.store import PersistentStore, StorageKeys


class StatsRepository(SingletonRepository[AppStats]):
    """
    Derives AppStats from applications and events.

    The stored copy is only a cache for other readers; `get()` always
    recalculates.
    """

    def __init__(
        self,
        store: PersistentStore,
        applications: ApplicationRepository,
        events: EventRepository,
    ):
        super().__init__(store, StorageKeys.APP_STATS, AppStats, default=AppStats)
        self.applications = applications
        self.events = events

    def calculate(self) -> AppStats:
        apps = self.applications.get_all()
        events = self.events.get_all()

        stage_count = {stage: 0 for stage in Stage.ordered()}
        for app in apps:
            stage_count[app.stage] += 1

        offers = stage_count[Stage.OFFER]
        rejected = stage_count[Stage.REJECTED]
        decided = offers + rejected

        stats = AppStats(
            total_applications=len(apps),
            stage_count=stage_count,
            interviews_scheduled=sum(1 for e in events if e.type == EventType.INTERVIEW),
            success_rate=round(offers / decided * 100) if decided else 0,
            tasks_due=sum(1 for e in events if e.type == EventType.TASK),
            active_applications=len(apps) - rejected - offers,
        )
        self.save(stats)
        return stats

    def get(self) -> AppStats:
        return self.calculate()
