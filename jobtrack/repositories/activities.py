"""
Activity log repository (append-only in practice).
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional, Union

from jobtrack.models import Activity, ActivityType, Application, Stage, now_utc
from jobtrack.repositories.base import Clock, EntityRepository
from jobtrack.storage.store import PersistentStore, StorageKeys


class ActivityRepository(EntityRepository[Activity]):

    def __init__(
        self,
        store: PersistentStore,
        seed: Optional[Callable[[], List[Any]]] = None,
        clock: Clock = now_utc,
    ):
        super().__init__(store, StorageKeys.ACTIVITIES, Activity, seed=seed, clock=clock)

    def get_recent(self, limit: int = 10) -> List[Activity]:
        """Newest first."""
        items = sorted(self.get_all(), key=lambda a: a.timestamp, reverse=True)
        return items[:limit]

    def get_by_type(self, activity_type: Union[ActivityType, str]) -> List[Activity]:
        activity_type = ActivityType(activity_type)
        return [a for a in self.get_all() if a.type == activity_type]

    def get_by_application(self, application_id: str) -> List[Activity]:
        return [
            a for a in self.get_all()
            if a.application is not None and a.application.id == application_id
        ]

    def add_application_activity(self, application: Application) -> Activity:
        return self.create({
            "type": ActivityType.APPLICATION,
            "title": "Job Application Submitted",
            "application": application,
            "company": application.company,
            "timestamp": self.clock(),
            "details": f"Applied for {application.position} at {application.company.name}",
        })

    def add_stage_change_activity(self, application: Application, new_stage: Union[Stage, str]) -> Activity:
        stage = Stage(new_stage)
        return self.create({
            "type": ActivityType.for_stage(stage),
            "title": f"Application {stage.label}",
            "application": application,
            "company": application.company,
            "timestamp": self.clock(),
            "details": (
                f"Application for {application.position} at "
                f"{application.company.name} moved to {stage.label}"
            ),
        })
