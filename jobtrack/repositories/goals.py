"""
Monthly goals repository.
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional

from jobtrack.models import MonthlyGoal, now_utc
from jobtrack.repositories.base import Clock, EntityRepository
from jobtrack.seed import default_goals
from jobtrack.storage.store import PersistentStore, StorageKeys


def goal_progress(current: int, target: int) -> int:
    """Percent complete, capped at 100; 0 for a non-positive target."""
    if target <= 0:
        return 0
    return min(round(current / target * 100), 100)


class GoalRepository(EntityRepository[MonthlyGoal]):
    """Seeded with three default goals the first time it is read."""

    def __init__(
        self,
        store: PersistentStore,
        seed: Optional[Callable[[], List[Any]]] = default_goals,
        clock: Clock = now_utc,
    ):
        super().__init__(store, StorageKeys.MONTHLY_GOALS, MonthlyGoal, seed=seed, clock=clock)

    def update_progress(self, item_id: str, current: int) -> Optional[MonthlyGoal]:
        goal = self.get_by_id(item_id)
        if goal is None:
            return None
        return self.update(item_id, {
            "current": current,
            "progress": goal_progress(current, goal.target),
        })
