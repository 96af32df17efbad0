"""
Business rules that span more than one repository.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from jobtrack.models import Activity, Application, Stage
from jobtrack.repositories.activities import ActivityRepository
from jobtrack.repositories.applications import ApplicationRepository

logger = logging.getLogger(__name__)


@dataclass
class StageChange:
    """Result of `change_stage`: both halves, either may be missing."""
    application: Optional[Application] = None
    activity: Optional[Activity] = None

    @property
    def complete(self) -> bool:
        return self.application is not None and self.activity is not None


def change_stage(
    applications: ApplicationRepository,
    activities: ActivityRepository,
    app_id: str,
    stage: Union[Stage, str],
    atomic: bool = False,
) -> StageChange:
    """
    Move an application to `stage` and append the matching activity.

    Default mode runs the two writes in sequence with no rollback: a failure
    in the second leaves the new stage without an activity (logged).

    With `atomic=True` both keys are snapshotted first and restored if either
    write does not persist, so the store ends up with both changes or neither.
    Unknown ids write nothing in either mode.
    """
    stage = Stage(stage)
    store = applications.store
    snap = store.snapshot([applications.key, activities.key]) if atomic else None

    try:
        app = applications.update(app_id, {"stage": stage})
        if app is None:
            return StageChange()
        activity = activities.add_stage_change_activity(app, stage)
    except Exception:
        if snap is not None:
            store.restore_snapshot(snap)
        raise

    app_saved = getattr(applications.get_by_id(app_id), "stage", None) == stage
    activity_saved = activities.get_by_id(activity.id) is not None
    if app_saved and activity_saved:
        return StageChange(application=app, activity=activity)

    if snap is not None:
        logger.warning("Stage change for %s did not persist, rolling back", app_id)
        store.restore_snapshot(snap)
        return StageChange()

    logger.warning("Stage change for %s persisted partially", app_id)
    return StageChange(
        application=app if app_saved else None,
        activity=activity if activity_saved else None,
    )
