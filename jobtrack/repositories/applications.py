"""
Application repository and its schema migration.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Union

from jobtrack.models import Application, Stage, now_utc
from jobtrack.repositories.base import Clock, EntityRepository, RawRecord
from jobtrack.storage.store import PersistentStore, StorageKeys

if TYPE_CHECKING:
    from jobtrack.repositories.activities import ActivityRepository


# Keys written by older (camelCase) exports -> current field names
_LEGACY_KEYS = {
    "dateApplied": "date_applied",
    "jobDescription": "job_description",
    "allNotes": "all_notes",
    "isShortlisted": "is_shortlisted",
    "shortlistedAt": "shortlisted_at",
}

_SUB_COLLECTIONS = ("contacts", "interviews", "tasks", "documents", "all_notes")

_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _coerce_timestamp(value: Any) -> Any:
    """Normalize epoch milliseconds and date-only strings to full ISO-8601."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc).isoformat()
        except (OverflowError, OSError, ValueError):
            return value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, str) and _DATE_ONLY_RE.match(value.strip()):
        return f"{value.strip()}T00:00:00+00:00"
    return value


def _migrate_application(record: Dict[str, Any]) -> Dict[str, Any]:
    app = dict(record)

    for old, new in _LEGACY_KEYS.items():
        if old in app:
            value = app.pop(old)
            app.setdefault(new, value)

    for name in _SUB_COLLECTIONS:
        if app.get(name) is None:
            app[name] = []

    company = app.get("company")
    if isinstance(company, str) and company.strip():
        app["company"] = {"id": "", "name": company.strip(), "industry": ""}

    if "date_applied" in app:
        app["date_applied"] = _coerce_timestamp(app["date_applied"])
    return app


def migrate_applications(records: List[Any]) -> List[Any]:
    """
    Bring stored applications up to the current shape.

    - renames legacy camelCase keys
    - backfills missing sub-collections with empty lists
    - wraps a bare company name into a company snapshot
    - turns epoch-millisecond / date-only `date_applied` values into ISO-8601

    Non-dict entries are passed through untouched (they fail parsing later).
    """
    return [_migrate_application(r) if isinstance(r, dict) else r for r in records]


class ApplicationRepository(EntityRepository[Application]):
    """
    Applications, plus the stage-change business rule.

    When an ActivityRepository is attached, `update_stage` appends an activity
    after updating the application (see `update_stage` for the failure window).
    """

    def __init__(
        self,
        store: PersistentStore,
        activities: Optional["ActivityRepository"] = None,
        seed: Optional[Callable[[], List[Any]]] = None,
        clock: Clock = now_utc,
    ):
        super().__init__(
            store,
            StorageKeys.APPLICATIONS,
            Application,
            seed=seed,
            migrator=migrate_applications,
            clock=clock,
        )
        self.activities = activities

    def _prepare(self, record: RawRecord) -> RawRecord:
        record.setdefault("stage", Stage.APPLIED.value)
        record.setdefault("date_applied", self.clock().isoformat())
        return record

    # ----------------------------- queries -----------------------------

    def get_by_stage(self, stage: Union[Stage, str]) -> List[Application]:
        stage = Stage(stage)
        return [app for app in self.get_all() if app.stage == stage]

    def get_by_company(self, company_id: str) -> List[Application]:
        return [app for app in self.get_all() if app.company.id == company_id]

    def get_upcoming_interviews(self) -> List[Application]:
        """Applications with at least one incomplete interview in the future."""
        now = self.clock()
        return [
            app for app in self.get_all()
            if any(not iv.completed and iv.date > now for iv in app.interviews)
        ]

    # ----------------------------- stage workflow -----------------------------

    def update_stage(self, item_id: str, stage: Union[Stage, str]) -> Optional[Application]:
        """
        Move an application to `stage` and record a stage-change activity.

        Two separate writes, in this order: the application, then the activity.
        They are not atomic: if the second write fails the stage change stays
        applied without its activity. Use `workflows.change_stage(atomic=True)`
        when both must land together. Unknown ids return None and write nothing.
        """
        stage = Stage(stage)
        app = self.update(item_id, {"stage": stage})
        if app is not None and self.activities is not None:
            self.activities.add_stage_change_activity(app, stage)
        return app

    def increment_stage(self, item_id: str) -> Optional[Application]:
        """Advance one step along the pipeline; no-op at the last stage."""
        return self._step_stage(item_id, 1)

    def decrement_stage(self, item_id: str) -> Optional[Application]:
        """Go back one step along the pipeline; no-op at the first stage."""
        return self._step_stage(item_id, -1)

    def _step_stage(self, item_id: str, step: int) -> Optional[Application]:
        app = self.get_by_id(item_id)
        if app is None:
            return None
        order = Stage.ordered()
        index = order.index(app.stage) + step
        if index < 0 or index >= len(order):
            return app
        return self.update_stage(item_id, order[index])

    def toggle_shortlist(self, item_id: str) -> Optional[Application]:
        app = self.get_by_id(item_id)
        if app is None:
            return None
        shortlisted = not app.is_shortlisted
        return self.update(item_id, {
            "is_shortlisted": shortlisted,
            "shortlisted_at": self.clock() if shortlisted else None,
        })
