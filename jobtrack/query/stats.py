"""
Aggregate statistics over the full (unfiltered) application collection.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Iterable

from jobtrack.models import Application, Stage


def _percent(part: int, whole: int) -> int:
    return round(part / whole * 100) if whole else 0


@dataclass
class ApplicationStats:
    total: int = 0
    by_stage: Dict[Stage, int] = field(
        default_factory=lambda: {stage: 0 for stage in Stage.ordered()}
    )
    applied_this_week: int = 0
    applied_this_month: int = 0
    upcoming_interviews: int = 0
    interviews_this_week: int = 0
    pending_tasks: int = 0
    overdue_tasks: int = 0
    shortlisted: int = 0
    remote: int = 0
    with_salary: int = 0
    response_rate: int = 0  # % of applications past "applied"
    success_rate: int = 0  # % of applications with an offer
    active: int = 0


def compute_stats(items: Iterable[Application], now: datetime) -> ApplicationStats:
    apps = list(items)
    stats = ApplicationStats(total=len(apps))

    week_ago = now - timedelta(days=7)
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    week = timedelta(days=7)

    for app in apps:
        stats.by_stage[app.stage] += 1
        if app.date_applied >= week_ago:
            stats.applied_this_week += 1
        if app.date_applied >= month_start:
            stats.applied_this_month += 1
        if app.is_shortlisted:
            stats.shortlisted += 1
        if app.remote:
            stats.remote += 1
        if app.has_salary:
            stats.with_salary += 1

        for interview in app.interviews:
            if not interview.completed and interview.date > now:
                stats.upcoming_interviews += 1
            if abs(interview.date - now) <= week:
                stats.interviews_this_week += 1

        for task in app.tasks:
            if task.completed:
                continue
            stats.pending_tasks += 1
            if task.due_date is not None and task.due_date < now:
                stats.overdue_tasks += 1

    responded = stats.total - stats.by_stage[Stage.APPLIED]
    stats.response_rate = _percent(responded, stats.total)
    stats.success_rate = _percent(stats.by_stage[Stage.OFFER], stats.total)
    stats.active = stats.total - stats.by_stage[Stage.REJECTED]
    return stats
