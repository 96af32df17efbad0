"""
Export applications to CSV / Excel with pandas.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List

import pandas as pd

from jobtrack.models import Application

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = [
    "id", "position", "company", "industry", "stage",
    "date_applied", "location", "remote", "salary", "bonus",
    "benefits", "is_shortlisted", "interviews", "open_tasks",
    "contacts", "notes",
]


def application_row(app: Application) -> Dict[str, Any]:
    """Flatten one application into export columns."""
    return {
        "id": app.id,
        "position": app.position,
        "company": app.company.name,
        "industry": app.company.industry,
        "stage": app.stage.label,
        "date_applied": app.date_applied.strftime("%Y-%m-%d"),
        "location": app.location,
        "remote": app.remote,
        "salary": app.salary,
        "bonus": app.bonus,
        "benefits": "; ".join(app.benefits),
        "is_shortlisted": app.is_shortlisted,
        "interviews": len(app.interviews),
        "open_tasks": sum(1 for t in app.tasks if not t.completed),
        "contacts": ", ".join(c.name for c in app.contacts),
        "notes": app.notes,
    }


def to_frame(apps: Iterable[Application]) -> pd.DataFrame:
    rows: List[Dict[str, Any]] = [application_row(app) for app in apps]
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


def export_to_csv(apps: Iterable[Application], path: str) -> int:
    """
    Export applications to a CSV file.

    Returns number of rows exported (no file is written for zero rows).
    """
    df = to_frame(apps)
    if df.empty:
        return 0
    df.to_csv(path, index=False, encoding="utf-8")
    logger.info("Exported %d application(s) to %s", len(df), path)
    return len(df)


def export_to_excel(apps: Iterable[Application], path: str) -> int:
    """
    Export applications to an Excel file.

    Returns number of rows exported (no file is written for zero rows).
    """
    df = to_frame(apps)
    if df.empty:
        return 0
    df.to_excel(path, index=False)
    logger.info("Exported %d application(s) to %s", len(df), path)
    return len(df)
