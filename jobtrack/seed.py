"""
Default datasets written the first time a collection is read.

New users start with empty collections, three monthly goals and a placeholder
profile. `demo_applications()` / `demo_companies()` provide a small sample
pipeline for trying the tool out (enabled with JOBTRACK_SEED_DEMO_DATA).
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, List

from jobtrack.models import (
    Application,
    Company,
    GoalCategory,
    InterviewEvent,
    InterviewType,
    MonthlyGoal,
    Priority,
    Stage,
    Task,
    UserProfile,
    now_utc,
)


def default_goals() -> List[MonthlyGoal]:
    return [
        MonthlyGoal(id="goal1", goal="Submit 10 Applications", target=10,
                    category=GoalCategory.APPLICATIONS),
        MonthlyGoal(id="goal2", goal="Network with 5 Contacts", target=5,
                    category=GoalCategory.NETWORKING),
        MonthlyGoal(id="goal3", goal="Complete 3 Assessments", target=3,
                    category=GoalCategory.SKILLS),
    ]


def default_profile() -> UserProfile:
    return UserProfile()


_DEMO_COMPANIES = [
    ("c-techflow", "TechFlow Inc", "Technology", "https://techflow.com",
     "A leading software development company"),
    ("c-datavision", "DataVision Analytics", "Data Analytics", "https://datavision.com",
     "Advanced data analytics and machine learning solutions"),
    ("c-cloudsync", "CloudSync Solutions", "Cloud Computing", "https://cloudsync.com",
     "Cloud infrastructure and DevOps solutions"),
    ("c-innovatelab", "InnovateLab", "Research & Development", "https://innovatelab.com",
     "Innovation laboratory for emerging technologies"),
    ("c-securenet", "SecureNet Corp", "Cybersecurity", "https://securenet.com",
     "Enterprise cybersecurity solutions"),
]


def demo_companies() -> List[Company]:
    return [
        Company(id=cid, name=name, industry=industry, website=website, description=description)
        for cid, name, industry, website, description in _DEMO_COMPANIES
    ]


def demo_applications(clock: Callable[[], datetime] = now_utc) -> List[Application]:
    """A handful of applications spread across the pipeline, dated relative to `clock()`."""
    now = clock()
    companies = demo_companies()
    rows = [
        # (company index, position, stage, days ago, salary, location, remote)
        (0, "Senior Frontend Developer", Stage.INTERVIEW, 5, "$120k - $140k", "San Francisco, CA", False),
        (1, "Data Engineer", Stage.SCREENING, 12, "$110k - $130k", "Remote", True),
        (2, "DevOps Engineer", Stage.APPLIED, 2, "", "Austin, TX", False),
        (3, "Research Software Engineer", Stage.OFFER, 40, "$135k", "Boston, MA", False),
        (4, "Security Analyst", Stage.REJECTED, 75, "", "Remote", True),
    ]
    apps = []
    for index, (ci, position, stage, days_ago, salary, location, remote) in enumerate(rows, start=1):
        app = Application(
            id=f"demo-{index}",
            position=position,
            company=companies[ci],
            date_applied=now - timedelta(days=days_ago),
            stage=stage,
            salary=salary,
            location=location,
            remote=remote,
            notes=f"Applied for {position} at {companies[ci].name}",
        )
        if stage == Stage.INTERVIEW:
            app.interviews.append(InterviewEvent(
                id=f"demo-{index}-iv1",
                date=now + timedelta(days=3),
                type=InterviewType.TECHNICAL,
                interviewer="Hiring panel",
            ))
            app.tasks.append(Task(
                id=f"demo-{index}-t1",
                title="Prepare system design examples",
                due_date=now + timedelta(days=2),
                priority=Priority.HIGH,
            ))
        apps.append(app)
    return apps
