"""
Repositories for JobTrack.

Provides:
- EntityRepository / SingletonRepository: generic validating CRUD over PersistentStore
- One specialized repository per entity type with its domain queries
"""

from jobtrack.repositories.activities import ActivityRepository
from jobtrack.repositories.applications import ApplicationRepository, migrate_applications
from jobtrack.repositories.base import (
    EntityRepository,
    ParseResult,
    RecordValidationError,
    SingletonRepository,
    generate_id,
)
from jobtrack.repositories.companies import CompanyRepository
from jobtrack.repositories.events import EventRepository
from jobtrack.repositories.goals import GoalRepository
from jobtrack.repositories.profile import ProfileRepository
from jobtrack.repositories.reminders import ReminderRepository
from jobtrack.repositories.stats import StatsRepository

__all__ = [
    "ActivityRepository",
    "ApplicationRepository",
    "CompanyRepository",
    "EntityRepository",
    "EventRepository",
    "GoalRepository",
    "ParseResult",
    "ProfileRepository",
    "RecordValidationError",
    "ReminderRepository",
    "SingletonRepository",
    "StatsRepository",
    "generate_id",
    "migrate_applications",
]
