"""
Core data models for JobTrack.

Provides:
- Stage / ReminderStatus / Priority and the other small enums
- Application with its owned records (Contact, InterviewEvent, Task, Document, Note)
- Independent top-level records (Company, Activity, UpcomingEvent, Reminder,
  MonthlyGoal, AppStats, UserProfile)
- StatusUpdate: ephemeral UI feedback, never persisted

Records are plain dataclasses. Their annotations double as the field schema the
repositories validate stored JSON against, so every date-typed field comes back
as a timezone-aware datetime.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Dict, List, Optional

from pydantic import AfterValidator


def now_utc() -> datetime:
    """Current UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# Datetime field type used by every record below.
UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]


# ----------------------------- Enums -----------------------------

class Stage(str, Enum):
    """Lifecycle state of a job application."""
    APPLIED = "applied"
    SCREENING = "screening"
    INTERVIEW = "interview"
    OFFER = "offer"
    REJECTED = "rejected"

    @property
    def label(self) -> str:
        """Human label used in activity titles."""
        return _STAGE_LABELS[self]

    @classmethod
    def ordered(cls) -> List["Stage"]:
        """Stages in pipeline order."""
        return [cls.APPLIED, cls.SCREENING, cls.INTERVIEW, cls.OFFER, cls.REJECTED]


_STAGE_LABELS = {
    Stage.APPLIED: "Applied",
    Stage.SCREENING: "Screening",
    Stage.INTERVIEW: "Interview",
    Stage.OFFER: "Offer Received",
    Stage.REJECTED: "Rejected",
}


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ReminderStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class InterviewType(str, Enum):
    PHONE = "phone"
    VIDEO = "video"
    ONSITE = "onsite"
    TECHNICAL = "technical"
    OTHER = "other"


class DocumentType(str, Enum):
    RESUME = "resume"
    COVER_LETTER = "cover-letter"
    PORTFOLIO = "portfolio"
    OTHER = "other"


class NoteType(str, Enum):
    GENERAL = "general"
    INTERVIEW = "interview"
    RESEARCH = "research"
    FOLLOWUP = "followup"


class ActivityType(str, Enum):
    APPLICATION = "application"
    INTERVIEW = "interview"
    EMAIL = "email"
    VIEWED = "viewed"
    ASSESSMENT = "assessment"
    OFFER = "offer"
    SCREENING = "screening"
    REJECTED = "rejected"
    TASK = "task"
    NETWORK = "network"

    @classmethod
    def for_stage(cls, stage: Stage) -> "ActivityType":
        """Activity type recorded when an application moves to `stage`."""
        if stage == Stage.OFFER:
            return cls.OFFER
        if stage == Stage.REJECTED:
            return cls.REJECTED
        return cls.INTERVIEW


class EventType(str, Enum):
    INTERVIEW = "Interview"
    TASK = "Task"
    DEADLINE = "Deadline"


class GoalCategory(str, Enum):
    APPLICATIONS = "applications"
    NETWORKING = "networking"
    SKILLS = "skills"
    INTERVIEWS = "interviews"


# ----------------------------- Owned records -----------------------------

@dataclass
class Company:
    id: str
    name: str
    industry: str = ""
    logo: str = ""
    website: str = ""
    description: str = ""
    headquarters: str = ""
    size: str = ""
    founded: str = ""


@dataclass
class Contact:
    id: str
    name: str
    role: str = ""
    email: str = ""
    phone: str = ""
    linkedin: str = ""
    notes: str = ""


@dataclass
class InterviewEvent:
    id: str
    date: UtcDatetime
    type: InterviewType = InterviewType.OTHER
    duration: int = 60  # minutes
    interviewer: str = ""
    location: str = ""
    notes: str = ""
    completed: bool = False
    feedback: str = ""


@dataclass
class Task:
    id: str
    title: str
    completed: bool = False
    due_date: Optional[UtcDatetime] = None
    priority: Priority = Priority.MEDIUM


@dataclass
class Document:
    id: str
    name: str
    url: str = ""
    type: DocumentType = DocumentType.OTHER
    created_at: UtcDatetime = field(default_factory=now_utc)


@dataclass
class Note:
    id: str
    content: str
    created_at: UtcDatetime = field(default_factory=now_utc)
    type: NoteType = NoteType.GENERAL


# ----------------------------- Application -----------------------------

@dataclass
class Application:
    """
    A job application and everything it owns.

    `notes` is free text; `all_notes` is the structured note list.
    """

    id: str
    position: str
    company: Company
    date_applied: UtcDatetime
    stage: Stage

    job_description: str = ""
    salary: str = ""
    bonus: str = ""
    benefits: List[str] = field(default_factory=list)
    location: str = ""
    remote: bool = False
    notes: str = ""

    contacts: List[Contact] = field(default_factory=list)
    interviews: List[InterviewEvent] = field(default_factory=list)
    tasks: List[Task] = field(default_factory=list)
    documents: List[Document] = field(default_factory=list)
    all_notes: List[Note] = field(default_factory=list)

    is_shortlisted: bool = False
    shortlisted_at: Optional[UtcDatetime] = None

    @property
    def has_salary(self) -> bool:
        return bool(self.salary and self.salary.strip())


# ----------------------------- Top-level records -----------------------------

@dataclass
class Activity:
    """Append-only log entry. Snapshots are copies taken at write time."""
    id: str
    type: ActivityType
    title: str
    timestamp: UtcDatetime
    application: Optional[Application] = None
    company: Optional[Company] = None
    details: str = ""


@dataclass
class UpcomingEvent:
    id: str
    title: str
    company: Company
    date: UtcDatetime
    type: EventType = EventType.INTERVIEW
    time: str = ""
    application: Optional[Application] = None
    details: str = ""
    deadline: Optional[UtcDatetime] = None
    location: str = ""
    duration: Optional[int] = None


@dataclass
class Reminder:
    id: str
    title: str
    due_date: UtcDatetime
    priority: Priority
    status: ReminderStatus
    description: str = ""
    related_application: Optional[Application] = None
    notify_before: Optional[int] = None  # minutes


@dataclass
class MonthlyGoal:
    id: str
    goal: str
    target: int
    current: int = 0
    progress: int = 0
    category: GoalCategory = GoalCategory.APPLICATIONS


@dataclass
class AppStats:
    """Cached dashboard summary (singleton)."""
    total_applications: int = 0
    stage_count: Dict[Stage, int] = field(
        default_factory=lambda: {stage: 0 for stage in Stage.ordered()}
    )
    interviews_scheduled: int = 0
    success_rate: int = 0
    tasks_due: int = 0
    active_applications: int = 0


@dataclass
class SalaryRange:
    min: int = 0
    max: int = 0
    currency: str = "USD"


@dataclass
class UserProfile:
    """The single local user (singleton)."""
    id: str = "user-1"
    name: str = "Job Seeker"
    email: str = "user@example.com"
    avatar: str = "/avatar.jpg"
    job_title: str = "Software Developer"
    years_experience: int = 0
    location: str = ""
    skills: List[str] = field(default_factory=list)
    salary: SalaryRange = field(default_factory=SalaryRange)


@dataclass
class StatusUpdate:
    """Ephemeral UI feedback with a fixed time-to-live. Never persisted."""
    id: str
    message: str
    app_id: Optional[str] = None
    created_at: datetime = field(default_factory=now_utc)
