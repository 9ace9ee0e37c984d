"""
Application-wide constants for the hiring pipeline.

This module contains all constant values used throughout the application.
Modify these values to customize behavior without changing code logic.
"""

from enum import Enum
from typing import Final


# =============================================================================
# Application Constants
# =============================================================================

APP_NAME: Final[str] = "hiring-pipeline"
APP_DISPLAY_NAME: Final[str] = "Applicant Tracking Pipeline"
VERSION: Final[str] = "0.1.0"

# Actor recorded on entries written by the platform itself
SYSTEM_ACTOR: Final[str] = "SYSTEM"


# =============================================================================
# Scoring / Rating Bounds
# =============================================================================

MIN_SCORE: Final[int] = 0
MAX_SCORE: Final[int] = 100

MIN_RATING: Final[int] = 1
MAX_RATING: Final[int] = 5


# =============================================================================
# Enums
# =============================================================================


class ApplicationStatus(str, Enum):
    """Status of a job application in the pipeline."""

    APPLIED = "APPLIED"
    VIEWED = "VIEWED"
    SCREENED = "SCREENED"
    SHORTLISTED = "SHORTLISTED"
    INTERVIEW_SCHEDULED = "INTERVIEW_SCHEDULED"
    INTERVIEWED = "INTERVIEWED"
    SELECTED = "SELECTED"
    APPOINTED = "APPOINTED"
    HIRED = "HIRED"
    REJECTED = "REJECTED"


class ApplicationSource(str, Enum):
    """Where an application came from."""

    INTERNAL = "INTERNAL"  # Registered platform user
    EXTERNAL = "EXTERNAL"  # Public apply form


class HistoryEntryType(str, Enum):
    """Kinds of entries in an application's history log."""

    STATUS = "STATUS"
    NOTE = "NOTE"
    RATING = "RATING"


class JobStatus(str, Enum):
    """Status of a job posting (owned by the job service)."""

    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    OPEN = "OPEN"
    PAUSED = "PAUSED"
    CLOSED = "CLOSED"
    FILLED = "FILLED"


class AuditAction(str, Enum):
    """Pipeline events written to the audit log sink."""

    APPLICATION_CREATED = "application_created"
    STATUS_CHANGED = "status_changed"
    BULK_STATUS_CHANGED = "bulk_status_changed"
    NOTE_ADDED = "note_added"
    RATING_ADDED = "rating_added"
    SCORE_RECORDED = "score_recorded"


# Categories the audit sink groups entries under
AUDIT_TYPES: Final[frozenset[str]] = frozenset({"DECISION", "BULK", "ANNOTATION", "SCORE"})


# =============================================================================
# Pipeline Groupings
# =============================================================================

TERMINAL_STATUSES: Final[frozenset[ApplicationStatus]] = frozenset(
    {ApplicationStatus.HIRED, ApplicationStatus.REJECTED}
)

# Analytics treats all of these as a hire
HIRED_EQUIVALENT_STATUSES: Final[frozenset[ApplicationStatus]] = frozenset(
    {ApplicationStatus.SELECTED, ApplicationStatus.APPOINTED, ApplicationStatus.HIRED}
)

ACTIVE_JOB_STATUSES: Final[frozenset[JobStatus]] = frozenset(
    {JobStatus.PUBLISHED, JobStatus.OPEN}
)

# Funnel stages in pipeline order, keyed by the FunnelCounts field they feed.
# VIEWED is folded into "applied": it only records that a recruiter opened it.
FUNNEL_STAGES: Final[tuple[tuple[str, frozenset[ApplicationStatus]], ...]] = (
    ("screened", frozenset({ApplicationStatus.SCREENED})),
    ("shortlisted", frozenset({ApplicationStatus.SHORTLISTED})),
    ("interview_scheduled", frozenset({ApplicationStatus.INTERVIEW_SCHEDULED})),
    ("interviewed", frozenset({ApplicationStatus.INTERVIEWED})),
    ("hired", HIRED_EQUIVALENT_STATUSES),
)


# =============================================================================
# Export
# =============================================================================

CSV_EXPORT_HEADERS: Final[tuple[str, ...]] = (
    "Name",
    "Email",
    "Phone",
    "Source",
    "Status",
    "ATS Score",
    "Date Applied",
)
