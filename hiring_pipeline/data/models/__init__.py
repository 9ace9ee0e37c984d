"""
Pydantic data models and schemas for the hiring pipeline.

This module provides all data models used throughout the application,
including database documents, embedded models, and API schemas.
"""

# Base models
from .base import BaseDocument, EmbeddedModel, PyObjectId, TimestampMixin, utcnow

# History models
from .history import (
    HistoryEntry,
    NoteEntry,
    RatingEntry,
    StatusEntry,
    history_entry_adapter,
    normalize_tags,
)

# Application models
from .application import (
    Application,
    ApplicationCreate,
    ApplicationQuery,
    BulkFailure,
    BulkTransitionResult,
    CandidateRef,
    ExternalCandidate,
    InternalCandidate,
)

# Job models
from .job import Job

# Analytics models
from .analytics import (
    ActivityItem,
    AnalyticsReport,
    AnalyticsScope,
    FunnelCounts,
    JobStats,
    PipelineSummary,
    SourceBreakdown,
    StageDropOff,
)

__all__ = [
    # Base
    "BaseDocument",
    "EmbeddedModel",
    "PyObjectId",
    "TimestampMixin",
    "utcnow",
    # History
    "HistoryEntry",
    "NoteEntry",
    "RatingEntry",
    "StatusEntry",
    "history_entry_adapter",
    "normalize_tags",
    # Application
    "Application",
    "ApplicationCreate",
    "ApplicationQuery",
    "BulkFailure",
    "BulkTransitionResult",
    "CandidateRef",
    "ExternalCandidate",
    "InternalCandidate",
    # Job
    "Job",
    # Analytics
    "ActivityItem",
    "AnalyticsReport",
    "AnalyticsScope",
    "FunnelCounts",
    "JobStats",
    "PipelineSummary",
    "SourceBreakdown",
    "StageDropOff",
]
