"""
Applicant tracking pipeline.

Provides the status state machine, the transition engine that owns all
writes, on-demand scoring, funnel analytics, the activity feed and CSV
export.
"""

from .activity import ActivityFeed, describe_entry
from .analytics import FunnelAnalytics, get_funnel_analytics
from .export import ApplicantExporter, applicant_row
from .interfaces import JobDirectory, ScoringProvider
from .scoring import ScoringService
from .state_machine import (
    STATUS_ORDER,
    STATUS_RANK,
    allowed_targets,
    can_transition,
    is_terminal,
    validate_transition,
)
from .transition_engine import TransitionEngine, get_transition_engine

__all__ = [
    # State machine
    "STATUS_ORDER",
    "STATUS_RANK",
    "allowed_targets",
    "can_transition",
    "is_terminal",
    "validate_transition",
    # Collaborators
    "JobDirectory",
    "ScoringProvider",
    # Services
    "TransitionEngine",
    "get_transition_engine",
    "ScoringService",
    "FunnelAnalytics",
    "get_funnel_analytics",
    "ActivityFeed",
    "describe_entry",
    "ApplicantExporter",
    "applicant_row",
]
