"""
Analytics result models.

Read-side shapes produced by the funnel aggregator. They are plain
Pydantic models (not documents) and are never persisted.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from hiring_pipeline.utils.constants import ApplicationStatus, HistoryEntryType, JobStatus


class AnalyticsScope(BaseModel):
    """Restricts an aggregation to one employer and/or one job."""

    employer_id: Optional[str] = None
    job_id: Optional[str] = None

    @property
    def is_global(self) -> bool:
        return self.employer_id is None and self.job_id is None


class FunnelCounts(BaseModel):
    """
    Stock counts per pipeline stage.

    ``applied`` is the number of applications in scope; every other field
    counts applications whose *current* status is that stage.
    """

    applied: int = 0
    screened: int = 0
    shortlisted: int = 0
    interview_scheduled: int = 0
    interviewed: int = 0
    hired: int = 0
    rejected: int = 0


class StageDropOff(BaseModel):
    """Conversion between two consecutive funnel stages."""

    from_stage: str
    to_stage: str
    reached_from: int  # Applications that ever reached from_stage (or beyond)
    reached_to: int  # Applications that ever reached to_stage (or beyond)
    drop_off_rate: float = Field(ge=0.0, le=1.0)


class SourceBreakdown(BaseModel):
    """Applications partitioned by source."""

    internal: int = 0
    external: int = 0


class JobStats(BaseModel):
    """One row of the per-job table."""

    job_id: str
    title: str
    status: Optional[JobStatus] = None
    applications: int = 0
    shortlisted: int = 0
    interviewed: int = 0
    hired: int = 0
    rejected: int = 0
    avg_score: Optional[float] = None  # None when no application was scored


class PipelineSummary(BaseModel):
    """Headline numbers for a dashboard."""

    total_jobs: int = 0
    active_jobs: int = 0
    total_applications: int = 0
    hired_count: int = 0
    rejected_count: int = 0
    avg_time_to_hire: Optional[float] = None  # Days
    avg_ats_score: Optional[float] = None
    selection_rate: float = 0.0  # hired_count / total_applications


class AnalyticsReport(BaseModel):
    """Everything a hiring dashboard shows, computed in one pass."""

    scope: AnalyticsScope
    summary: PipelineSummary
    funnel: FunnelCounts
    drop_off: list[StageDropOff] = Field(default_factory=list)
    source_breakdown: SourceBreakdown
    job_stats: list[JobStats] = Field(default_factory=list)
    generated_at: datetime


class ActivityItem(BaseModel):
    """One line of the recent-activity feed."""

    application_id: str
    job_id: str
    entry_type: HistoryEntryType
    message: str
    actor: str
    timestamp: datetime
    status: Optional[ApplicationStatus] = None
