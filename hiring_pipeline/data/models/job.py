"""
Job posting view used by the pipeline.

Job postings are owned by the job service; the pipeline only reads the
few fields it needs for scoping, reporting and scoring.
"""

from typing import Optional

from pydantic import Field

from hiring_pipeline.utils.constants import ACTIVE_JOB_STATUSES, JobStatus

from .base import BaseDocument


class Job(BaseDocument):
    """Read-only projection of a job posting."""

    title: str = Field(..., min_length=1, max_length=200)
    employer_id: str
    status: JobStatus = JobStatus.DRAFT
    description: Optional[str] = None
    skills: list[str] = Field(default_factory=list)

    @property
    def is_active(self) -> bool:
        """Accepting applications (published or open)."""
        return self.status in ACTIVE_JOB_STATUSES

    class Settings:
        """MongoDB collection settings."""

        name = "jobs"
        indexes = ["employer_id", "status", "created_at"]
