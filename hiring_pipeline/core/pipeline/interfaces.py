"""
Collaborator protocols.

The pipeline reaches job postings and the ATS scorer only through these
interfaces; anything structurally matching them can be plugged in.
"""

from typing import Optional, Protocol

from bson import ObjectId

from hiring_pipeline.data.models import AnalyticsScope, Application, Job


class JobDirectory(Protocol):
    """Read-only access to job postings."""

    def get_job(self, job_id: str | ObjectId) -> Optional[Job]:
        """Return the job, or None when it does not exist."""
        ...

    def list_jobs(self, scope: Optional[AnalyticsScope] = None) -> list[Job]:
        """Return every job the scope covers."""
        ...


class ScoringProvider(Protocol):
    """Computes an ATS score for an application against its job."""

    def score(self, application: Application, job: Job) -> int:
        """Return a score in 0-100 or raise ScoringUnavailableError."""
        ...
