"""
Job repository.

Read access to job postings for scoping, reporting and scoring. Jobs are
owned elsewhere; ``create`` exists for seeding and tests.
"""

from typing import Any, Optional

from bson import ObjectId
from pymongo import DESCENDING

from hiring_pipeline.data.models import AnalyticsScope, Job
from hiring_pipeline.utils.logger import get_logger

from .base import BaseRepository

logger = get_logger(__name__)


class JobRepository(BaseRepository[Job]):
    """Repository for job posting document operations."""

    @property
    def collection_name(self) -> str:
        return Job.Settings.name

    @property
    def model_class(self) -> type[Job]:
        return Job

    # -------------------------------------------------------------------------
    # Job directory
    # -------------------------------------------------------------------------

    def get_job(self, job_id: str | ObjectId) -> Optional[Job]:
        """Look up a single job; None when unknown."""
        return self.get_by_id(job_id)

    def list_jobs(self, scope: Optional[AnalyticsScope] = None) -> list[Job]:
        """List the jobs an analytics scope covers; every job for an empty scope."""
        scope = scope or AnalyticsScope()
        query: dict[str, Any] = {}
        if scope.employer_id is not None:
            query["employer_id"] = scope.employer_id
        if scope.job_id is not None:
            object_id = self._to_object_id(scope.job_id)
            if object_id is None:
                return []
            query["_id"] = object_id
        return self.find(query, sort=[("created_at", DESCENDING)])


# Singleton instance
_job_repository: Optional[JobRepository] = None


def get_job_repository() -> JobRepository:
    """Get the job repository singleton instance."""
    global _job_repository
    if _job_repository is None:
        _job_repository = JobRepository()
    return _job_repository
