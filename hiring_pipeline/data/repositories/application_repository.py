"""
Application repository.

Provides data access for application documents: inserts, versioned
single-document updates that append to the embedded history log, job
listings with recruiter filters, and the raw scans the analytics
aggregator runs over.
"""

import re
from typing import Any, Optional, Sequence

from bson import ObjectId
from pymongo import DESCENDING
from pymongo.results import UpdateResult

from hiring_pipeline.data.models import (
    Application,
    ApplicationQuery,
    CandidateRef,
    ExternalCandidate,
    HistoryEntry,
)
from hiring_pipeline.data.models.base import to_bson_safe, utcnow
from hiring_pipeline.utils.logger import get_logger

from .base import BaseRepository

logger = get_logger(__name__)


class ApplicationRepository(BaseRepository[Application]):
    """Repository for application document operations."""

    @property
    def collection_name(self) -> str:
        return Application.Settings.name

    @property
    def model_class(self) -> type[Application]:
        return Application

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def apply_update(
        self,
        application_id: ObjectId,
        expected_version: int,
        set_fields: Optional[dict[str, Any]] = None,
        append: Sequence[HistoryEntry] = (),
    ) -> bool:
        """
        Atomically set fields and append history entries on one document.

        The write only lands if the stored ``version`` still equals
        ``expected_version``; it bumps the version by one. Returns False
        when another writer got there first (or the document is gone).
        """
        update: dict[str, Any] = {
            "$set": {**to_bson_safe(set_fields or {}), "updated_at": utcnow()},
            "$inc": {"version": 1},
        }
        if append:
            update["$push"] = {
                "history": {"$each": [entry.model_dump_mongo() for entry in append]}
            }

        with self._storage_errors("update"):
            result: UpdateResult = self._get_collection().update_one(
                {"_id": application_id, "version": expected_version},
                update,
            )

        if result.matched_count == 0:
            logger.debug(
                f"Version {expected_version} of application {application_id} is stale"
            )
            return False
        return True

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def find_duplicate(
        self, job_id: ObjectId, candidate: CandidateRef
    ) -> Optional[Application]:
        """Existing application by the same person for the same job, if any."""
        query: dict[str, Any] = {"job_id": job_id, "candidate.kind": candidate.kind}
        if isinstance(candidate, ExternalCandidate):
            query["candidate.email"] = candidate.email.lower()
        else:
            query["candidate.user_id"] = candidate.user_id
        return self.find_one(query)

    def find_for_job(
        self, job_id: ObjectId, filters: Optional[ApplicationQuery] = None
    ) -> list[Application]:
        """List a job's applications, best ATS score first."""
        filters = filters or ApplicationQuery()
        query: dict[str, Any] = {"job_id": job_id}

        if filters.source is not None:
            query["source"] = filters.source.value
        if filters.status is not None:
            query["status"] = filters.status.value
        if filters.min_score is not None:
            query["score"] = {"$gte": filters.min_score}
        if filters.search and filters.search.strip():
            pattern = re.escape(filters.search.strip())
            query["$or"] = [
                {"candidate.name": {"$regex": pattern, "$options": "i"}},
                {"candidate.display_name": {"$regex": pattern, "$options": "i"}},
                {"candidate.email": {"$regex": pattern, "$options": "i"}},
            ]

        return self.find(
            query,
            skip=filters.offset,
            limit=filters.limit,
            sort=[("score", DESCENDING), ("created_at", DESCENDING)],
        )

    def find_for_jobs(self, job_ids: Optional[Sequence[ObjectId]]) -> list[Application]:
        """All applications for the given jobs; every application when ``job_ids`` is None."""
        query: dict[str, Any] = {} if job_ids is None else {"job_id": {"$in": list(job_ids)}}
        return self.find(query)

    def count_by_status(self, job_ids: Optional[Sequence[ObjectId]]) -> dict[str, int]:
        """Current-status histogram for the given jobs (or everything)."""
        pipeline: list[dict[str, Any]] = []
        if job_ids is not None:
            pipeline.append({"$match": {"job_id": {"$in": list(job_ids)}}})
        pipeline.append({"$group": {"_id": "$status", "count": {"$sum": 1}}})
        return {r["_id"]: r["count"] for r in self.aggregate(pipeline)}


# Singleton instance
_application_repository: Optional[ApplicationRepository] = None


def get_application_repository() -> ApplicationRepository:
    """Get the application repository singleton instance."""
    global _application_repository
    if _application_repository is None:
        _application_repository = ApplicationRepository()
    return _application_repository
