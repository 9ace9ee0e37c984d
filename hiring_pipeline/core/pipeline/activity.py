"""
Recent-activity feed.

Flattens the history logs of every application in scope and renders the
newest entries as one-line messages for a recruiter dashboard.
"""

from typing import Optional

from hiring_pipeline.core.pipeline.interfaces import JobDirectory
from hiring_pipeline.data.models import (
    ActivityItem,
    AnalyticsScope,
    Application,
    HistoryEntry,
    NoteEntry,
    StatusEntry,
)
from hiring_pipeline.data.repositories.application_repository import (
    ApplicationRepository,
    get_application_repository,
)
from hiring_pipeline.data.repositories.job_repository import get_job_repository
from hiring_pipeline.utils.config import PipelineSettings, get_settings
from hiring_pipeline.utils.constants import MAX_RATING, HistoryEntryType

UNKNOWN_CANDIDATE = "Unknown"
UNKNOWN_JOB = "Unknown Job"


def describe_entry(entry: HistoryEntry, candidate: str, job_title: str) -> str:
    """Human-readable sentence for one history entry."""
    if isinstance(entry, StatusEntry):
        if entry.previous_status is None:
            return f"{candidate} applied for {job_title}"
        return f"{candidate} moved to {entry.status.value} for {job_title}"
    if isinstance(entry, NoteEntry):
        return f"Note added for {candidate} on {job_title}"
    return f"{candidate} rated {entry.rating}/{MAX_RATING} for {job_title}"


class ActivityFeed:
    """Builds the activity feed for an employer, a job, or everything."""

    def __init__(
        self,
        applications: Optional[ApplicationRepository] = None,
        jobs: Optional[JobDirectory] = None,
        settings: Optional[PipelineSettings] = None,
    ):
        self.applications = applications or get_application_repository()
        self.jobs = jobs or get_job_repository()
        self.settings = settings or get_settings().pipeline

    def recent(
        self,
        scope: Optional[AnalyticsScope] = None,
        limit: Optional[int] = None,
    ) -> list[ActivityItem]:
        """Newest history entries first, at most ``limit`` (default from settings)."""
        scope = scope or AnalyticsScope()
        limit = self.settings.activity_feed_limit if limit is None else limit
        if limit <= 0:
            return []

        jobs = self.jobs.list_jobs(scope)
        titles = {str(job.id): job.title for job in jobs}
        if scope.is_global:
            applications = self.applications.find_for_jobs(None)
        else:
            applications = self.applications.find_for_jobs([job.id for job in jobs])

        # Timestamp ties break on application id, then on log position
        entries: list[tuple[Application, int, HistoryEntry]] = [
            (application, position, entry)
            for application in applications
            for position, entry in enumerate(application.history)
        ]
        entries.sort(
            key=lambda item: (item[2].timestamp, str(item[0].id), item[1]), reverse=True
        )

        return [self._to_item(app, entry, titles) for app, _, entry in entries[:limit]]

    @staticmethod
    def _to_item(
        application: Application,
        entry: HistoryEntry,
        titles: dict[str, str],
    ) -> ActivityItem:
        job_id = str(application.job_id)
        candidate = application.candidate_name or UNKNOWN_CANDIDATE
        message = describe_entry(entry, candidate, titles.get(job_id, UNKNOWN_JOB))
        return ActivityItem(
            application_id=str(application.id),
            job_id=job_id,
            entry_type=HistoryEntryType(entry.type),
            message=message,
            actor=entry.actor,
            timestamp=entry.timestamp,
            status=entry.status if isinstance(entry, StatusEntry) else None,
        )
