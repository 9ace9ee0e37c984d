"""
Status transition engine.

Owns every write to an application: creation, status changes (single and
bulk), recruiter notes, ratings and score persistence. Each operation is
one versioned single-document update, so a status change and its STATUS
history entry land together or not at all.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Iterable, Optional

from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from hiring_pipeline.core.errors import (
    NotFoundError,
    PipelineError,
    StorageError,
    ValidationError,
    WriteConflictError,
)
from hiring_pipeline.core.pipeline.interfaces import JobDirectory
from hiring_pipeline.core.pipeline.state_machine import validate_transition
from hiring_pipeline.data.models import (
    Application,
    ApplicationCreate,
    BulkFailure,
    BulkTransitionResult,
    HistoryEntry,
    NoteEntry,
    RatingEntry,
    StatusEntry,
    utcnow,
)
from hiring_pipeline.data.repositories.application_repository import (
    ApplicationRepository,
    get_application_repository,
)
from hiring_pipeline.data.repositories.job_repository import get_job_repository
from hiring_pipeline.utils.config import PipelineSettings, get_settings
from hiring_pipeline.utils.constants import (
    MAX_RATING,
    MAX_SCORE,
    MIN_RATING,
    MIN_SCORE,
    SYSTEM_ACTOR,
    ApplicationStatus,
    AuditAction,
)
from hiring_pipeline.utils.logger import LoggerMixin, audit_log


@dataclass
class _Write:
    """Field updates and history entries for one versioned update."""

    set_fields: dict[str, Any] = field(default_factory=dict)
    entries: list[HistoryEntry] = field(default_factory=list)


def _next_timestamp(application: Application) -> datetime:
    """Append time that keeps the log non-decreasing under clock skew."""
    now = utcnow()
    last = application.last_timestamp
    return max(now, last) if last is not None else now


class TransitionEngine(LoggerMixin):
    """
    Validates and applies writes to applications.

    Writes use optimistic concurrency: the update is filtered on the
    version that was read, and on a mismatch the application is re-read
    and the operation re-validated against its new state. After
    ``max_write_attempts`` lost races a WriteConflictError is raised.
    """

    def __init__(
        self,
        applications: Optional[ApplicationRepository] = None,
        jobs: Optional[JobDirectory] = None,
        settings: Optional[PipelineSettings] = None,
    ):
        """
        Initialize the engine.

        Args:
            applications: Application repository (defaults to the global one)
            jobs: Job directory used to validate new applications
            settings: Pipeline settings (defaults to the global settings)
        """
        self.applications = applications or get_application_repository()
        self.jobs = jobs or get_job_repository()
        self.settings = settings or get_settings().pipeline

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_application(self, application_id: str | ObjectId) -> Application:
        """Fetch an application without side effects."""
        application = self.applications.get_by_id(application_id)
        if application is None:
            raise NotFoundError(f"Application not found: {application_id}")
        return application

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    def apply(self, data: ApplicationCreate) -> Application:
        """
        Create an application in APPLIED with its initial STATUS entry.

        Raises:
            NotFoundError: The job does not exist
            ValidationError: The candidate already applied to this job
        """
        job = self.jobs.get_job(data.job_id)
        if job is None:
            raise NotFoundError(f"Job not found: {data.job_id}")

        if self.applications.find_duplicate(job.id, data.candidate) is not None:
            raise ValidationError("Candidate has already applied for this job")

        now = utcnow()
        application = Application(
            job_id=job.id,
            candidate=data.candidate,
            source=data.source,
            status=ApplicationStatus.APPLIED,
            history=[
                StatusEntry(
                    status=ApplicationStatus.APPLIED,
                    actor=SYSTEM_ACTOR,
                    timestamp=now,
                )
            ],
            resume_url=data.resume_url,
            cover_letter=data.cover_letter,
            created_at=now,
            updated_at=now,
        )

        try:
            application = self.applications.create(application)
        except StorageError as e:
            if isinstance(e.original_error, DuplicateKeyError):
                raise ValidationError(
                    "Candidate has already applied for this job", original_error=e
                ) from e
            raise

        self.logger.info(f"Application {application.id} created for job {job.id}")
        audit_log(
            AuditAction.APPLICATION_CREATED,
            {
                "application_id": str(application.id),
                "job_id": str(job.id),
                "source": application.source.value,
            },
        )
        return application

    # -------------------------------------------------------------------------
    # Status transitions
    # -------------------------------------------------------------------------

    def transition(
        self,
        application_id: str | ObjectId,
        new_status: ApplicationStatus,
        actor: str,
        notes: Optional[str] = None,
    ) -> Application:
        """
        Move an application to ``new_status``.

        Moving to the current status is a no-op. Moves out of HIRED or
        REJECTED, and moves backwards through the pipeline, raise
        InvalidTransitionError.
        """

        def plan(application: Application) -> Optional[_Write]:
            if application.status == new_status:
                return None
            validate_transition(application.status, new_status)
            entry = StatusEntry(
                status=new_status,
                previous_status=application.status,
                notes=notes,
                actor=actor,
                timestamp=_next_timestamp(application),
            )
            return _Write(set_fields={"status": new_status}, entries=[entry])

        application, write, previous = self._mutate(application_id, plan)
        if write is not None:
            self.logger.info(
                f"Application {application.id}: {previous.value} -> {new_status.value}"
            )
            audit_log(
                AuditAction.STATUS_CHANGED,
                {
                    "application_id": str(application.id),
                    "from": previous.value,
                    "to": new_status.value,
                    "actor": actor,
                },
            )
        return application

    def mark_viewed(self, application_id: str | ObjectId, actor: str) -> Application:
        """Move APPLIED to VIEWED the first time a recruiter opens it; otherwise no-op."""

        def plan(application: Application) -> Optional[_Write]:
            if application.status != ApplicationStatus.APPLIED:
                return None
            entry = StatusEntry(
                status=ApplicationStatus.VIEWED,
                previous_status=ApplicationStatus.APPLIED,
                actor=actor,
                timestamp=_next_timestamp(application),
            )
            return _Write(set_fields={"status": ApplicationStatus.VIEWED}, entries=[entry])

        application, write, _ = self._mutate(application_id, plan)
        if write is not None:
            self.logger.debug(f"Application {application.id} viewed by {actor}")
        return application

    def bulk_transition(
        self,
        application_ids: Iterable[str],
        new_status: ApplicationStatus,
        actor: str,
        notes: Optional[str] = None,
    ) -> BulkTransitionResult:
        """
        Apply the same transition to many applications independently.

        Duplicate ids are collapsed (first occurrence wins the ordering).
        Per-id pipeline errors are reported as failures, never raised.

        Raises:
            ValidationError: More ids than ``max_bulk_size``
        """
        unique_ids = list(dict.fromkeys(str(i) for i in application_ids))
        if len(unique_ids) > self.settings.max_bulk_size:
            raise ValidationError(
                f"Bulk update limited to {self.settings.max_bulk_size} applications, "
                f"got {len(unique_ids)}"
            )

        result = BulkTransitionResult(status=new_status)
        for application_id in unique_ids:
            try:
                self.transition(application_id, new_status, actor, notes)
            except PipelineError as e:
                result.failed.append(
                    BulkFailure(
                        application_id=application_id,
                        code=e.code.value,
                        message=e.message,
                    )
                )
            else:
                result.succeeded.append(application_id)

        self.logger.info(
            f"Bulk move to {new_status.value}: "
            f"{result.succeeded_count} succeeded, {result.failed_count} failed"
        )
        audit_log(
            AuditAction.BULK_STATUS_CHANGED,
            {
                "status": new_status.value,
                "actor": actor,
                "succeeded": result.succeeded_count,
                "failed": result.failed_count,
            },
            audit_type="BULK",
        )
        return result

    # -------------------------------------------------------------------------
    # Annotations
    # -------------------------------------------------------------------------

    def add_note(
        self,
        application_id: str | ObjectId,
        content: str,
        tags: Optional[list[str]],
        actor: str,
        rating: Optional[int] = None,
    ) -> NoteEntry:
        """
        Append a NOTE entry, plus a RATING entry when ``rating`` is given.

        Both entries are written in the same update. Notes are accepted
        in every status, terminal ones included.
        """
        if not content or not content.strip():
            raise ValidationError("Note content must not be blank")
        if rating is not None:
            self._check_rating(rating)

        def plan(application: Application) -> _Write:
            timestamp = _next_timestamp(application)
            entries: list[HistoryEntry] = [
                NoteEntry(content=content, tags=tags or [], actor=actor, timestamp=timestamp)
            ]
            if rating is not None:
                entries.append(
                    RatingEntry(rating=rating, tags=tags or [], actor=actor, timestamp=timestamp)
                )
            return _Write(entries=entries)

        application, write, _ = self._mutate(application_id, plan)
        note = write.entries[0]
        audit_log(
            AuditAction.NOTE_ADDED,
            {
                "application_id": str(application.id),
                "actor": actor,
                "tags": note.tags,
                "rating": rating,
            },
            audit_type="ANNOTATION",
        )
        return note

    def set_rating(
        self,
        application_id: str | ObjectId,
        rating: int,
        actor: str,
        tags: Optional[list[str]] = None,
    ) -> RatingEntry:
        """Append a RATING entry; the latest one is the current rating."""
        self._check_rating(rating)

        def plan(application: Application) -> _Write:
            entry = RatingEntry(
                rating=rating,
                tags=tags or [],
                actor=actor,
                timestamp=_next_timestamp(application),
            )
            return _Write(entries=[entry])

        application, write, _ = self._mutate(application_id, plan)
        audit_log(
            AuditAction.RATING_ADDED,
            {"application_id": str(application.id), "actor": actor, "rating": rating},
            audit_type="ANNOTATION",
        )
        return write.entries[0]

    def record_score(self, application_id: str | ObjectId, score: int) -> Application:
        """Persist an ATS score. Status and history are left alone."""
        if isinstance(score, bool) or not isinstance(score, int):
            raise ValidationError(f"Score must be an integer, got {score!r}")
        if not MIN_SCORE <= score <= MAX_SCORE:
            raise ValidationError(
                f"Score must be between {MIN_SCORE} and {MAX_SCORE}, got {score}"
            )

        application, _, _ = self._mutate(
            application_id, lambda _app: _Write(set_fields={"score": score})
        )
        audit_log(
            AuditAction.SCORE_RECORDED,
            {"application_id": str(application.id), "score": score},
            audit_type="SCORE",
        )
        return application

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _check_rating(rating: int) -> None:
        if isinstance(rating, bool) or not isinstance(rating, int):
            raise ValidationError(f"Rating must be an integer, got {rating!r}")
        if not MIN_RATING <= rating <= MAX_RATING:
            raise ValidationError(
                f"Rating must be between {MIN_RATING} and {MAX_RATING}, got {rating}"
            )

    def _mutate(
        self,
        application_id: str | ObjectId,
        plan: Callable[[Application], Optional[_Write]],
    ) -> tuple[Application, Optional[_Write], ApplicationStatus]:
        """
        Run ``plan`` against the current application and write its result.

        ``plan`` is re-run against fresh state after every lost race, so
        validation always sees the version being written over. Returns
        the application as stored after the write, the write itself
        (None for a no-op) and the status held before it.
        """
        for attempt in range(1, self.settings.max_write_attempts + 1):
            application = self.get_application(application_id)
            write = plan(application)
            if write is None:
                return application, None, application.status

            if self.applications.apply_update(
                application.id,
                application.version,
                set_fields=write.set_fields,
                append=write.entries,
            ):
                return self.get_application(application.id), write, application.status

            self.logger.warning(
                f"Write conflict on application {application.id} "
                f"(attempt {attempt}/{self.settings.max_write_attempts})"
            )

        raise WriteConflictError(
            f"Application {application_id} changed concurrently "
            f"{self.settings.max_write_attempts} times; giving up"
        )


# Singleton instance
_transition_engine: Optional[TransitionEngine] = None


def get_transition_engine() -> TransitionEngine:
    """Get the transition engine singleton instance."""
    global _transition_engine
    if _transition_engine is None:
        _transition_engine = TransitionEngine()
    return _transition_engine
