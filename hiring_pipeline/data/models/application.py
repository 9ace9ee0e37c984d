"""
Application data models.

One Application document exists per (candidate, job) pair. It carries
the current status as a cached projection of its embedded history log,
which is the source of truth for auditing.
"""

from datetime import datetime
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from hiring_pipeline.utils.constants import (
    HIRED_EQUIVALENT_STATUSES,
    MAX_SCORE,
    MIN_SCORE,
    TERMINAL_STATUSES,
    ApplicationSource,
    ApplicationStatus,
)

from .base import BaseDocument, EmbeddedModel, PyObjectId
from .history import HistoryEntry, NoteEntry, RatingEntry, StatusEntry


# =============================================================================
# Candidate Identity
# =============================================================================


class InternalCandidate(EmbeddedModel):
    """A registered platform user applying through their account."""

    kind: Literal["internal"] = "internal"
    user_id: str = Field(min_length=1)
    display_name: Optional[str] = None  # Snapshot taken at apply time


class ExternalCandidate(EmbeddedModel):
    """A public applicant identified only by the contact details they typed in."""

    kind: Literal["external"] = "external"
    name: str = Field(min_length=1)
    email: EmailStr
    phone: Optional[str] = None

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.lower()


CandidateRef = Annotated[
    Union[InternalCandidate, ExternalCandidate],
    Field(discriminator="kind"),
]

_SOURCE_FOR_KIND = {
    "internal": ApplicationSource.INTERNAL,
    "external": ApplicationSource.EXTERNAL,
}


# =============================================================================
# Application Document
# =============================================================================


class Application(BaseDocument):
    """
    A candidate's submission for one job.

    ``status`` and ``score`` are the only mutable scalars; ``history`` only
    ever grows. ``version`` is bumped on every write and used as the
    optimistic-concurrency token by the transition engine.
    """

    # References
    job_id: PyObjectId

    # Identity
    candidate: CandidateRef
    source: ApplicationSource

    # Pipeline state
    status: ApplicationStatus = ApplicationStatus.APPLIED
    score: Optional[int] = Field(default=None, ge=MIN_SCORE, le=MAX_SCORE)
    history: list[HistoryEntry] = Field(default_factory=list)
    version: int = 0

    # Submitted material (opaque references owned by other services)
    resume_url: Optional[str] = None
    cover_letter: Optional[str] = None

    @model_validator(mode="after")
    def source_matches_candidate(self) -> "Application":
        """The source enum and the identity shape must agree."""
        expected = _SOURCE_FOR_KIND[self.candidate.kind]
        if self.source != expected:
            raise ValueError(
                f"source {self.source.value} does not match {self.candidate.kind} candidate"
            )
        return self

    # -------------------------------------------------------------------------
    # Derived views over the history log
    # -------------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def is_hired(self) -> bool:
        """Hired-equivalent: SELECTED, APPOINTED or HIRED."""
        return self.status in HIRED_EQUIVALENT_STATUSES

    @property
    def status_entries(self) -> list[StatusEntry]:
        return [e for e in self.history if isinstance(e, StatusEntry)]

    @property
    def notes(self) -> list[NoteEntry]:
        return [e for e in self.history if isinstance(e, NoteEntry)]

    @property
    def ratings(self) -> list[RatingEntry]:
        return [e for e in self.history if isinstance(e, RatingEntry)]

    @property
    def latest_note(self) -> Optional[NoteEntry]:
        notes = self.notes
        return notes[-1] if notes else None

    @property
    def latest_rating(self) -> Optional[int]:
        """Last write wins; ratings are an evolving assessment, not votes."""
        ratings = self.ratings
        return ratings[-1].rating if ratings else None

    @property
    def last_timestamp(self) -> Optional[datetime]:
        return self.history[-1].timestamp if self.history else None

    @property
    def reached_statuses(self) -> set[ApplicationStatus]:
        """Every status this application has ever held."""
        return {e.status for e in self.status_entries}

    @property
    def hired_at(self) -> Optional[datetime]:
        """Timestamp of the first move into a hired-equivalent status."""
        for entry in self.status_entries:
            if entry.status in HIRED_EQUIVALENT_STATUSES:
                return entry.timestamp
        return None

    @property
    def candidate_name(self) -> Optional[str]:
        if isinstance(self.candidate, ExternalCandidate):
            return self.candidate.name
        return self.candidate.display_name

    @property
    def candidate_email(self) -> Optional[str]:
        if isinstance(self.candidate, ExternalCandidate):
            return self.candidate.email
        return None

    @property
    def candidate_phone(self) -> Optional[str]:
        if isinstance(self.candidate, ExternalCandidate):
            return self.candidate.phone
        return None

    class Settings:
        """MongoDB collection settings."""

        name = "applications"
        indexes = [
            "job_id",
            "status",
            "source",
            "score",
            "candidate.user_id",
            "candidate.email",
            "created_at",
        ]


# =============================================================================
# API Schemas
# =============================================================================


class ApplicationCreate(BaseModel):
    """Schema for submitting a new application."""

    job_id: str
    candidate: CandidateRef
    resume_url: Optional[str] = None
    cover_letter: Optional[str] = None

    @property
    def source(self) -> ApplicationSource:
        return _SOURCE_FOR_KIND[self.candidate.kind]


class ApplicationQuery(BaseModel):
    """Filters for listing the applications of one job."""

    source: Optional[ApplicationSource] = None
    status: Optional[ApplicationStatus] = None
    min_score: Optional[int] = Field(default=None, ge=MIN_SCORE, le=MAX_SCORE)
    search: Optional[str] = None  # Case-insensitive match on name or e-mail
    limit: int = Field(default=100, ge=1, le=1000)
    offset: int = Field(default=0, ge=0)


class BulkFailure(BaseModel):
    """Why one id in a bulk operation was not applied."""

    application_id: str
    code: str
    message: str


class BulkTransitionResult(BaseModel):
    """Per-id outcome of a bulk status change."""

    status: ApplicationStatus
    succeeded: list[str] = Field(default_factory=list)
    failed: list[BulkFailure] = Field(default_factory=list)

    @property
    def succeeded_count(self) -> int:
        return len(self.succeeded)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "succeeded_count": self.succeeded_count,
            "failed_count": self.failed_count,
            "succeeded": list(self.succeeded),
            "failed": [f.model_dump() for f in self.failed],
        }
