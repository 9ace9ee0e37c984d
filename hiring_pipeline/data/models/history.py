"""
History log data models.

An application's history is an append-only list of heterogeneous
entries (status changes, recruiter notes, star ratings) embedded in the
application document. Entries are frozen; the "current" note or rating
is whichever entry of that type was appended last.
"""

from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import Field, TypeAdapter, field_validator

from hiring_pipeline.utils.constants import (
    MAX_RATING,
    MIN_RATING,
    ApplicationStatus,
)

from .base import EmbeddedModel, utcnow


def normalize_tags(tags: Optional[list[str]]) -> list[str]:
    """Tags are an unordered set: strip, drop blanks, de-duplicate, sort."""
    if not tags:
        return []
    return sorted({t.strip() for t in tags if t and t.strip()})


class _Entry(EmbeddedModel):
    """Fields shared by every history entry."""

    timestamp: datetime = Field(default_factory=utcnow)
    actor: str


class StatusEntry(_Entry):
    """A status change (including the implicit one written on apply)."""

    type: Literal["STATUS"] = "STATUS"
    status: ApplicationStatus
    previous_status: Optional[ApplicationStatus] = None
    notes: Optional[str] = None


class NoteEntry(_Entry):
    """A free-text recruiter note."""

    type: Literal["NOTE"] = "NOTE"
    content: str = Field(min_length=1)
    tags: list[str] = Field(default_factory=list)

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("note content must not be blank")
        return v

    @field_validator("tags", mode="before")
    @classmethod
    def tags_as_set(cls, v: Optional[list[str]]) -> list[str]:
        return normalize_tags(v)


class RatingEntry(_Entry):
    """A 1-5 star assessment."""

    type: Literal["RATING"] = "RATING"
    rating: int = Field(ge=MIN_RATING, le=MAX_RATING)
    tags: list[str] = Field(default_factory=list)

    @field_validator("tags", mode="before")
    @classmethod
    def tags_as_set(cls, v: Optional[list[str]]) -> list[str]:
        return normalize_tags(v)


HistoryEntry = Annotated[
    Union[StatusEntry, NoteEntry, RatingEntry],
    Field(discriminator="type"),
]

history_entry_adapter: TypeAdapter[HistoryEntry] = TypeAdapter(HistoryEntry)
