"""
Tests for hiring_pipeline.core.pipeline.transition_engine.
"""

from datetime import timedelta

import pytest
from bson import ObjectId

from hiring_pipeline.core.errors import (
    InvalidTransitionError,
    NotFoundError,
    StorageError,
    ValidationError,
    WriteConflictError,
)
from hiring_pipeline.core.pipeline import TransitionEngine
from hiring_pipeline.data.models import (
    ApplicationCreate,
    ExternalCandidate,
    InternalCandidate,
    NoteEntry,
    RatingEntry,
    StatusEntry,
    utcnow,
)
from hiring_pipeline.data.repositories import ApplicationRepository
from hiring_pipeline.utils.constants import (
    SYSTEM_ACTOR,
    ApplicationSource,
    ApplicationStatus as S,
)

ACTOR = "recruiter-7"


# ═══════════════════════════════════════════════════════════════════════════
#  apply / get_application
# ═══════════════════════════════════════════════════════════════════════════


class TestApply:
    def test_external_application_starts_applied(self, engine, job):
        app = engine.apply(
            ApplicationCreate(
                job_id=str(job.id),
                candidate=ExternalCandidate(name="Asha Rao", email="Asha@Example.com"),
            )
        )
        assert app.id is not None
        assert app.status == S.APPLIED
        assert app.source == ApplicationSource.EXTERNAL
        assert app.candidate.email == "asha@example.com"
        assert app.version == 0
        assert app.score is None

    def test_initial_status_entry_written_by_system(self, engine, job):
        app = engine.apply(
            ApplicationCreate(
                job_id=str(job.id), candidate=InternalCandidate(user_id="user-1")
            )
        )
        stored = engine.get_application(app.id)
        assert len(stored.history) == 1
        entry = stored.history[0]
        assert isinstance(entry, StatusEntry)
        assert entry.status == S.APPLIED
        assert entry.actor == SYSTEM_ACTOR
        assert entry.previous_status is None
        assert stored.source == ApplicationSource.INTERNAL

    def test_unknown_job(self, engine):
        with pytest.raises(NotFoundError):
            engine.apply(
                ApplicationCreate(
                    job_id=str(ObjectId()), candidate=InternalCandidate(user_id="u")
                )
            )

    def test_malformed_job_id(self, engine):
        with pytest.raises(NotFoundError):
            engine.apply(
                ApplicationCreate(job_id="nope", candidate=InternalCandidate(user_id="u"))
            )

    def test_duplicate_external_email_is_case_insensitive(self, engine, job, make_application):
        make_application(email="dup@example.com")
        with pytest.raises(ValidationError, match="already applied"):
            engine.apply(
                ApplicationCreate(
                    job_id=str(job.id),
                    candidate=ExternalCandidate(name="Someone", email="DUP@example.com"),
                )
            )

    def test_duplicate_internal_user(self, engine, job, make_application):
        make_application(user_id="user-42")
        with pytest.raises(ValidationError):
            engine.apply(
                ApplicationCreate(
                    job_id=str(job.id), candidate=InternalCandidate(user_id="user-42")
                )
            )

    def test_same_candidate_may_apply_to_another_job(self, engine, make_job, make_application):
        make_application(user_id="user-42")
        other = make_job(title="Data Engineer")
        app = engine.apply(
            ApplicationCreate(job_id=str(other.id), candidate=InternalCandidate(user_id="user-42"))
        )
        assert app.job_id == other.id


class TestGetApplication:
    def test_unknown_id(self, engine):
        with pytest.raises(NotFoundError):
            engine.get_application(ObjectId())

    def test_malformed_id(self, engine):
        with pytest.raises(NotFoundError):
            engine.get_application("not-an-id")

    def test_read_does_not_mark_viewed(self, engine, make_application):
        app = make_application()
        assert engine.get_application(str(app.id)).status == S.APPLIED
        assert engine.get_application(app.id).version == 0


# ═══════════════════════════════════════════════════════════════════════════
#  transition
# ═══════════════════════════════════════════════════════════════════════════


class TestTransition:
    def test_forward_jump(self, engine, make_application):
        app = make_application()
        updated = engine.transition(app.id, S.SHORTLISTED, ACTOR, notes="strong CV")
        assert updated.status == S.SHORTLISTED
        assert updated.version == 1

        entry = updated.history[-1]
        assert isinstance(entry, StatusEntry)
        assert entry.status == S.SHORTLISTED
        assert entry.previous_status == S.APPLIED
        assert entry.notes == "strong CV"
        assert entry.actor == ACTOR

    def test_accepts_string_id(self, engine, make_application):
        app = make_application()
        assert engine.transition(str(app.id), S.SCREENED, ACTOR).status == S.SCREENED

    def test_same_status_is_noop(self, engine, make_application):
        app = make_application(status=S.SCREENED)
        before = engine.get_application(app.id)
        after = engine.transition(app.id, S.SCREENED, ACTOR)
        assert after.status == S.SCREENED
        assert len(after.history) == len(before.history)
        assert after.version == before.version

    def test_backward_move_refused(self, engine, make_application):
        app = make_application(status=S.SHORTLISTED)
        with pytest.raises(InvalidTransitionError):
            engine.transition(app.id, S.SCREENED, ACTOR)
        stored = engine.get_application(app.id)
        assert stored.status == S.SHORTLISTED
        assert len(stored.history) == 2

    @pytest.mark.parametrize("terminal", [S.HIRED, S.REJECTED])
    def test_terminal_states_are_never_left(self, engine, make_application, terminal):
        app = make_application(status=terminal)
        for target in (S.APPLIED, S.SHORTLISTED, S.HIRED, S.REJECTED):
            if target == terminal:
                continue
            with pytest.raises(InvalidTransitionError):
                engine.transition(app.id, target, ACTOR)
        assert engine.get_application(app.id).status == terminal

    def test_reject_then_shortlist_fails(self, engine, make_application):
        app = make_application()
        engine.transition(app.id, S.SCREENED, ACTOR)
        engine.transition(app.id, S.REJECTED, ACTOR)
        with pytest.raises(InvalidTransitionError):
            engine.transition(app.id, S.SHORTLISTED, ACTOR)

        stored = engine.get_application(app.id)
        assert stored.status == S.REJECTED
        assert len(stored.history) == 3

    def test_hired_equivalents_advance(self, engine, make_application):
        app = make_application(status=S.SELECTED)
        engine.transition(app.id, S.APPOINTED, ACTOR)
        final = engine.transition(app.id, S.HIRED, ACTOR)
        assert final.status == S.HIRED
        assert [e.status for e in final.status_entries] == [
            S.APPLIED,
            S.SELECTED,
            S.APPOINTED,
            S.HIRED,
        ]

    def test_status_entries_count_successful_transitions(self, engine, make_application):
        app = make_application()
        attempts = [
            S.VIEWED,
            S.VIEWED,  # no-op
            S.SCREENED,
            S.APPLIED,  # refused
            S.INTERVIEWED,
            S.REJECTED,
            S.HIRED,  # refused
        ]
        successes = 0
        for target in attempts:
            current = engine.get_application(app.id).status
            try:
                engine.transition(app.id, target, ACTOR)
            except InvalidTransitionError:
                continue
            if target != current:
                successes += 1

        stored = engine.get_application(app.id)
        assert successes == 4
        assert len(stored.status_entries) == successes + 1

    def test_unknown_application(self, engine):
        with pytest.raises(NotFoundError):
            engine.transition(ObjectId(), S.SCREENED, ACTOR)

    def test_timestamps_never_go_backwards(self, engine, application_repo, make_application):
        app = make_application()
        future = utcnow() + timedelta(hours=1)
        application_repo._get_collection().update_one(
            {"_id": app.id}, {"$set": {"history.0.timestamp": future}}
        )

        stored_future = engine.get_application(app.id).history[0].timestamp

        updated = engine.transition(app.id, S.SCREENED, ACTOR)
        stamps = [e.timestamp for e in updated.history]
        assert stamps == sorted(stamps)
        assert updated.history[-1].timestamp >= stored_future


# ═══════════════════════════════════════════════════════════════════════════
#  mark_viewed
# ═══════════════════════════════════════════════════════════════════════════


class TestMarkViewed:
    def test_applied_becomes_viewed_once(self, engine, make_application):
        app = make_application()
        first = engine.mark_viewed(app.id, ACTOR)
        second = engine.mark_viewed(app.id, "recruiter-8")

        assert first.status == S.VIEWED
        assert second.status == S.VIEWED
        assert len(second.status_entries) == 2
        assert second.history[-1].actor == ACTOR

    def test_noop_past_applied(self, engine, make_application):
        app = make_application(status=S.SHORTLISTED)
        viewed = engine.mark_viewed(app.id, ACTOR)
        assert viewed.status == S.SHORTLISTED
        assert len(viewed.history) == 2

    def test_noop_on_rejected(self, engine, make_application):
        app = make_application(status=S.REJECTED)
        assert engine.mark_viewed(app.id, ACTOR).status == S.REJECTED


# ═══════════════════════════════════════════════════════════════════════════
#  add_note / set_rating / record_score
# ═══════════════════════════════════════════════════════════════════════════


class TestAddNote:
    def test_appends_note(self, engine, make_application):
        app = make_application()
        note = engine.add_note(app.id, "Great portfolio", [" python", "django", "python"], ACTOR)

        assert isinstance(note, NoteEntry)
        assert note.tags == ["django", "python"]
        stored = engine.get_application(app.id)
        assert stored.latest_note.content == "Great portfolio"
        assert stored.latest_note.tags == ["django", "python"]
        assert stored.status == S.APPLIED

    def test_note_with_rating_is_one_write(self, engine, make_application):
        app = make_application()
        engine.add_note(app.id, "Solid", None, ACTOR, rating=4)

        stored = engine.get_application(app.id)
        assert stored.version == 1
        note, rating = stored.history[-2:]
        assert isinstance(note, NoteEntry)
        assert isinstance(rating, RatingEntry)
        assert rating.rating == 4
        assert note.timestamp == rating.timestamp

    def test_returned_note_matches_stored(self, engine, make_application):
        app = make_application()
        note = engine.add_note(app.id, "Strong", ["b", "a", "a"], ACTOR, rating=4)

        stored = engine.get_application(app.id)
        assert stored.latest_note == note
        assert stored.history[-2] == note

    @pytest.mark.parametrize("content", ["", "   ", "\n\t"])
    def test_blank_note_rejected(self, engine, make_application, content):
        app = make_application()
        with pytest.raises(ValidationError):
            engine.add_note(app.id, content, [], ACTOR)
        assert len(engine.get_application(app.id).history) == 1

    def test_invalid_rating_rejects_whole_note(self, engine, make_application):
        app = make_application()
        with pytest.raises(ValidationError):
            engine.add_note(app.id, "ok", [], ACTOR, rating=6)
        assert engine.get_application(app.id).notes == []

    def test_notes_allowed_on_terminal(self, engine, make_application):
        app = make_application(status=S.HIRED)
        engine.add_note(app.id, "Start date agreed", ["onboarding"], ACTOR)
        assert engine.get_application(app.id).latest_note.content == "Start date agreed"

    def test_unknown_application(self, engine):
        with pytest.raises(NotFoundError):
            engine.add_note(ObjectId(), "hello", [], ACTOR)


class TestSetRating:
    def test_last_write_wins(self, engine, make_application):
        app = make_application()
        engine.set_rating(app.id, 4, ACTOR)
        engine.set_rating(app.id, 2, ACTOR, tags=["culture"])

        stored = engine.get_application(app.id)
        assert stored.latest_rating == 2
        assert len(stored.ratings) == 2
        assert stored.ratings[-1].tags == ["culture"]

    @pytest.mark.parametrize("rating", [0, 6, -1, 100])
    def test_out_of_range(self, engine, make_application, rating):
        app = make_application()
        with pytest.raises(ValidationError):
            engine.set_rating(app.id, rating, ACTOR)
        assert engine.get_application(app.id).ratings == []

    def test_ratings_allowed_on_rejected(self, engine, make_application):
        app = make_application(status=S.REJECTED)
        entry = engine.set_rating(app.id, 1, ACTOR)
        assert entry.rating == 1

    def test_returned_entry_matches_stored(self, engine, make_application):
        app = make_application()
        entry = engine.set_rating(app.id, 3, ACTOR, tags=["culture"])
        assert engine.get_application(app.id).history[-1] == entry


class TestRecordScore:
    def test_persists_score_only(self, engine, make_application):
        app = make_application(status=S.SCREENED)
        scored = engine.record_score(app.id, 87)

        assert scored.score == 87
        assert scored.status == S.SCREENED
        assert len(scored.history) == 2

    def test_overwrite(self, engine, make_application):
        app = make_application()
        engine.record_score(app.id, 40)
        assert engine.record_score(app.id, 0).score == 0

    @pytest.mark.parametrize("score", [-1, 101, True, 55.5])
    def test_invalid_scores(self, engine, make_application, score):
        app = make_application()
        with pytest.raises(ValidationError):
            engine.record_score(app.id, score)
        assert engine.get_application(app.id).score is None

    def test_allowed_on_terminal(self, engine, make_application):
        app = make_application(status=S.REJECTED)
        assert engine.record_score(app.id, 12).score == 12


# ═══════════════════════════════════════════════════════════════════════════
#  Optimistic concurrency
# ═══════════════════════════════════════════════════════════════════════════


class RacingRepository(ApplicationRepository):
    """Runs a competing write just before the first versioned update."""

    def __init__(self, database, competing):
        super().__init__(database=database)
        self.competing = competing
        self.raced = False
        self.attempts = 0

    def apply_update(self, *args, **kwargs):
        self.attempts += 1
        if not self.raced:
            self.raced = True
            self.competing()
        return super().apply_update(*args, **kwargs)


class TestConcurrency:
    def _racing_engine(self, mongo_db, job_repo, pipeline_settings, competing):
        repo = RacingRepository(mongo_db, competing)
        return TransitionEngine(applications=repo, jobs=job_repo, settings=pipeline_settings), repo

    def test_revalidates_after_losing_race(
        self, engine, mongo_db, job_repo, pipeline_settings, make_application
    ):
        app = make_application()
        racing, repo = self._racing_engine(
            mongo_db,
            job_repo,
            pipeline_settings,
            lambda: engine.transition(app.id, S.REJECTED, "recruiter-2"),
        )

        with pytest.raises(InvalidTransitionError):
            racing.transition(app.id, S.SHORTLISTED, ACTOR)

        stored = engine.get_application(app.id)
        assert stored.status == S.REJECTED
        assert [e.status for e in stored.status_entries] == [S.APPLIED, S.REJECTED]
        assert repo.attempts == 1

    def test_both_forward_moves_are_kept(
        self, engine, mongo_db, job_repo, pipeline_settings, make_application
    ):
        app = make_application()
        racing, repo = self._racing_engine(
            mongo_db,
            job_repo,
            pipeline_settings,
            lambda: engine.transition(app.id, S.SCREENED, "recruiter-2"),
        )

        final = racing.transition(app.id, S.INTERVIEWED, ACTOR)

        assert final.status == S.INTERVIEWED
        assert [e.status for e in final.status_entries] == [
            S.APPLIED,
            S.SCREENED,
            S.INTERVIEWED,
        ]
        assert final.history[-1].previous_status == S.SCREENED
        assert final.version == 2
        assert repo.attempts == 2

    def test_gives_up_after_max_attempts(self, engine, application_repo, make_application, monkeypatch):
        app = make_application()
        calls = []

        def always_stale(*args, **kwargs):
            calls.append(args)
            return False

        monkeypatch.setattr(application_repo, "apply_update", always_stale)

        with pytest.raises(WriteConflictError) as exc_info:
            engine.transition(app.id, S.SCREENED, ACTOR)

        assert isinstance(exc_info.value, StorageError)
        assert exc_info.value.retryable is True
        assert len(calls) == engine.settings.max_write_attempts
