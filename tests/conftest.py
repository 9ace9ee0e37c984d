"""
Shared test fixtures for the hiring pipeline test suite.

Sets environment variables before any package imports to prevent config
failures, then provides an in-memory mongomock database, repositories and
services wired to it, and factory fixtures for jobs and applications.
"""

import os

# === Set environment BEFORE any hiring_pipeline imports ===
os.environ.setdefault("APP_ENVIRONMENT", "testing")
os.environ.setdefault("DB_NAME", "hiring_pipeline_test")
os.environ.setdefault("LOG_FILE_OUTPUT", "false")

from itertools import count
from typing import Optional

import mongomock
import pytest

from hiring_pipeline.core.pipeline import (
    ActivityFeed,
    ApplicantExporter,
    FunnelAnalytics,
    TransitionEngine,
)
from hiring_pipeline.data.models import (
    Application,
    ApplicationCreate,
    ExternalCandidate,
    InternalCandidate,
    Job,
)
from hiring_pipeline.data.repositories import ApplicationRepository, JobRepository
from hiring_pipeline.utils.config import PipelineSettings
from hiring_pipeline.utils.constants import ApplicationStatus, JobStatus

RECRUITER = "recruiter-1"


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


@pytest.fixture
def mongo_db():
    """Fresh in-memory database per test."""
    client = mongomock.MongoClient()
    yield client["hiring_pipeline_test"]
    client.close()


@pytest.fixture
def application_repo(mongo_db):
    return ApplicationRepository(database=mongo_db)


@pytest.fixture
def job_repo(mongo_db):
    return JobRepository(database=mongo_db)


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


@pytest.fixture
def pipeline_settings():
    return PipelineSettings(
        max_write_attempts=3,
        max_bulk_size=50,
        activity_feed_limit=15,
        job_stats_limit=20,
    )


@pytest.fixture
def engine(application_repo, job_repo, pipeline_settings):
    return TransitionEngine(
        applications=application_repo, jobs=job_repo, settings=pipeline_settings
    )


@pytest.fixture
def analytics(application_repo, job_repo, pipeline_settings):
    return FunnelAnalytics(
        applications=application_repo, jobs=job_repo, settings=pipeline_settings
    )


@pytest.fixture
def activity_feed(application_repo, job_repo, pipeline_settings):
    return ActivityFeed(
        applications=application_repo, jobs=job_repo, settings=pipeline_settings
    )


@pytest.fixture
def exporter(application_repo, job_repo):
    return ApplicantExporter(applications=application_repo, jobs=job_repo)


# ---------------------------------------------------------------------------
# Factory fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_job(job_repo):
    """Factory that stores a job and returns it."""

    def _factory(
        title: str = "Backend Engineer",
        employer_id: str = "employer-1",
        status: JobStatus = JobStatus.OPEN,
    ) -> Job:
        return job_repo.create(Job(title=title, employer_id=employer_id, status=status))

    return _factory


@pytest.fixture
def job(make_job):
    return make_job()


@pytest.fixture
def make_application(engine, job):
    """
    Factory that applies through the engine and optionally advances the
    application to ``status`` in a single transition.
    """
    sequence = count(1)

    def _factory(
        status: Optional[ApplicationStatus] = None,
        for_job: Optional[Job] = None,
        name: Optional[str] = None,
        email: Optional[str] = None,
        user_id: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> Application:
        n = next(sequence)
        if user_id is not None:
            candidate = InternalCandidate(user_id=user_id, display_name=name)
        else:
            candidate = ExternalCandidate(
                name=name or f"Candidate {n}",
                email=email or f"candidate{n}@example.com",
                phone=phone,
            )
        target_job = for_job or job
        application = engine.apply(
            ApplicationCreate(job_id=str(target_job.id), candidate=candidate)
        )
        if status is not None and status != ApplicationStatus.APPLIED:
            application = engine.transition(application.id, status, RECRUITER)
        return application

    return _factory
