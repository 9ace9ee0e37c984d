"""
On-demand ATS scoring.

Glue between a ScoringProvider and the transition engine: fetch the
application and its job, ask the provider for a score, persist it. The
provider never touches status.
"""

from typing import Optional

from bson import ObjectId

from hiring_pipeline.core.errors import (
    NotFoundError,
    PipelineError,
    ScoringUnavailableError,
)
from hiring_pipeline.core.pipeline.interfaces import JobDirectory, ScoringProvider
from hiring_pipeline.core.pipeline.transition_engine import (
    TransitionEngine,
    get_transition_engine,
)
from hiring_pipeline.data.models import Application
from hiring_pipeline.data.repositories.job_repository import get_job_repository
from hiring_pipeline.utils.constants import MAX_SCORE, MIN_SCORE
from hiring_pipeline.utils.logger import get_logger

logger = get_logger(__name__)


class ScoringService:
    """Recomputes and stores the ATS score of a single application."""

    def __init__(
        self,
        provider: ScoringProvider,
        engine: Optional[TransitionEngine] = None,
        jobs: Optional[JobDirectory] = None,
    ):
        self.provider = provider
        self.engine = engine or get_transition_engine()
        self.jobs = jobs or get_job_repository()

    def rescore(self, application_id: str | ObjectId) -> Application:
        """
        Score an application against its job and persist the result.

        Args:
            application_id: Application to score

        Returns:
            The application with its new score

        Raises:
            NotFoundError: Unknown application, or its job no longer exists
            ScoringUnavailableError: The provider failed or returned an
                out-of-range value; the stored application is unchanged
        """
        application = self.engine.get_application(application_id)
        job = self.jobs.get_job(application.job_id)
        if job is None:
            raise NotFoundError(f"Job not found: {application.job_id}")

        try:
            score = self.provider.score(application, job)
        except PipelineError:
            raise
        except Exception as e:
            logger.error(f"Scoring provider failed for application {application.id}: {e}")
            raise ScoringUnavailableError(
                f"Scoring provider failed: {e}", original_error=e
            ) from e

        if isinstance(score, bool) or not isinstance(score, int):
            raise ScoringUnavailableError(
                f"Scoring provider returned a non-integer score: {score!r}"
            )
        if not MIN_SCORE <= score <= MAX_SCORE:
            raise ScoringUnavailableError(
                f"Scoring provider returned {score}, outside {MIN_SCORE}-{MAX_SCORE}"
            )

        logger.info(f"Application {application.id} scored {score} against job {job.id}")
        return self.engine.record_score(application.id, score)
