"""
Applicant CSV export.

Produces one row per application of a job, newest first, with every
field quoted (RFC 4180).
"""

import csv
from io import StringIO
from pathlib import Path
from typing import Optional

from bson import ObjectId

from hiring_pipeline.core.errors import NotFoundError
from hiring_pipeline.core.pipeline.interfaces import JobDirectory
from hiring_pipeline.data.models import Application
from hiring_pipeline.data.repositories.application_repository import (
    ApplicationRepository,
    get_application_repository,
)
from hiring_pipeline.data.repositories.job_repository import get_job_repository
from hiring_pipeline.utils.constants import CSV_EXPORT_HEADERS
from hiring_pipeline.utils.logger import get_logger

logger = get_logger(__name__)

MISSING = "N/A"


def applicant_row(application: Application) -> list[str]:
    """CSV cells for one application, in header order."""
    return [
        application.candidate_name or MISSING,
        application.candidate_email or MISSING,
        application.candidate_phone or MISSING,
        application.source.value,
        application.status.value,
        str(application.score) if application.score is not None else MISSING,
        application.created_at.date().isoformat(),
    ]


class ApplicantExporter:
    """Renders a job's applicants as CSV."""

    def __init__(
        self,
        applications: Optional[ApplicationRepository] = None,
        jobs: Optional[JobDirectory] = None,
    ):
        self.applications = applications or get_application_repository()
        self.jobs = jobs or get_job_repository()

    def to_csv(self, job_id: str | ObjectId) -> str:
        """
        Render the applicants of ``job_id``.

        Raises:
            NotFoundError: The job does not exist
        """
        job = self.jobs.get_job(job_id)
        if job is None:
            raise NotFoundError(f"Job not found: {job_id}")

        applications = self.applications.find_for_jobs([job.id])

        buffer = StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL)
        writer.writerow(CSV_EXPORT_HEADERS)
        for application in applications:
            writer.writerow(applicant_row(application))

        logger.info(f"Exported {len(applications)} applicants for job {job.id}")
        return buffer.getvalue()

    def write(self, job_id: str | ObjectId, path: Path) -> Path:
        """Write the CSV for ``job_id`` to ``path`` and return it."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_csv(job_id), encoding="utf-8", newline="")
        return path
