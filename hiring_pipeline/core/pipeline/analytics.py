"""
Funnel analytics aggregator.

Read-only views over the applications of an employer, a job, or the
whole platform: funnel stock counts, stage-to-stage drop-off, source
split, per-job table and headline summary. Nothing here writes, so it
can run alongside the transition engine without coordination; results
are accurate as of the scan.
"""

from collections import defaultdict
from statistics import mean
from typing import Iterable, Optional

from hiring_pipeline.core.pipeline.interfaces import JobDirectory
from hiring_pipeline.core.pipeline.state_machine import STATUS_RANK
from hiring_pipeline.data.models import (
    AnalyticsReport,
    AnalyticsScope,
    Application,
    FunnelCounts,
    Job,
    JobStats,
    PipelineSummary,
    SourceBreakdown,
    StageDropOff,
    utcnow,
)
from hiring_pipeline.data.repositories.application_repository import (
    ApplicationRepository,
    get_application_repository,
)
from hiring_pipeline.data.repositories.job_repository import get_job_repository
from hiring_pipeline.utils.config import PipelineSettings, get_settings
from hiring_pipeline.utils.constants import (
    FUNNEL_STAGES,
    HIRED_EQUIVALENT_STATUSES,
    ApplicationSource,
    ApplicationStatus,
)
from hiring_pipeline.utils.logger import get_logger

logger = get_logger(__name__)

SECONDS_PER_DAY = 86400


def _furthest_rank(application: Application) -> int:
    """Highest pipeline rank this application's STATUS history ever reached."""
    ranks = [
        STATUS_RANK[status]
        for status in application.reached_statuses | {application.status}
        if status in STATUS_RANK
    ]
    return max(ranks, default=0)


def _stage_floor(statuses: Iterable[ApplicationStatus]) -> int:
    """Lowest rank belonging to a funnel stage."""
    return min(STATUS_RANK[s] for s in statuses)


class FunnelAnalytics:
    """
    Aggregates pipeline metrics for a scope.

    Every ``compute_*`` method scans the scope independently;
    ``build_report`` scans once and derives everything from that.
    """

    def __init__(
        self,
        applications: Optional[ApplicationRepository] = None,
        jobs: Optional[JobDirectory] = None,
        settings: Optional[PipelineSettings] = None,
    ):
        self.applications = applications or get_application_repository()
        self.jobs = jobs or get_job_repository()
        self.settings = settings or get_settings().pipeline

    # -------------------------------------------------------------------------
    # Scope resolution
    # -------------------------------------------------------------------------

    def _load(self, scope: Optional[AnalyticsScope]) -> tuple[list[Job], list[Application]]:
        """Jobs and applications covered by ``scope``."""
        scope = scope or AnalyticsScope()
        jobs = self.jobs.list_jobs(scope)
        if scope.is_global:
            applications = self.applications.find_for_jobs(None)
        else:
            applications = self.applications.find_for_jobs([job.id for job in jobs])
        logger.debug(
            f"Analytics scope {scope.model_dump(exclude_none=True)}: "
            f"{len(jobs)} jobs, {len(applications)} applications"
        )
        return jobs, applications

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def compute_funnel(self, scope: Optional[AnalyticsScope] = None) -> FunnelCounts:
        _, applications = self._load(scope)
        return self._funnel(applications)

    def compute_drop_off(self, scope: Optional[AnalyticsScope] = None) -> list[StageDropOff]:
        _, applications = self._load(scope)
        return self._drop_off(applications)

    def compute_source_breakdown(
        self, scope: Optional[AnalyticsScope] = None
    ) -> SourceBreakdown:
        _, applications = self._load(scope)
        return self._source_breakdown(applications)

    def compute_job_stats(self, scope: Optional[AnalyticsScope] = None) -> list[JobStats]:
        jobs, applications = self._load(scope)
        return self._job_stats(jobs, applications)

    def compute_summary(self, scope: Optional[AnalyticsScope] = None) -> PipelineSummary:
        jobs, applications = self._load(scope)
        return self._summary(jobs, applications)

    def build_report(self, scope: Optional[AnalyticsScope] = None) -> AnalyticsReport:
        """Every metric for ``scope`` from a single scan."""
        scope = scope or AnalyticsScope()
        jobs, applications = self._load(scope)
        return AnalyticsReport(
            scope=scope,
            summary=self._summary(jobs, applications),
            funnel=self._funnel(applications),
            drop_off=self._drop_off(applications),
            source_breakdown=self._source_breakdown(applications),
            job_stats=self._job_stats(jobs, applications),
            generated_at=utcnow(),
        )

    # -------------------------------------------------------------------------
    # Aggregations
    # -------------------------------------------------------------------------

    @staticmethod
    def _funnel(applications: list[Application]) -> FunnelCounts:
        """Stock counts by current status; ``applied`` is everything in scope."""
        counts = {
            name: sum(1 for a in applications if a.status in statuses)
            for name, statuses in FUNNEL_STAGES
        }
        return FunnelCounts(
            applied=len(applications),
            rejected=sum(1 for a in applications if a.status == ApplicationStatus.REJECTED),
            **counts,
        )

    @staticmethod
    def _drop_off(applications: list[Application]) -> list[StageDropOff]:
        """
        Share of applications lost between consecutive stages.

        Uses cumulative counts: an application counts toward a stage if
        its history ever reached that stage or any later one, so a
        rejection after shortlisting still counts as shortlisted and the
        counts never increase along the funnel.
        """
        furthest = [_furthest_rank(a) for a in applications]
        stages = [("applied", 0)] + [
            (name, _stage_floor(statuses)) for name, statuses in FUNNEL_STAGES
        ]
        reached = [sum(1 for rank in furthest if rank >= floor) for _, floor in stages]

        drop_off = []
        for i in range(len(stages) - 1):
            reached_from, reached_to = reached[i], reached[i + 1]
            rate = 1 - reached_to / reached_from if reached_from else 0.0
            drop_off.append(
                StageDropOff(
                    from_stage=stages[i][0],
                    to_stage=stages[i + 1][0],
                    reached_from=reached_from,
                    reached_to=reached_to,
                    drop_off_rate=round(rate, 4),
                )
            )
        return drop_off

    @staticmethod
    def _source_breakdown(applications: list[Application]) -> SourceBreakdown:
        return SourceBreakdown(
            internal=sum(1 for a in applications if a.source == ApplicationSource.INTERNAL),
            external=sum(1 for a in applications if a.source == ApplicationSource.EXTERNAL),
        )

    def _job_stats(self, jobs: list[Job], applications: list[Application]) -> list[JobStats]:
        """One row per job, newest job first, capped at ``job_stats_limit`` rows."""
        by_job: dict[str, list[Application]] = defaultdict(list)
        for application in applications:
            by_job[str(application.job_id)].append(application)

        rows = []
        for job in jobs[: self.settings.job_stats_limit]:
            job_apps = by_job.get(str(job.id), [])
            funnel = self._funnel(job_apps)
            rows.append(
                JobStats(
                    job_id=str(job.id),
                    title=job.title,
                    status=job.status,
                    applications=funnel.applied,
                    shortlisted=funnel.shortlisted,
                    interviewed=funnel.interviewed,
                    hired=funnel.hired,
                    rejected=funnel.rejected,
                    avg_score=self._avg_score(job_apps),
                )
            )
        return rows

    def _summary(self, jobs: list[Job], applications: list[Application]) -> PipelineSummary:
        funnel = self._funnel(applications)
        total = funnel.applied
        return PipelineSummary(
            total_jobs=len(jobs),
            active_jobs=sum(1 for job in jobs if job.is_active),
            total_applications=total,
            hired_count=funnel.hired,
            rejected_count=funnel.rejected,
            avg_time_to_hire=self._avg_time_to_hire(applications),
            avg_ats_score=self._avg_score(applications),
            selection_rate=round(funnel.hired / total, 4) if total else 0.0,
        )

    @staticmethod
    def _avg_score(applications: list[Application]) -> Optional[float]:
        """Mean of recorded scores; None when nothing has been scored."""
        scores = [a.score for a in applications if a.score is not None]
        return round(mean(scores), 2) if scores else None

    @staticmethod
    def _avg_time_to_hire(applications: list[Application]) -> Optional[float]:
        """Mean days from application to first hired-equivalent status."""
        durations = []
        for application in applications:
            if application.status not in HIRED_EQUIVALENT_STATUSES:
                continue
            hired_at = application.hired_at
            if hired_at is None:
                continue
            elapsed = (hired_at - application.created_at).total_seconds()
            durations.append(max(elapsed, 0.0) / SECONDS_PER_DAY)
        return round(mean(durations), 2) if durations else None


# Singleton instance
_funnel_analytics: Optional[FunnelAnalytics] = None


def get_funnel_analytics() -> FunnelAnalytics:
    """Get the funnel analytics singleton instance."""
    global _funnel_analytics
    if _funnel_analytics is None:
        _funnel_analytics = FunnelAnalytics()
    return _funnel_analytics
