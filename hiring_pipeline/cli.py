"""
Hiring Pipeline Command Line Interface

Provides CLI commands for operating the applicant tracking pipeline:
database setup, analytics reports, bulk status changes, applicant
export and the recent-activity feed.
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="hiring-pipeline",
    help="Applicant Tracking Pipeline CLI",
    add_completion=False,
)
console = Console()


def _require_connection() -> None:
    """Exit with an error unless MongoDB is reachable."""
    from hiring_pipeline.data.database import get_database_manager

    if not get_database_manager().check_sync_connection():
        console.print("[red]Error: Could not connect to MongoDB. Run 'init-db' first.[/red]")
        raise typer.Exit(1)


def _format_rate(value: Optional[float]) -> str:
    return "-" if value is None else f"{value:.1%}"


def _format_number(value: Optional[float]) -> str:
    return "-" if value is None else f"{value:.1f}"


@app.callback()
def main() -> None:
    """Configure logging before any command runs."""
    from hiring_pipeline.utils.logger import setup_logging

    setup_logging()


@app.command()
def version():
    """Show application version."""
    from hiring_pipeline import __app_name__, __version__

    console.print(f"[bold blue]{__app_name__}[/bold blue] version [green]{__version__}[/green]")


@app.command()
def info():
    """Show system information and configuration."""
    from hiring_pipeline.utils.config import get_settings

    settings = get_settings()

    table = Table(title="Hiring Pipeline Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Environment", settings.environment)
    table.add_row("Debug Mode", str(settings.debug))
    table.add_row("Database Host", settings.database.host)
    table.add_row("Database Name", settings.database.name)
    table.add_row("Max Write Attempts", str(settings.pipeline.max_write_attempts))
    table.add_row("Max Bulk Size", str(settings.pipeline.max_bulk_size))
    table.add_row("Log Level", settings.logging.level)

    console.print(table)


@app.command()
def init_db():
    """Initialize the database with required collections and indexes."""
    import asyncio

    from pymongo.errors import PyMongoError

    from hiring_pipeline.data.database import get_database_manager

    console.print("[yellow]Initializing database...[/yellow]")

    db_manager = get_database_manager()

    console.print("  Checking database connection...")
    if not db_manager.check_sync_connection():
        console.print("[red]Error: Could not connect to MongoDB.[/red]")
        console.print("[dim]Make sure MongoDB is running and connection settings are correct.[/dim]")
        raise typer.Exit(1)

    console.print("  [green]✓[/green] Connected to MongoDB")

    console.print("  Creating indexes...")
    try:
        asyncio.run(db_manager.ensure_indexes())
    except PyMongoError as e:
        console.print(f"[red]Error initializing database: {e}[/red]")
        raise typer.Exit(1)
    finally:
        db_manager.close_async()
    console.print("  [green]✓[/green] Indexes created")

    console.print("\n[green]Database initialized successfully![/green]")


@app.command()
def report(
    employer_id: Optional[str] = typer.Option(None, "--employer", "-e", help="Restrict to one employer"),
    job_id: Optional[str] = typer.Option(None, "--job", "-j", help="Restrict to one job"),
):
    """Show funnel, drop-off, sources, per-job stats and summary."""
    from hiring_pipeline.core.pipeline import get_funnel_analytics
    from hiring_pipeline.data.models import AnalyticsScope

    _require_connection()

    result = get_funnel_analytics().build_report(
        AnalyticsScope(employer_id=employer_id, job_id=job_id)
    )

    summary = result.summary
    table = Table(title="Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right", style="green")
    table.add_row("Jobs", f"{summary.total_jobs} ({summary.active_jobs} active)")
    table.add_row("Applications", str(summary.total_applications))
    table.add_row("Hired", str(summary.hired_count))
    table.add_row("Rejected", str(summary.rejected_count))
    table.add_row("Avg. Days to Hire", _format_number(summary.avg_time_to_hire))
    table.add_row("Avg. ATS Score", _format_number(summary.avg_ats_score))
    table.add_row("Selection Rate", _format_rate(summary.selection_rate))
    console.print(table)

    table = Table(title="Funnel (current status)")
    table.add_column("Stage", style="cyan")
    table.add_column("Count", justify="right")
    for stage, count in result.funnel.model_dump().items():
        table.add_row(stage.replace("_", " ").title(), str(count))
    console.print(table)

    table = Table(title="Drop-off")
    table.add_column("From", style="cyan")
    table.add_column("To", style="cyan")
    table.add_column("Reached", justify="right")
    table.add_column("Drop-off", justify="right", style="red")
    for step in result.drop_off:
        table.add_row(
            step.from_stage,
            step.to_stage,
            f"{step.reached_to}/{step.reached_from}",
            _format_rate(step.drop_off_rate),
        )
    console.print(table)

    sources = result.source_breakdown
    console.print(
        f"\n[bold]Sources:[/bold] internal [cyan]{sources.internal}[/cyan], "
        f"external [cyan]{sources.external}[/cyan]\n"
    )

    if result.job_stats:
        table = Table(title="Jobs")
        table.add_column("ID", style="dim", width=24)
        table.add_column("Title", style="cyan")
        table.add_column("Status", justify="center")
        table.add_column("Apps", justify="right")
        table.add_column("Shortlisted", justify="right")
        table.add_column("Interviewed", justify="right")
        table.add_column("Hired", justify="right", style="green")
        table.add_column("Rejected", justify="right", style="red")
        table.add_column("Avg. Score", justify="right")
        for row in result.job_stats:
            table.add_row(
                row.job_id,
                row.title[:40] + "..." if len(row.title) > 40 else row.title,
                row.status.value if row.status else "-",
                str(row.applications),
                str(row.shortlisted),
                str(row.interviewed),
                str(row.hired),
                str(row.rejected),
                _format_number(row.avg_score),
            )
        console.print(table)


@app.command()
def list_applications(
    job_id: str = typer.Argument(..., help="Job ID"),
    source: Optional[str] = typer.Option(None, "--source", help="internal or external"),
    status: Optional[str] = typer.Option(None, "--status", "-s", help="Filter by status"),
    min_score: Optional[int] = typer.Option(None, "--min-score", help="Minimum ATS score"),
    search: Optional[str] = typer.Option(None, "--search", "-q", help="Match name or e-mail"),
    limit: int = typer.Option(20, "--limit", "-l", help="Maximum applications to show"),
):
    """List a job's applications, best ATS score first."""
    from bson import ObjectId

    from hiring_pipeline.data.models import ApplicationQuery
    from hiring_pipeline.data.repositories import get_application_repository
    from hiring_pipeline.utils.constants import ApplicationSource, ApplicationStatus

    if not ObjectId.is_valid(job_id):
        console.print(f"[red]Invalid job ID: {job_id}[/red]")
        raise typer.Exit(1)

    try:
        query = ApplicationQuery(
            source=ApplicationSource[source.upper()] if source else None,
            status=ApplicationStatus[status.upper()] if status else None,
            min_score=min_score,
            search=search,
            limit=limit,
        )
    except KeyError as e:
        console.print(f"[red]Invalid filter value: {e}[/red]")
        raise typer.Exit(1)

    _require_connection()

    repo = get_application_repository()
    applications = repo.find_for_job(ObjectId(job_id), query)
    if not applications:
        console.print("[yellow]No applications found.[/yellow]")
        raise typer.Exit(0)

    table = Table(title=f"Applications ({len(applications)} shown)")
    table.add_column("ID", style="dim", width=24)
    table.add_column("Candidate", style="cyan")
    table.add_column("Source")
    table.add_column("Status", justify="center")
    table.add_column("Score", justify="right")
    table.add_column("Rating", justify="right")
    for application in applications:
        table.add_row(
            str(application.id),
            application.candidate_name or application.candidate_email or "-",
            application.source.value,
            application.status.value,
            "-" if application.score is None else str(application.score),
            "-" if application.latest_rating is None else f"{application.latest_rating}/5",
        )
    console.print(table)

    counts = repo.count_by_status([ObjectId(job_id)])
    console.print("\n[bold]All applications by status:[/bold]")
    for status_value, count in sorted(counts.items()):
        console.print(f"  {status_value}: {count}")


@app.command()
def bulk_status(
    application_ids: list[str] = typer.Argument(..., help="Application IDs"),
    status: str = typer.Option(..., "--status", "-s", help="Target status"),
    actor: str = typer.Option(..., "--actor", "-a", help="Who is making the change"),
    notes: Optional[str] = typer.Option(None, "--notes", "-n", help="Note stored on each STATUS entry"),
):
    """Move many applications to the same status."""
    from hiring_pipeline.core.errors import PipelineError
    from hiring_pipeline.core.pipeline import get_transition_engine
    from hiring_pipeline.utils.constants import ApplicationStatus

    try:
        new_status = ApplicationStatus[status.upper()]
    except KeyError:
        console.print(f"[red]Invalid status: {status}[/red]")
        console.print(f"[dim]Valid statuses: {', '.join(s.value for s in ApplicationStatus)}[/dim]")
        raise typer.Exit(1)

    _require_connection()

    try:
        result = get_transition_engine().bulk_transition(application_ids, new_status, actor, notes)
    except PipelineError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1)

    console.print(
        f"[green]{result.succeeded_count} moved to {new_status.value}[/green], "
        f"[red]{result.failed_count} failed[/red]"
    )

    if result.failed:
        table = Table(title="Failures")
        table.add_column("Application", style="dim", width=24)
        table.add_column("Code", style="red")
        table.add_column("Reason")
        for failure in result.failed:
            table.add_row(failure.application_id, failure.code, failure.message)
        console.print(table)
        raise typer.Exit(1)


@app.command()
def export(
    job_id: str = typer.Argument(..., help="Job ID to export"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="CSV file (defaults to stdout)"),
):
    """Export a job's applicants as CSV."""
    from hiring_pipeline.core.errors import PipelineError
    from hiring_pipeline.core.pipeline import ApplicantExporter

    _require_connection()

    exporter = ApplicantExporter()
    try:
        if output is None:
            typer.echo(exporter.to_csv(job_id), nl=False)
            return
        path = exporter.write(job_id, output)
    except PipelineError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Applicants written to [cyan]{path}[/cyan]")


@app.command()
def activity(
    employer_id: Optional[str] = typer.Option(None, "--employer", "-e", help="Restrict to one employer"),
    limit: Optional[int] = typer.Option(None, "--limit", "-l", help="Maximum entries to show"),
):
    """Show the most recent pipeline activity."""
    from hiring_pipeline.core.pipeline import ActivityFeed
    from hiring_pipeline.data.models import AnalyticsScope

    _require_connection()

    items = ActivityFeed().recent(AnalyticsScope(employer_id=employer_id), limit=limit)
    if not items:
        console.print("[yellow]No activity yet.[/yellow]")
        raise typer.Exit(0)

    table = Table(title="Recent Activity")
    table.add_column("When", style="dim")
    table.add_column("Type", justify="center")
    table.add_column("Activity", style="cyan")
    table.add_column("By")
    for item in items:
        table.add_row(
            item.timestamp.strftime("%Y-%m-%d %H:%M"),
            item.entry_type.value,
            item.message,
            item.actor,
        )
    console.print(table)


if __name__ == "__main__":
    app()
