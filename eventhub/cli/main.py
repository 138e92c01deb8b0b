"""Command line interface for the event ingestion pipeline.

Usage:
    eventhub run
    eventhub run --source synthetic --dry-run
    eventhub sweep --days 1
    eventhub sources
    eventhub schedule --cron "0 6 * * *"
"""

import asyncio
from datetime import date, timedelta
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from eventhub.adapters import DEFAULT_ORDER, create_adapter, get_adapter, list_adapters
from eventhub.config import get_settings
from eventhub.core.base_adapter import BrowserAdapter
from eventhub.core.exceptions import ConfigurationError, StorageError
from eventhub.core.pipeline import RunSummary, ScrapePipeline
from eventhub.core.supabase_client import get_event_store
from eventhub.logging import setup_logging

app = typer.Typer(
    name="eventhub",
    help="Event listings scraper and ingestion pipeline",
    add_completion=False,
)
console = Console()


@app.callback()
def configure(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Override LOG_LEVEL (DEBUG, INFO, WARNING, ERROR)",
    ),
):
    """Configure logging before any command runs."""
    settings = get_settings()
    setup_logging(
        level=log_level or settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
    )


@app.command()
def run(
    source: Optional[list[str]] = typer.Option(
        None,
        "--source", "-s",
        help="Run only this adapter (repeatable). Defaults to every adapter.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Write to an in-memory store instead of Supabase",
    ),
):
    """Run the adapters, upsert their records and sweep stale ones.

    Exits with code 1 when no adapter yielded records or the store is unavailable.

    Examples:
        eventhub run
        eventhub run --source synthetic --dry-run
    """
    settings = get_settings()
    source_ids = source or list(DEFAULT_ORDER)

    try:
        adapters = [create_adapter(source_id, settings=settings) for source_id in source_ids]
        store = get_event_store(settings, dry_run=dry_run or settings.dry_run)
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    console.print()
    console.print("[bold blue]EVENT INGESTION RUN[/bold blue]")
    console.print(f"Adapters: {', '.join(source_ids)}")
    console.print(f"Dry run: {dry_run or settings.dry_run}")
    console.print()

    pipeline = ScrapePipeline(adapters, store, settings=settings)
    try:
        summary = asyncio.run(pipeline.run_all())
    except StorageError as e:
        console.print(f"[red]Store unavailable:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    print_summary(summary)

    if not summary.success:
        raise typer.Exit(1)


def print_summary(summary: RunSummary) -> None:
    """Print final summary table."""
    console.print()
    console.print("[bold blue]RUN SUMMARY[/bold blue]")
    console.print()

    table = Table(show_header=True, header_style="bold")
    table.add_column("Adapter")
    table.add_column("Raw", justify="right")
    table.add_column("Persisted", justify="right")
    table.add_column("Dropped", justify="right")
    table.add_column("Failed", justify="right")
    table.add_column("Status")

    for r in summary.adapter_results:
        if r.successful:
            status = "[yellow]FALLBACK[/yellow]" if r.used_fallback else "[green]OK[/green]"
        else:
            status = "[red]ERR[/red]"

        table.add_row(
            r.source_id,
            str(r.raw_count),
            str(r.persisted),
            str(r.dropped),
            str(r.failed),
            status,
        )

    console.print(table)
    console.print()
    console.print(
        f"[bold]TOTALS:[/bold] Records: {summary.total_records}, "
        f"Successful adapters: {summary.successful_adapters}/{summary.total_adapters}, "
        f"Swept: {summary.swept}, Duration: {summary.duration_seconds:.1f}s"
    )
    if summary.success:
        console.print("[green]Run succeeded[/green]")
    else:
        console.print("[red]Run failed: no adapter yielded records[/red]")


@app.command()
def sweep(
    days: Optional[int] = typer.Option(
        None,
        "--days", "-d",
        min=0,
        help="Retention window in days (defaults to RETENTION_DAYS)",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Sweep the in-memory store instead of Supabase",
    ),
):
    """Deactivate events dated before today minus the retention window."""
    settings = get_settings()
    retention = settings.retention_days if days is None else days
    cutoff = date.today() - timedelta(days=retention)

    async def _sweep() -> int:
        store = get_event_store(settings, dry_run=dry_run or settings.dry_run)
        await store.ping()
        return await store.sweep(cutoff)

    try:
        swept = asyncio.run(_sweep())
    except (ConfigurationError, StorageError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    console.print(f"[green]OK[/green] - Deactivated {swept} events dated before {cutoff.isoformat()}")


@app.command()
def sources():
    """List registered adapters in run order."""
    source_ids = list_adapters()
    ordered = [s for s in DEFAULT_ORDER if s in source_ids] + [
        s for s in source_ids if s not in DEFAULT_ORDER
    ]

    table = Table(show_header=True, header_style="bold")
    table.add_column("Id")
    table.add_column("Name")
    table.add_column("Kind")
    table.add_column("URLs", justify="right")
    table.add_column("Default run")

    for source_id in ordered:
        adapter_class = get_adapter(source_id)
        is_browser = issubclass(adapter_class, BrowserAdapter)
        table.add_row(
            source_id,
            adapter_class.source_name,
            "browser" if is_browser else "generated",
            str(len(adapter_class.urls)) if is_browser else "-",
            "yes" if source_id in DEFAULT_ORDER else "no",
        )

    console.print(table)
    console.print(f"[bold]Total:[/bold] {len(ordered)} adapters")


@app.command()
def schedule(
    cron: Optional[str] = typer.Option(
        None,
        "--cron",
        help="Crontab expression (defaults to SCHEDULE_CRON)",
    ),
):
    """Run the pipeline on a cron schedule until interrupted."""
    from eventhub.scheduler import build_trigger, init_scheduler, shutdown_scheduler

    settings = get_settings()
    expression = cron or settings.schedule_cron
    try:
        build_trigger(expression, settings.schedule_timezone)
    except ValueError as e:
        console.print(f"[red]Invalid cron expression:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    async def _serve() -> None:
        init_scheduler(settings, cron=expression)
        console.print(
            f"[green]Scheduler started[/green] ({expression}, {settings.schedule_timezone}). "
            "Press Ctrl+C to stop."
        )
        try:
            await asyncio.Event().wait()
        finally:
            shutdown_scheduler()

    try:
        asyncio.run(_serve())
    except KeyboardInterrupt:
        console.print("[yellow]Scheduler stopped[/yellow]")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
