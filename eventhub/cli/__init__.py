"""Command line interface for the event ingestion pipeline.

Usage:
    python -m eventhub.cli [command] [options]

Commands:
    run         Run the adapters and persist their records
    sweep       Deactivate stale events
    sources     List registered adapters
    schedule    Run on a cron schedule
"""

from eventhub.cli.main import app

__all__ = ["app"]
