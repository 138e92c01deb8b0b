"""Multi-source ingestion pipeline.

Runs every adapter in a fixed order, normalizes and upserts what each one
returns, then deactivates stale records with a single retention sweep.

Flow per run:
1. Ping the store (unreachable store = failed run)
2. For each adapter, sequentially: scrape -> normalize -> upsert
3. Sweep records dated before (run date - retention_days)
4. Return a RunSummary

Usage:
    from eventhub.core.pipeline import ScrapePipeline

    pipeline = ScrapePipeline(adapters, store)
    summary = await pipeline.run_all()
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum

from pydantic import ValidationError

from eventhub.config import Settings, get_settings
from eventhub.core.base_adapter import BaseAdapter
from eventhub.core.category_classifier import DEFAULT_TAG_VOCABULARY
from eventhub.core.event_model import EventBatch
from eventhub.core.exceptions import InvalidDateError, PersistenceError, StorageError
from eventhub.core.normalizer import normalize_record
from eventhub.core.supabase_client import EventStore, get_event_store
from eventhub.logging import get_logger, log_adapter_run
from eventhub.utils.locations import Region

logger = get_logger(__name__)


class PipelineState(str, Enum):
    """Lifecycle of a single run."""

    IDLE = "idle"
    RUNNING = "running"
    SWEEPING = "sweeping"
    DONE = "done"


@dataclass
class AdapterResult:
    """Outcome of one adapter within a run."""

    source_id: str
    raw_count: int = 0
    persisted: int = 0
    dropped: int = 0
    failed: int = 0
    used_fallback: bool = False
    error: str | None = None

    @property
    def successful(self) -> bool:
        """An adapter counts as successful when it yielded at least one record."""
        return self.persisted > 0


@dataclass
class RunSummary:
    """Result of a pipeline run."""

    total_records: int = 0
    successful_adapters: int = 0
    total_adapters: int = 0
    duration_seconds: float = 0.0
    success: bool = False
    swept: int = 0
    sweep_cutoff: date | None = None
    adapter_results: list[AdapterResult] = field(default_factory=list)


class ScrapePipeline:
    """Sequential orchestrator over a fixed list of adapters."""

    def __init__(
        self,
        adapters: Sequence[BaseAdapter],
        store: EventStore,
        clock: Callable[[], datetime] = datetime.now,
        settings: Settings | None = None,
    ) -> None:
        self.adapters = list(adapters)
        self.store = store
        self.clock = clock
        self.settings = settings or get_settings()
        self.state = PipelineState.IDLE
        self.region = Region.from_settings(self.settings)

    def sweep_cutoff(self, run_date: date) -> date:
        """Records dated strictly before this day are swept."""
        return run_date - timedelta(days=self.settings.retention_days)

    async def run_all(self) -> RunSummary:
        """Execute one full run.

        Returns:
            RunSummary with per-adapter results

        Raises:
            StoreUnavailableError: the store could not be reached
        """
        started = self.clock()
        today = started.date()
        summary = RunSummary(total_adapters=len(self.adapters))

        self.state = PipelineState.RUNNING
        logger.info("pipeline_start", adapters=[a.source_id for a in self.adapters])

        try:
            await self.store.ping()
        except StorageError:
            self.state = PipelineState.DONE
            logger.error("pipeline_aborted", reason="store_unavailable")
            raise

        for adapter in self.adapters:
            result = await self._run_adapter(adapter, today)
            summary.adapter_results.append(result)
            summary.total_records += result.persisted
            if result.successful:
                summary.successful_adapters += 1

        self.state = PipelineState.SWEEPING
        summary.sweep_cutoff = self.sweep_cutoff(today)
        try:
            summary.swept = await self.store.sweep(summary.sweep_cutoff)
        except StorageError as e:
            logger.error("sweep_error", error=str(e), cutoff=summary.sweep_cutoff.isoformat())

        self.state = PipelineState.DONE
        summary.success = summary.successful_adapters >= 1
        summary.duration_seconds = (self.clock() - started).total_seconds()

        logger.info(
            "pipeline_complete",
            total_records=summary.total_records,
            successful_adapters=summary.successful_adapters,
            total_adapters=summary.total_adapters,
            swept=summary.swept,
            success=summary.success,
            duration_seconds=round(summary.duration_seconds, 2),
        )
        return summary

    async def _run_adapter(self, adapter: BaseAdapter, today: date) -> AdapterResult:
        result = AdapterResult(source_id=adapter.source_id)

        try:
            batch = await adapter.scrape()

            result.raw_count = batch.record_count
            result.used_fallback = batch.used_fallback
            if batch.errors:
                result.error = batch.errors[-1]

            await self._persist_batch(batch, result, today, adapter.tag_vocabulary)
        except Exception as e:
            # Counts gathered before the failure are kept
            logger.error("adapter_error", source_id=adapter.source_id, error=str(e))
            result.error = str(e)
        return result

    async def _persist_batch(
        self,
        batch: EventBatch,
        result: AdapterResult,
        today: date,
        tag_vocabulary: tuple[str, ...] = DEFAULT_TAG_VOCABULARY,
    ) -> None:
        with log_adapter_run(batch.source_id, batch.source_name):
            for raw in batch.records:
                try:
                    record = normalize_record(
                        raw,
                        region=self.region,
                        currency=self.settings.default_currency,
                        tag_vocabulary=tag_vocabulary,
                        today=today,
                    )
                except (InvalidDateError, ValidationError) as e:
                    result.dropped += 1
                    logger.info("record_dropped", title=raw.title[:80], reason=str(e).splitlines()[0])
                    continue

                try:
                    await self.store.upsert(record)
                except PersistenceError as e:
                    result.failed += 1
                    logger.warning("record_persist_failed", original_url=record.original_url, error=str(e))
                    continue

                result.persisted += 1

            logger.info(
                "batch_persisted",
                raw=result.raw_count,
                persisted=result.persisted,
                dropped=result.dropped,
                failed=result.failed,
            )


def default_adapters(settings: Settings | None = None) -> list[BaseAdapter]:
    """Instantiate the registered adapters in the default run order."""
    from eventhub.adapters import DEFAULT_ORDER, create_adapter

    return [create_adapter(source_id, settings=settings) for source_id in DEFAULT_ORDER]


async def run_all(
    settings: Settings | None = None,
    store: EventStore | None = None,
    dry_run: bool | None = None,
) -> RunSummary:
    """Run every default adapter against the configured store."""
    settings = settings or get_settings()
    store = store or get_event_store(settings, dry_run=dry_run)
    pipeline = ScrapePipeline(default_adapters(settings), store, settings=settings)
    return await pipeline.run_all()
