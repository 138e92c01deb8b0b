"""Event storage: the Supabase `events` table and an in-memory twin.

Both stores honour the same contract (EventStore):
- `original_url` is the identity; `upsert` inserts or fully overwrites
- `scraped_at` is set once on insert, `updated_at` on every write
- `sweep` only deactivates records (is_active = false), it never deletes
"""

import asyncio
from collections.abc import Callable
from datetime import date, datetime, timezone
from typing import Any, Protocol, runtime_checkable

from supabase import Client, create_client

from eventhub.config import Settings, get_settings
from eventhub.core.event_model import EventRecord
from eventhub.core.exceptions import ConfigurationError, PersistenceError, StoreUnavailableError
from eventhub.core.retry import with_retry
from eventhub.logging import get_logger

logger = get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@runtime_checkable
class EventStore(Protocol):
    """Persistence gateway used by the pipeline."""

    async def ping(self) -> None:
        """Raise StoreUnavailableError when the store cannot be reached."""
        ...

    async def upsert(self, record: EventRecord) -> EventRecord:
        """Insert or fully overwrite the record keyed by its original_url."""
        ...

    async def sweep(self, cutoff: date) -> int:
        """Deactivate every active record dated before `cutoff`; return the count."""
        ...

    async def get(self, original_url: str) -> EventRecord | None:
        ...

    async def count(self, active_only: bool = False) -> int:
        ...


class SupabaseEventStore:
    """EventStore backed by the Supabase `events` table."""

    def __init__(self, settings: Settings | None = None, client: Client | None = None) -> None:
        """Initialize Supabase client.

        Args:
            settings: Settings with Supabase credentials (defaults to env)
            client: Pre-built client, mainly for tests
        """
        settings = settings or get_settings()
        if client is None:
            if not settings.has_supabase:
                raise ConfigurationError(
                    "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set",
                    source="supabase",
                )
            client = create_client(settings.supabase_url, settings.supabase_service_role_key)

        self._client = client
        self.table_name = settings.events_table
        self.logger = get_logger("supabase_store")

    @property
    def client(self) -> Client:
        """Get the Supabase client instance."""
        return self._client

    def _table(self) -> Any:
        return self._client.table(self.table_name)

    @with_retry()
    async def _execute(self, query: Any) -> Any:
        # supabase-py executes synchronously
        return await asyncio.to_thread(query.execute)

    # ==========================================
    # EventStore
    # ==========================================

    async def ping(self) -> None:
        try:
            await self._execute(self._table().select("original_url").limit(1))
        except Exception as e:
            self.logger.error("store_unavailable", error=str(e))
            raise StoreUnavailableError(f"Supabase unreachable: {e}", source="supabase") from e

    async def upsert(self, record: EventRecord) -> EventRecord:
        """Upsert event (insert or overwrite based on original_url)."""
        data = record.to_row()
        data["updated_at"] = utc_now().isoformat()

        try:
            response = await self._execute(self._table().upsert(data, on_conflict="original_url"))
        except Exception as e:
            self.logger.error("upsert_failed", error=str(e), original_url=record.original_url)
            raise PersistenceError(
                f"Failed to upsert event: {e}",
                operation="upsert",
                original_url=record.original_url,
                source="supabase",
            ) from e

        if response.data:
            return EventRecord.from_row(response.data[0])
        return record.model_copy(update={"updated_at": datetime.fromisoformat(data["updated_at"])})

    async def sweep(self, cutoff: date) -> int:
        try:
            response = await self._execute(
                self._table()
                .update({"is_active": False, "updated_at": utc_now().isoformat()})
                .lt("date", cutoff.isoformat())
                .eq("is_active", True)
            )
        except Exception as e:
            self.logger.error("sweep_failed", error=str(e), cutoff=cutoff.isoformat())
            raise PersistenceError(f"Retention sweep failed: {e}", operation="sweep", source="supabase") from e

        swept = len(response.data or [])
        self.logger.info("sweep_complete", cutoff=cutoff.isoformat(), swept=swept)
        return swept

    async def get(self, original_url: str) -> EventRecord | None:
        response = await self._execute(
            self._table().select("*").eq("original_url", original_url).limit(1)
        )
        if not response.data:
            return None
        return EventRecord.from_row(response.data[0])

    async def count(self, active_only: bool = False) -> int:
        query = self._table().select("original_url", count="exact")
        if active_only:
            query = query.eq("is_active", True)
        response = await self._execute(query)
        return response.count or 0


class InMemoryEventStore:
    """EventStore kept in a dict; used for dry runs and tests."""

    def __init__(
        self,
        clock: Callable[[], datetime] = utc_now,
        available: bool = True,
    ) -> None:
        self._records: dict[str, EventRecord] = {}
        self._lock = asyncio.Lock()
        self._clock = clock
        self.available = available

    async def ping(self) -> None:
        if not self.available:
            raise StoreUnavailableError("In-memory store marked unavailable", source="memory")

    async def upsert(self, record: EventRecord) -> EventRecord:
        async with self._lock:
            now = self._clock()
            existing = self._records.get(record.original_url)
            stored = record.model_copy(
                update={
                    "scraped_at": existing.scraped_at if existing else now,
                    "updated_at": now,
                }
            )
            self._records[record.original_url] = stored
            return stored

    async def sweep(self, cutoff: date) -> int:
        async with self._lock:
            now = self._clock()
            stale = [
                url
                for url, record in self._records.items()
                if record.is_active and record.date < cutoff
            ]
            for url in stale:
                self._records[url] = self._records[url].model_copy(
                    update={"is_active": False, "updated_at": now}
                )
            return len(stale)

    async def get(self, original_url: str) -> EventRecord | None:
        return self._records.get(original_url)

    async def count(self, active_only: bool = False) -> int:
        if active_only:
            return sum(1 for record in self._records.values() if record.is_active)
        return len(self._records)

    def all(self) -> list[EventRecord]:
        """Snapshot of every stored record."""
        return list(self._records.values())


def get_event_store(settings: Settings | None = None, dry_run: bool | None = None) -> EventStore:
    """Build the configured store.

    Dry runs use the in-memory store; otherwise Supabase credentials are required.

    Raises:
        ConfigurationError: Supabase is not configured and this is not a dry run
    """
    settings = settings or get_settings()
    if dry_run is None:
        dry_run = settings.dry_run

    if dry_run:
        logger.info("store_selected", store="memory")
        return InMemoryEventStore()

    logger.info("store_selected", store="supabase", table=settings.events_table)
    return SupabaseEventStore(settings)
