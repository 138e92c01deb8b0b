"""Tests for the event stores."""

from datetime import date, datetime, timezone
from unittest.mock import MagicMock

import pytest

from eventhub.core.exceptions import ConfigurationError, PersistenceError, StoreUnavailableError
from eventhub.core.retry import RetryConfig, with_retry
from eventhub.core.supabase_client import (
    EventStore,
    InMemoryEventStore,
    SupabaseEventStore,
    get_event_store,
)
from fakes import TickingClock, make_record

START = datetime(2024, 1, 10, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def store():
    return InMemoryEventStore(clock=TickingClock(START))


class TestInMemoryStore:
    """Tests for the in-memory store."""

    def test_satisfies_protocol(self, store):
        assert isinstance(store, EventStore)

    async def test_upsert_is_idempotent(self, store):
        await store.upsert(make_record(1))
        await store.upsert(make_record(1, title="Renamed"))

        assert await store.count() == 1
        stored = await store.get("https://example.com/events/1")
        assert stored.title == "Renamed"

    async def test_scraped_at_kept_updated_at_advances(self, store):
        first = await store.upsert(make_record(1))
        second = await store.upsert(make_record(1))

        assert second.scraped_at == first.scraped_at
        assert second.updated_at > first.updated_at

    async def test_sweep_deactivates_past_records(self, store):
        await store.upsert(make_record(1, event_date=date(2024, 1, 8)))
        await store.upsert(make_record(2, event_date=date(2024, 1, 9)))
        await store.upsert(make_record(3, event_date=date(2024, 1, 20)))

        assert await store.sweep(date(2024, 1, 9)) == 1
        assert await store.sweep(date(2024, 1, 9)) == 0

        # Soft delete: nothing is removed
        assert await store.count() == 3
        assert await store.count(active_only=True) == 2
        swept = await store.get("https://example.com/events/1")
        assert swept.is_active is False

    async def test_upsert_reactivates(self, store):
        await store.upsert(make_record(1, event_date=date(2024, 1, 8)))
        await store.sweep(date(2024, 1, 9))
        await store.upsert(make_record(1, event_date=date(2024, 1, 8)))

        assert await store.count(active_only=True) == 1

    async def test_unavailable(self):
        with pytest.raises(StoreUnavailableError):
            await InMemoryEventStore(available=False).ping()

    async def test_get_missing(self, store):
        assert await store.get("https://example.com/none") is None


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def supabase_store(settings, client):
    return SupabaseEventStore(settings, client=client)


class TestSupabaseStore:
    """Tests for the Supabase store against a mocked client."""

    async def test_upsert_on_original_url(self, supabase_store, client):
        record = make_record(1)
        table = client.table.return_value
        table.upsert.return_value.execute.return_value = MagicMock(data=[])

        result = await supabase_store.upsert(record)

        client.table.assert_called_with("events")
        payload = table.upsert.call_args.args[0]
        assert table.upsert.call_args.kwargs == {"on_conflict": "original_url"}
        assert payload["original_url"] == "https://example.com/events/1"
        assert "updated_at" in payload
        assert "scraped_at" not in payload
        assert result.updated_at is not None

    async def test_upsert_returns_stored_row(self, supabase_store, client):
        row = make_record(1).to_row()
        row["scraped_at"] = "2024-01-01T00:00:00+00:00"
        client.table.return_value.upsert.return_value.execute.return_value = MagicMock(data=[row])

        result = await supabase_store.upsert(make_record(1))
        assert result.scraped_at == datetime(2024, 1, 1, tzinfo=timezone.utc)

    async def test_upsert_failure(self, supabase_store, client):
        client.table.return_value.upsert.return_value.execute.side_effect = ValueError("constraint")

        with pytest.raises(PersistenceError) as exc_info:
            await supabase_store.upsert(make_record(1))
        assert exc_info.value.original_url == "https://example.com/events/1"

    async def test_sweep_is_an_update(self, supabase_store, client):
        table = client.table.return_value
        query = table.update.return_value.lt.return_value.eq.return_value
        query.execute.return_value = MagicMock(data=[{"id": 1}, {"id": 2}])

        assert await supabase_store.sweep(date(2024, 1, 9)) == 2

        values = table.update.call_args.args[0]
        assert values["is_active"] is False
        table.update.return_value.lt.assert_called_once_with("date", "2024-01-09")
        table.update.return_value.lt.return_value.eq.assert_called_once_with("is_active", True)
        table.delete.assert_not_called()

    async def test_sweep_failure(self, supabase_store, client):
        query = client.table.return_value.update.return_value.lt.return_value.eq.return_value
        query.execute.side_effect = ValueError("boom")

        with pytest.raises(PersistenceError):
            await supabase_store.sweep(date(2024, 1, 9))

    async def test_ping_failure(self, supabase_store, client):
        query = client.table.return_value.select.return_value.limit.return_value
        query.execute.side_effect = ValueError("invalid api key")

        with pytest.raises(StoreUnavailableError):
            await supabase_store.ping()

    async def test_ping_retries_transient_errors(self, supabase_store, client):
        query = client.table.return_value.select.return_value.limit.return_value
        query.execute.side_effect = [ConnectionError("reset"), MagicMock(data=[])]

        await supabase_store.ping()
        assert query.execute.call_count == 2

    async def test_count(self, supabase_store, client):
        select = client.table.return_value.select
        select.return_value.eq.return_value.execute.return_value = MagicMock(count=7)

        assert await supabase_store.count(active_only=True) == 7
        select.assert_called_with("original_url", count="exact")

    async def test_get_missing(self, supabase_store, client):
        query = client.table.return_value.select.return_value.eq.return_value.limit.return_value
        query.execute.return_value = MagicMock(data=[])

        assert await supabase_store.get("https://example.com/none") is None


class TestGetEventStore:
    """Tests for store selection."""

    def test_dry_run_uses_memory(self, settings):
        assert isinstance(get_event_store(settings, dry_run=True), InMemoryEventStore)

    def test_dry_run_from_settings(self, settings):
        settings.dry_run = True
        assert isinstance(get_event_store(settings), InMemoryEventStore)

    def test_missing_credentials(self, settings):
        with pytest.raises(ConfigurationError):
            get_event_store(settings, dry_run=False)


class TestRetry:
    """Tests for the retry decorator."""

    def test_gives_up_after_max_attempts(self):
        calls = []

        @with_retry(RetryConfig(max_attempts=2, initial_delay=0, max_delay=0, jitter=0))
        def flaky():
            calls.append(1)
            raise TimeoutError("slow")

        with pytest.raises(TimeoutError):
            flaky()
        assert len(calls) == 2

    def test_non_retryable_raises_immediately(self):
        calls = []

        @with_retry(RetryConfig(initial_delay=0, max_delay=0, jitter=0))
        def broken():
            calls.append(1)
            raise ValueError("bad")

        with pytest.raises(ValueError):
            broken()
        assert len(calls) == 1

    async def test_retries_coroutines(self):
        calls = []

        @with_retry(RetryConfig(max_attempts=3, initial_delay=0, max_delay=0, jitter=0))
        async def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise ConnectionError("reset")
            return "ok"

        assert await flaky() == "ok"
        assert len(calls) == 3

