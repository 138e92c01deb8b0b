"""Tests for adapter modules."""

from datetime import date, timedelta
from unittest.mock import AsyncMock

import pytest

from eventhub.adapters import (
    DEFAULT_ORDER,
    create_adapter,
    get_adapter,
    list_adapters,
)
from eventhub.adapters.eventbrite_adapter import EventbriteAdapter
from eventhub.adapters.meetup_adapter import (
    FALLBACK_EVENTS,
    LINK_SCAN_LIMIT,
    MIN_NAVIGATION_TIMEOUT_MS,
    MeetupAdapter,
)
from eventhub.adapters.synthetic_adapter import DEFAULT_COUNT, SyntheticAdapter, format_time
from eventhub.core.base_adapter import AdapterConfig, BrowserAdapter
from eventhub.core.event_model import Category, EventSource
from eventhub.core.exceptions import AdapterNotFoundError, FetchError
from eventhub.core.selectors import SelectorChain
from fakes import FakeDocument, FakeElement, FakePage

TODAY = date(2024, 1, 10)


def with_page(adapter, page):
    """Replace the adapter's browser session with a fake page."""
    adapter.get_page = AsyncMock(return_value=page)
    adapter.close_browser = AsyncMock()
    return adapter


def eventbrite_card(n, href=None, title=None):
    children = {
        '[data-testid="event-datetime"]': FakeElement(text="Sat, Jan 20, 2024, 7:00 PM"),
        'a[href*="/e/"]': FakeElement(attrs={"href": href or f"/e/python-night-{n}"}),
        '[data-testid="event-location"]': FakeElement(text="Sydney Town Hall, George St"),
        '[data-testid="event-price"]': FakeElement(text="$25"),
        "img": FakeElement(attrs={"src": "//img.evbuc.com/a.png"}),
    }
    if title is not False:
        children['[data-testid="event-title"]'] = FakeElement(text=title or f"Python Night {n}")
    return FakeElement(children=children)


def meetup_card(n, href=None, title=None):
    return FakeElement(
        children={
            "h3": FakeElement(text=title or f"Sydney Python Meetup {n}"),
            'a[href*="/events/"]': FakeElement(
                attrs={"href": href or f"https://www.meetup.com/sydney-python/events/{n}/"}
            ),
            "time": FakeElement(text="Thu, Jan 18, 2024", attrs={"datetime": "2024-01-18T18:00"}),
        }
    )


class TestAdapterRegistry:
    """Tests for adapter registration and retrieval."""

    def test_list_adapters(self):
        """Test every source is registered."""
        assert set(list_adapters()) >= {"synthetic", "eventbrite", "meetup"}

    def test_default_order(self):
        assert DEFAULT_ORDER == ("synthetic", "eventbrite", "meetup")

    def test_get_adapter(self):
        assert get_adapter("eventbrite") is EventbriteAdapter
        assert get_adapter("meetup") is MeetupAdapter

    def test_get_nonexistent_adapter(self):
        """Test getting a non-existent adapter returns None."""
        assert get_adapter("nonexistent_adapter_xyz") is None

    def test_create_unknown_adapter(self):
        with pytest.raises(AdapterNotFoundError) as exc_info:
            create_adapter("nonexistent_adapter_xyz")
        assert "synthetic" in exc_info.value.available

    def test_create_adapter_uses_settings(self, settings):
        settings.navigation_timeout_ms = 20000
        eventbrite = create_adapter("eventbrite", settings)
        meetup = create_adapter("meetup", settings)

        assert eventbrite.config.navigation_timeout_ms == 20000
        assert meetup.config.navigation_timeout_ms == MIN_NAVIGATION_TIMEOUT_MS

    def test_adapter_has_required_attributes(self):
        """Test that adapters have required attributes."""
        for source_id in DEFAULT_ORDER:
            adapter_class = get_adapter(source_id)
            assert adapter_class.source_id == source_id
            assert adapter_class.source_name


class TestSyntheticAdapter:
    """Tests for the synthetic source."""

    def test_generates_default_count(self):
        records = SyntheticAdapter(seed=1, clock=lambda: TODAY).generate()
        assert len(records) == DEFAULT_COUNT

    def test_urls_are_stable(self):
        first = SyntheticAdapter(seed=1).generate()
        second = SyntheticAdapter(seed=2).generate()
        assert [r.original_url for r in first] == [r.original_url for r in second]
        assert len({r.original_url for r in first}) == DEFAULT_COUNT

    def test_dates_within_next_month(self):
        for record in SyntheticAdapter(clock=lambda: TODAY).generate():
            assert TODAY + timedelta(days=1) <= record.date <= TODAY + timedelta(days=30)

    def test_seed_is_reproducible(self):
        first = SyntheticAdapter(seed=42, clock=lambda: TODAY).generate()
        second = SyntheticAdapter(seed=42, clock=lambda: TODAY).generate()
        assert first == second

    def test_second_cycle_titles(self):
        records = SyntheticAdapter(seed=1).generate()
        assert records[10].title.endswith(" #2")
        assert not records[0].title.endswith(" #2")

    def test_explicit_category_and_tags(self):
        record = SyntheticAdapter(seed=1).generate()[1]
        assert record.category == Category.MUSIC
        assert record.tags == ["concert", "classical", "music"]
        assert record.source == EventSource.SYNTHETIC

    @pytest.mark.parametrize(
        "hour,minute,expected",
        [(9, 0, "9:00 AM"), (12, 30, "12:30 PM"), (18, 30, "6:30 PM"), (20, 0, "8:00 PM")],
    )
    def test_format_time(self, hour, minute, expected):
        assert format_time(hour, minute) == expected

    async def test_scrape(self):
        batch = await SyntheticAdapter(count=3).scrape()
        assert batch.source_id == "synthetic"
        assert batch.record_count == 3
        assert batch.errors == []


class TestEventbriteAdapter:
    """Tests for the Eventbrite adapter against fake pages."""

    def test_build_record_resolves_links(self, fast_config):
        adapter = EventbriteAdapter(fast_config)
        record = adapter.build_record(
            {"title": "Python Night", "url": "/e/python-night-1", "image_url": "//img.evbuc.com/a.png"},
            EventbriteAdapter.urls[0],
        )
        assert record.original_url == "https://www.eventbrite.com.au/e/python-night-1"
        assert record.image_url == "https://img.evbuc.com/a.png"
        assert record.description == "Python Night"
        assert record.organizer_name == "Eventbrite Organizer"

    def test_build_record_requires_title(self, fast_config):
        adapter = EventbriteAdapter(fast_config)
        assert adapter.build_record({"title": "", "url": "/e/1"}, EventbriteAdapter.urls[0]) is None

    async def test_extracts_cards(self, fast_config):
        url = EventbriteAdapter.urls[0]
        page = FakePage(
            {
                url: FakeDocument(
                    cards={
                        '[data-testid="event-card"]': [
                            eventbrite_card(1),
                            eventbrite_card(2, title=False),
                            eventbrite_card(3),
                        ]
                    }
                )
            }
        )
        adapter = with_page(EventbriteAdapter(fast_config), page)

        batch = await adapter.scrape()

        assert batch.record_count == 2
        assert batch.used_fallback is False
        first = batch.records[0]
        assert first.title == "Python Night 1"
        assert first.date == "Sat, Jan 20, 2024, 7:00 PM"
        assert first.price == "$25"
        assert first.source == EventSource.EVENTBRITE
        assert page.visited == [url]

    async def test_falls_back_to_later_selector(self, fast_config):
        url = EventbriteAdapter.urls[0]
        page = FakePage({url: FakeDocument(cards={"article": [eventbrite_card(1)]})})
        adapter = with_page(EventbriteAdapter(fast_config), page)

        records = await adapter.fetch_records()
        assert len(records) == 1

    async def test_second_url_used_when_first_fails(self, fast_config):
        first, second = EventbriteAdapter.urls
        page = FakePage(
            {second: FakeDocument(cards={".event-card": [eventbrite_card(1)]})},
            failing={first},
        )
        adapter = with_page(EventbriteAdapter(fast_config), page)

        records = await adapter.fetch_records()

        assert len(records) == 1
        assert page.visited == [first, second]

    async def test_empty_page_moves_to_next_url(self, fast_config):
        first, second = EventbriteAdapter.urls
        page = FakePage({second: FakeDocument(cards={"article": [eventbrite_card(1)]})})
        adapter = with_page(EventbriteAdapter(fast_config), page)

        records = await adapter.fetch_records()
        assert len(records) == 1
        assert page.visited == [first, second]

    async def test_failures_name_missing_extraction_point(self, fast_config):
        adapter = with_page(EventbriteAdapter(fast_config), FakePage())

        with pytest.raises(FetchError) as exc_info:
            await adapter.fetch_records()

        failures = exc_info.value.details["failures"]
        assert len(failures) == 2
        assert all("No extraction point found for 'event card'" in f for f in failures)

    async def test_no_fallback_when_exhausted(self, fast_config):
        """Test Eventbrite contributes zero records when every URL fails."""
        adapter = with_page(EventbriteAdapter(fast_config), FakePage(fail_all=True))

        batch = await adapter.scrape()

        assert batch.record_count == 0
        assert batch.used_fallback is False
        assert batch.error_count == 1
        assert "exhausted" in batch.errors[0]
        adapter.close_browser.assert_awaited_once()


class TestMeetupAdapter:
    """Tests for the Meetup adapter against fake pages."""

    def test_build_record_requires_meetup_link(self, fast_config):
        adapter = MeetupAdapter(fast_config)
        page_url = MeetupAdapter.urls[0]

        when = "Thu, Jan 18, 2024"
        assert adapter.build_record({"title": "Python Night", "url": "https://example.com/e/1", "date": when}, page_url) is None
        assert adapter.build_record({"title": "Hi", "url": "/events/1/", "date": when}, page_url) is None

        record = adapter.build_record({"title": "Python Night", "url": "/events/1/", "date": when}, page_url)
        assert record.original_url == "https://www.meetup.com/events/1/"
        assert record.price == "Free"

    def test_build_record_uses_datetime_attribute_without_text(self, fast_config):
        adapter = MeetupAdapter(fast_config)
        fields = {"title": "Python Night", "url": "/events/1/", "date": "", "datetime": "2024-01-18T18:00"}
        record = adapter.build_record(fields, MeetupAdapter.urls[0])
        assert record.date == "2024-01-18T18:00"

    def test_build_record_requires_date(self, fast_config):
        adapter = MeetupAdapter(fast_config)
        fields = {"title": "Python Night", "url": "/events/1/", "date": "", "datetime": ""}
        assert adapter.build_record(fields, MeetupAdapter.urls[0]) is None

    async def test_dateless_cards_fall_through_to_next_selector(self, fast_config):
        url = MeetupAdapter.urls[0]
        dateless = meetup_card(1)
        del dateless.children["time"]
        page = FakePage(
            {url: FakeDocument(cards={'[data-testid="event-card"]': [dateless], "article": [meetup_card(2)]})}
        )
        adapter = with_page(MeetupAdapter(fast_config), page)

        records = await adapter.fetch_records()
        assert [r.title for r in records] == ["Sydney Python Meetup 2"]

    async def test_extracts_cards(self, fast_config):
        url = MeetupAdapter.urls[0]
        page = FakePage({url: FakeDocument(cards={'[data-testid="event-card"]': [meetup_card(1), meetup_card(2)]})})
        adapter = with_page(MeetupAdapter(fast_config), page)

        batch = await adapter.scrape()

        assert batch.record_count == 2
        assert batch.used_fallback is False
        assert batch.records[0].title == "Sydney Python Meetup 1"
        assert batch.records[0].date == "Thu, Jan 18, 2024"
        assert batch.records[0].source == EventSource.MEETUP

    async def test_tries_next_card_selector_when_first_yields_nothing(self, fast_config):
        url = MeetupAdapter.urls[0]
        page = FakePage(
            {
                url: FakeDocument(
                    cards={
                        '[data-testid="event-card"]': [meetup_card(1, href="https://example.com/ad")],
                        "article": [meetup_card(2)],
                    }
                )
            }
        )
        adapter = with_page(MeetupAdapter(fast_config), page)

        records = await adapter.fetch_records()
        assert [r.title for r in records] == ["Sydney Python Meetup 2"]

    async def test_card_is_the_link(self, fast_config):
        url = MeetupAdapter.urls[0]
        card = FakeElement(
            text="Harbour Walk and Talk",
            attrs={"href": "https://www.meetup.com/walkers/events/9/"},
            children={"time": FakeElement(text="Sat, Jan 20, 2024")},
        )
        page = FakePage({url: FakeDocument(cards={'[href*="/events/"]': [card]})})
        adapter = with_page(MeetupAdapter(fast_config), page)

        records = await adapter.fetch_records()
        assert records[0].title == "Harbour Walk and Talk"
        assert records[0].original_url == "https://www.meetup.com/walkers/events/9/"

    def test_scan_links(self, fast_config):
        adapter = MeetupAdapter(fast_config)
        html = """
        <html><body>
          <a href="/sydney-python/events/1/"><h3>Python Night</h3><time datetime="2024-01-18T18:00">Thu</time></a>
          <a href="/sydney-python/events/2/"><h3>No date here</h3></a>
          <a href="https://example.com/events/3/">Elsewhere<time>Fri</time></a>
          <a href="/about/">About</a>
        </body></html>
        """
        records = adapter.scan_links(html, "https://www.meetup.com/find/")

        assert len(records) == 1
        record = records[0]
        assert record.title.startswith("Python Night")
        assert record.original_url == "https://www.meetup.com/sydney-python/events/1/"
        assert record.date == "2024-01-18T18:00"
        assert record.venue == "Sydney, Australia"
        assert record.group == "Sydney Meetup Group"

    def test_scan_links_limit(self, fast_config):
        adapter = MeetupAdapter(fast_config)
        links = "".join(
            f'<a href="/g/events/{i}/">Event number {i}<time>Sat, Jan 20, 2024</time></a>'
            for i in range(LINK_SCAN_LIMIT + 5)
        )
        records = adapter.scan_links(f"<html><body>{links}</body></html>", "https://www.meetup.com/")
        assert len(records) == LINK_SCAN_LIMIT

    async def test_link_scan_when_no_cards(self, fast_config):
        url = MeetupAdapter.urls[0]
        html = '<a href="/g/events/1/">Board game night<time>Sat, Jan 20, 2024</time></a>'
        page = FakePage({url: FakeDocument(html=html)})
        adapter = with_page(MeetupAdapter(fast_config), page)

        records = await adapter.fetch_records()
        assert len(records) == 1
        assert records[0].date == "Sat, Jan 20, 2024"

    async def test_warmup_before_retrying_failed_url(self, fast_config):
        first = MeetupAdapter.urls[0]
        page = FakePage(fail_all=True)
        adapter = with_page(MeetupAdapter(fast_config), page)

        await adapter.scrape()

        assert page.visited[:2] == [first, MeetupAdapter.warmup_url]

    async def test_fallback_when_exhausted(self, fast_config):
        """Test Meetup emits placeholder records when every URL fails."""
        adapter = with_page(MeetupAdapter(fast_config), FakePage(fail_all=True))

        batch = await adapter.scrape()

        assert batch.used_fallback is True
        assert batch.record_count == len(FALLBACK_EVENTS) == 5
        today = date.today()
        for i, record in enumerate(batch.records):
            assert record.source == EventSource.SYNTHETIC
            assert record.date == today + timedelta(days=3 * (i + 1))
            assert record.time == "18:30"
            assert record.price == "Free"
            assert record.organizer_name == record.group
        adapter.close_browser.assert_awaited_once()


class TestBrowserAdapter:
    """Tests for shared browser adapter behaviour."""

    @pytest.fixture
    def scroll_config(self):
        return AdapterConfig(settle_ms=0, scroll_pause_ms=0, scroll_step_px=400, max_scroll_steps=100)

    async def test_scrolls_to_bottom_of_tall_page(self, scroll_config):
        page = FakePage(scroll_height=2000)

        steps = await EventbriteAdapter(scroll_config).scroll_to_bottom(page)

        assert steps == 5
        assert page.scrolls == [400, 800, 1200, 1600, 2000]

    async def test_viewport_height_is_not_scrolled(self, scroll_config):
        page = FakePage(scroll_height=1000, viewport_height=800)

        steps = await EventbriteAdapter(scroll_config).scroll_to_bottom(page)

        assert steps == 1
        assert page.scrolls == [400]

    async def test_scroll_stops_at_step_cap(self, scroll_config):
        scroll_config.max_scroll_steps = 3
        page = FakePage(scroll_height=2000)

        steps = await EventbriteAdapter(scroll_config).scroll_to_bottom(page)

        assert steps == 3
        assert page.scrolls == [400, 800, 1200]

    async def test_content_loaded_while_scrolling_extends_the_loop(self, scroll_config):
        """Test the page height is re-read after every step."""
        scroll_config.max_scroll_steps = 10
        page = FakePage(scroll_height=800, growth_per_scroll=400)

        steps = await EventbriteAdapter(scroll_config).scroll_to_bottom(page)

        assert steps == 10

    async def test_short_page_not_scrolled(self, scroll_config):
        page = FakePage()
        assert await EventbriteAdapter(scroll_config).scroll_to_bottom(page) == 0
        assert page.scrolls == []

    async def test_without_build_record_override_no_cards_are_kept(self, fast_config):
        class ListingAdapter(BrowserAdapter):
            source_id = "listing"
            source_name = "Listing"
            urls = ("https://example.com/events",)
            card_chain = SelectorChain("event card", ("article",))

        page = FakePage({ListingAdapter.urls[0]: FakeDocument(cards={"article": [FakeElement(text="Gig")]})})
        adapter = with_page(ListingAdapter(fast_config), page)

        await page.goto(ListingAdapter.urls[0])
        assert await adapter.extract_cards(page, ListingAdapter.urls[0]) == []
        with pytest.raises(FetchError):
            await adapter.fetch_records()
