"""Adapter for Meetup events in the serving region.

Meetup serves different markup depending on the entry URL, so three listing
URLs are tried in order. Each page is read with two strategies:
1. Card selectors, in order, until one produces records
2. A link scan of the rendered HTML (BeautifulSoup) for event links

When every URL is exhausted the adapter emits five placeholder records so the
source never contributes a hard zero. Placeholders carry source "synthetic".
"""

from datetime import date, timedelta
from typing import Any

from bs4 import BeautifulSoup
from playwright.async_api import Page

from eventhub.adapters import register_adapter
from eventhub.config import Settings
from eventhub.core.base_adapter import AdapterConfig, BrowserAdapter
from eventhub.core.event_model import EventSource, RawRecord
from eventhub.core.selectors import SelectorChain, extract_fields, locate
from eventhub.utils.urls import make_absolute_url

MEETUP_TAGS = (
    "networking",
    "workshop",
    "meetup",
    "community",
    "professional",
    "beginner",
    "advanced",
    "free",
)

MIN_NAVIGATION_TIMEOUT_MS = 45000
LINK_SCAN_LIMIT = 10
FALLBACK_SPACING_DAYS = 3
FALLBACK_TIME = "18:30"

CARD = SelectorChain(
    "event card",
    (
        '[data-testid="event-card"]',
        '[data-testid="searchResult"]',
        ".event-listing",
        ".searchResult",
        "article",
        '[href*="/events/"]',
        ".event-card",
        '[class*="event"]',
    ),
)

FIELDS: dict[str, SelectorChain] = {
    "title": SelectorChain("title", ("h1", "h2", "h3", "h4", 'a[href*="/events/"]', "a")),
    "url": SelectorChain("link", ('a[href*="/events/"]', "a"), attribute="href"),
    "date": SelectorChain("date", ("time", "[datetime]", ".date", '[class*="date"]')),
    "datetime": SelectorChain("date attribute", ("time", "[datetime]"), attribute="datetime"),
    "venue": SelectorChain("venue", ('[class*="venue"]', '[class*="location"]')),
    "image_url": SelectorChain("image", ("img",), attribute="src"),
}

FALLBACK_EVENTS: tuple[dict[str, str], ...] = (
    {
        "title": "Sydney Tech Professionals Meetup",
        "description": (
            "Monthly gathering for technology professionals in Sydney. "
            "Networking, knowledge sharing, and career development."
        ),
        "venue": "WeWork, Martin Place, Sydney",
        "group": "Sydney Tech Professionals",
        "original_url": "https://www.meetup.com/sydney-tech-professionals/events/fallback-1",
    },
    {
        "title": "React Sydney Developer Meetup",
        "description": "Learn about React, JavaScript, and modern web development with fellow developers.",
        "venue": "Atlassian, 341 George Street, Sydney",
        "group": "React Sydney",
        "original_url": "https://www.meetup.com/react-sydney/events/fallback-2",
    },
    {
        "title": "Sydney Startup Founders Networking",
        "description": "Connect with fellow entrepreneurs, share experiences, and build your network.",
        "venue": "Tank Stream Labs, North Sydney",
        "group": "Sydney Startup Network",
        "original_url": "https://www.meetup.com/sydney-startup-founders/events/fallback-3",
    },
    {
        "title": "Python Sydney User Group",
        "description": "Monthly Python programming meetup. All skill levels welcome.",
        "venue": "Google Australia, Pyrmont",
        "group": "Python Sydney",
        "original_url": "https://www.meetup.com/python-sydney/events/fallback-4",
    },
    {
        "title": "Sydney Digital Marketing Meetup",
        "description": "Learn about digital marketing trends, tools, and strategies.",
        "venue": "IAG Building, 388 George Street, Sydney",
        "group": "Sydney Digital Marketers",
        "original_url": "https://www.meetup.com/sydney-digital-marketing/events/fallback-5",
    },
)


def _is_meetup_link(url: str | None) -> bool:
    return bool(url) and "meetup.com" in url


@register_adapter("meetup")
class MeetupAdapter(BrowserAdapter):
    """Meetup event search for Sydney."""

    source_id = "meetup"
    source_name = "Meetup - Sydney"
    source = EventSource.MEETUP
    tag_vocabulary = MEETUP_TAGS

    urls = (
        "https://www.meetup.com/find/?location=Sydney%2C%20Australia&source=EVENTS",
        "https://www.meetup.com/find/events/?allMeetups=false&keywords=&radius=25&userFreeform=Sydney%2C+Australia",
        "https://www.meetup.com/cities/au/sydney/events/",
    )
    warmup_url = "https://www.meetup.com/"
    card_chain = CARD
    field_schema = FIELDS

    default_group = "Sydney Meetup Group"
    default_venue = "Sydney, Australia"
    default_organizer = "Meetup Organizer"

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "MeetupAdapter":
        config = AdapterConfig.from_settings(settings)
        config.navigation_timeout_ms = max(config.navigation_timeout_ms, MIN_NAVIGATION_TIMEOUT_MS)
        return cls(config)

    # ==========================================
    # Strategy 1: card selectors
    # ==========================================

    def build_record(self, fields: dict[str, str], page_url: str) -> RawRecord | None:
        title = fields.get("title", "")
        original_url = make_absolute_url(fields.get("url"), page_url)
        if len(title) <= 3 or not _is_meetup_link(original_url):
            return None
        # Dateless cards are skipped, as in scan_links
        date_text = fields.get("date") or fields.get("datetime", "")
        if not date_text:
            return None

        return RawRecord(
            title=title,
            original_url=original_url,
            source=self.source,
            date=date_text,
            venue=fields.get("venue", ""),
            price="Free",
            description=title,
            image_url=make_absolute_url(fields.get("image_url"), page_url) or "",
            organizer_name=self.default_organizer,
        )

    async def _card_fields(self, card: Any) -> dict[str, str]:
        fields = await extract_fields(card, self.field_schema)
        # The card may itself be the event link
        if not fields["url"]:
            fields["url"] = (await card.get_attribute("href") or "").strip()
        if not fields["title"]:
            fields["title"] = (await card.text_content() or "").strip()
        return fields

    async def extract_cards(self, page: Page, page_url: str) -> list[RawRecord]:
        first = await locate(page, CARD, timeout_ms=self.config.selector_timeout_ms)
        if first is None:
            return []

        for selector in CARD.selectors[CARD.selectors.index(first):]:
            cards = await page.query_selector_all(selector)
            records = []
            for card in cards:
                record = self.build_record(await self._card_fields(card), page_url)
                if record is not None:
                    records.append(record)

            self.logger.debug("card_strategy", selector=selector, cards=len(cards), records=len(records))
            if records:
                return records

        return []

    # ==========================================
    # Strategy 2: link scan
    # ==========================================

    def scan_links(self, html: str, page_url: str) -> list[RawRecord]:
        """Build records from event links when no card matched.

        Only the first LINK_SCAN_LIMIT links are considered. Links without
        any date hint are skipped since they could never be stored.
        """
        soup = BeautifulSoup(html, "html.parser")
        records: list[RawRecord] = []

        for i, link in enumerate(soup.select('a[href*="/events/"]')[:LINK_SCAN_LIMIT]):
            original_url = make_absolute_url(link.get("href"), page_url)
            if not _is_meetup_link(original_url):
                continue

            title = link.get_text(" ", strip=True) or link.get("aria-label") or f"Meetup Event {i + 1}"
            if len(title) <= 3:
                continue

            time_el = link.find("time")
            date_text = ""
            if time_el is not None:
                date_text = time_el.get("datetime") or time_el.get_text(" ", strip=True)
            if not date_text:
                continue

            records.append(
                RawRecord(
                    title=title,
                    original_url=original_url,
                    source=self.source,
                    date=date_text,
                    venue=self.default_venue,
                    price="Free",
                    description=title,
                    group=self.default_group,
                    organizer_name=self.default_group,
                )
            )

        return records

    async def extract_page(self, page: Page, page_url: str) -> list[RawRecord]:
        records = await self.extract_cards(page, page_url)
        if records:
            return records

        html = await page.content()
        records = self.scan_links(html, page_url)
        self.logger.info("link_scan", records=len(records))
        return records

    # ==========================================
    # Fallback
    # ==========================================

    def fallback_records(self) -> list[RawRecord]:
        today = date.today()
        return [
            RawRecord(
                title=event["title"],
                original_url=event["original_url"],
                source=EventSource.SYNTHETIC,
                date=today + timedelta(days=(i + 1) * FALLBACK_SPACING_DAYS),
                time=FALLBACK_TIME,
                venue=event["venue"],
                price="Free",
                description=event["description"],
                group=event["group"],
                organizer_name=event["group"],
            )
            for i, event in enumerate(FALLBACK_EVENTS)
        ]

