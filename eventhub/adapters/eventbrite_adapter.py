"""Adapter for Eventbrite listings in the serving region.

Eventbrite search pages are rendered client-side and their markup changes
often, so every field is read through an ordered selector chain. The listing
lazy-loads cards while scrolling.

Eventbrite has no fallback: when every listing URL fails the adapter
contributes zero records for the run.
"""

from playwright.async_api import Page

from eventhub.adapters import register_adapter
from eventhub.core.base_adapter import BrowserAdapter
from eventhub.core.event_model import EventSource, RawRecord
from eventhub.core.exceptions import ExtractionError
from eventhub.core.selectors import SelectorChain
from eventhub.utils.urls import make_absolute_url

EVENTBRITE_TAGS = (
    "networking",
    "workshop",
    "conference",
    "exhibition",
    "festival",
    "seminar",
    "meetup",
)

CARD = SelectorChain(
    "event card",
    (
        '[data-testid="event-card"]',
        ".search-event-card",
        ".event-card",
        ".eds-event-card",
        '[class*="event"]',
        "article",
        ".event-listing",
    ),
)

FIELDS: dict[str, SelectorChain] = {
    "title": SelectorChain(
        "title",
        (
            '[data-testid="event-title"]',
            ".event-title",
            "h2 a",
            "h3 a",
            ".eds-event-card__formatted-name--is-clamped",
            ".event-card__clamp-line--one",
            'a[data-spec="event-title"]',
        ),
    ),
    "date": SelectorChain(
        "date",
        (
            '[data-testid="event-datetime"]',
            ".event-date",
            '[data-spec="event-datetime"]',
            ".eds-event-card__sub-content time",
            ".event-card__date",
        ),
    ),
    "url": SelectorChain(
        "link",
        ('a[href*="/e/"]', 'a[href*="eventbrite"]', "a"),
        attribute="href",
    ),
    "venue": SelectorChain(
        "venue",
        (
            '[data-testid="event-location"]',
            ".event-venue",
            ".eds-event-card__sub-content div",
        ),
    ),
    "price": SelectorChain(
        "price",
        (
            '[data-testid="event-price"]',
            ".event-price",
            ".eds-event-card__formatted-price",
        ),
    ),
    "image_url": SelectorChain("image", ("img",), attribute="src"),
    "description": SelectorChain(
        "description",
        (".event-description", ".eds-event-card__primary-content", "p"),
    ),
}


@register_adapter("eventbrite")
class EventbriteAdapter(BrowserAdapter):
    """Eventbrite search results for Sydney."""

    source_id = "eventbrite"
    source_name = "Eventbrite - Sydney"
    source = EventSource.EVENTBRITE
    tag_vocabulary = EVENTBRITE_TAGS

    urls = (
        "https://www.eventbrite.com.au/d/australia--sydney/events/",
        "https://www.eventbrite.com.au/d/australia--sydney/all-events/",
    )
    card_chain = CARD
    field_schema = FIELDS
    auto_scroll = True

    organizer_name = "Eventbrite Organizer"

    def build_record(self, fields: dict[str, str], page_url: str) -> RawRecord | None:
        title = fields.get("title", "")
        original_url = make_absolute_url(fields.get("url"), page_url)
        if not title or not original_url:
            return None

        return RawRecord(
            title=title,
            original_url=original_url,
            source=self.source,
            date=fields.get("date", ""),
            venue=fields.get("venue", ""),
            price=fields.get("price") or None,
            description=fields.get("description") or title,
            image_url=make_absolute_url(fields.get("image_url"), page_url) or "",
            organizer_name=self.organizer_name,
        )

    async def extract_page(self, page: Page, page_url: str) -> list[RawRecord]:
        try:
            return await self.extract_cards(page, page_url)
        except ExtractionError:
            # Usually a bot wall or a redesign; the title tells which
            title = await page.title()
            self.logger.info("no_cards_found", page_title=title[:100], url=page.url)
            raise
