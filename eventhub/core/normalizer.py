"""Turn adapter output (RawRecord) into the canonical EventRecord."""

from datetime import date, datetime

from eventhub.core.category_classifier import DEFAULT_TAG_VOCABULARY, categorize, extract_tags
from eventhub.core.event_model import EventRecord, Organizer, RawRecord
from eventhub.core.exceptions import InvalidDateError
from eventhub.utils.date_parser import extract_time, parse_event_date
from eventhub.utils.locations import DEFAULT_REGION, Region, parse_venue
from eventhub.utils.prices import parse_price


def resolve_date(raw: RawRecord, today: date | None = None) -> date:
    """Resolve the raw date to a calendar date.

    Raises:
        InvalidDateError: the text matched no supported format
    """
    if isinstance(raw.date, datetime):
        return raw.date.date()
    if isinstance(raw.date, date):
        return raw.date

    parsed = parse_event_date(raw.date, today=today)
    if parsed is None:
        raise InvalidDateError(raw.date, source=raw.source.value)
    return parsed


def normalize_record(
    raw: RawRecord,
    region: Region = DEFAULT_REGION,
    currency: str = "AUD",
    tag_vocabulary: tuple[str, ...] = DEFAULT_TAG_VOCABULARY,
    today: date | None = None,
) -> EventRecord:
    """Apply the field normalizers to one raw record.

    Explicit category/tags on the raw record take precedence over the
    keyword heuristics.

    Raises:
        InvalidDateError: the date could not be resolved
        pydantic.ValidationError: the record violates an EventRecord invariant
    """
    event_date = resolve_date(raw, today=today)

    time_text = raw.time
    if not time_text:
        time_text = extract_time(raw.date if isinstance(raw.date, str) else None)

    category = raw.category or categorize(raw.title, raw.description, raw.group)
    tags = raw.tags if raw.tags is not None else extract_tags(
        raw.title, raw.description, raw.group, vocabulary=tag_vocabulary
    )

    organizer = None
    organizer_name = raw.organizer_name or raw.group
    if organizer_name:
        organizer = Organizer(name=organizer_name, url=raw.original_url or None)

    return EventRecord(
        title=raw.title,
        description=raw.description or raw.title,
        date=event_date,
        time=time_text,
        venue=parse_venue(raw.venue, region=region),
        price=parse_price(raw.price, currency=currency),
        category=category,
        image_url=raw.image_url,
        original_url=raw.original_url,
        source=raw.source,
        organizer=organizer,
        tags=tags,
    )
