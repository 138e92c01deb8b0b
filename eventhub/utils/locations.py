"""Venue parsing and serving-region defaults."""

from dataclasses import dataclass

from eventhub.config import Settings, get_settings
from eventhub.core.event_model import Venue


@dataclass(frozen=True)
class Region:
    """The region the dataset serves. Fills venue fields the markup never has."""

    city: str = "Sydney"
    state: str = "NSW"
    country: str = "Australia"

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "Region":
        settings = settings or get_settings()
        return cls(
            city=settings.region_city,
            state=settings.region_state,
            country=settings.region_country,
        )


DEFAULT_REGION = Region()


def parse_venue(venue_str: str | None, region: Region = DEFAULT_REGION) -> Venue:
    """Parse a free-text venue line.

    The text before the first comma is the venue name and the whole line is
    the address. Online events keep their label as the name.

    Args:
        venue_str: Venue text (e.g., "Sydney Opera House, Bennelong Point, Sydney NSW")
        region: Region used for city/state/country

    Returns:
        Venue; a "TBA" venue when the text is empty
    """
    text = (venue_str or "").strip()
    regional = {"city": region.city, "state": region.state, "country": region.country}

    if not text:
        return Venue(name="TBA", address="", **regional)

    if "online" in text.lower():
        return Venue(name=text, address="Online", **regional)

    return Venue(name=text.split(",")[0].strip() or "TBA", address=text, **regional)
