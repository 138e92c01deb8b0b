"""Pydantic models for events that map to the Supabase `events` table."""

from datetime import date as Date
from datetime import datetime
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from eventhub.utils.urls import is_valid_url


class Category(str, Enum):
    """Event category. OTHER is the catch-all."""

    MUSIC = "Music"
    ARTS = "Arts"
    SPORTS = "Sports"
    TECHNOLOGY = "Technology"
    BUSINESS = "Business"
    FOOD = "Food"
    HEALTH = "Health"
    EDUCATION = "Education"
    OTHER = "Other"


class EventSource(str, Enum):
    """Origin of an event record."""

    EVENTBRITE = "eventbrite"
    MEETUP = "meetup"
    SYNTHETIC = "synthetic"
    OTHER = "other"


class Venue(BaseModel):
    """Where an event takes place."""

    name: str = "TBA"
    address: str = ""
    city: str = "Sydney"
    state: str = "NSW"
    country: str = "Australia"


class Price(BaseModel):
    """Ticket price range."""

    min: float = Field(default=0, ge=0)
    max: float = Field(default=0, ge=0)
    currency: str = "AUD"
    is_free: bool = True

    @model_validator(mode="after")
    def min_not_above_max(self) -> "Price":
        if not self.is_free and self.min > self.max:
            raise ValueError("price min must be less than or equal to max")
        return self

    @classmethod
    def free(cls, currency: str = "AUD") -> "Price":
        return cls(min=0, max=0, currency=currency, is_free=True)


class Organizer(BaseModel):
    """Organizer information for an event."""

    name: str
    url: str | None = None


class RawRecord(BaseModel):
    """An event as extracted by an adapter, before normalization."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = ""
    original_url: str = ""
    source: EventSource = EventSource.OTHER

    # Free text as found in the markup, or an already resolved date
    date: str | Date = ""
    time: str | None = None
    venue: str = ""
    price: str | None = None
    description: str = ""
    group: str = ""
    image_url: str = ""

    # Explicit values override the heuristics when an adapter knows better
    category: Category | None = None
    tags: list[str] | None = None
    organizer_name: str | None = None


class EventRecord(BaseModel):
    """The canonical persisted event. `original_url` is its identity."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: Annotated[str, Field(min_length=1, max_length=500)]
    description: str = ""
    date: Date
    time: str = "00:00"
    venue: Venue = Field(default_factory=Venue)
    price: Price = Field(default_factory=Price)
    category: Category = Category.OTHER
    image_url: str = ""
    original_url: str
    source: EventSource
    organizer: Organizer | None = None
    tags: list[str] = Field(default_factory=list)
    is_active: bool = True

    # Set by the store, never by adapters
    scraped_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("original_url")
    @classmethod
    def original_url_is_absolute(cls, v: str) -> str:
        if not is_valid_url(v):
            raise ValueError(f"original_url must be an absolute http(s) URL: {v!r}")
        return v

    @field_validator("time")
    @classmethod
    def time_defaults(cls, v: str) -> str:
        return v or "00:00"

    @field_validator("tags")
    @classmethod
    def tags_unique(cls, v: list[str]) -> list[str]:
        return list(dict.fromkeys(v))

    @model_validator(mode="after")
    def description_falls_back_to_title(self) -> "EventRecord":
        if not self.description:
            self.description = self.title
        return self

    def to_row(self) -> dict[str, Any]:
        """Convert to a row for the Supabase `events` table.

        Every field is written (None included) so an upsert is a full
        overwrite. `scraped_at` is left out so the stored value survives
        updates; the column default fills it on insert.
        """
        return {
            "title": self.title,
            "description": self.description,
            "date": self.date.isoformat(),
            "time": self.time,
            "venue_name": self.venue.name,
            "venue_address": self.venue.address,
            "venue_city": self.venue.city,
            "venue_state": self.venue.state,
            "venue_country": self.venue.country,
            "price_min": self.price.min,
            "price_max": self.price.max,
            "price_currency": self.price.currency,
            "is_free": self.price.is_free,
            "category": self.category.value,
            "image_url": self.image_url,
            "original_url": self.original_url,
            "source": self.source.value,
            "organizer_name": self.organizer.name if self.organizer else None,
            "organizer_url": self.organizer.url if self.organizer else None,
            "tags": list(self.tags),
            "is_active": self.is_active,
        }

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "EventRecord":
        """Build a record from a row returned by Supabase."""
        organizer = None
        if row.get("organizer_name"):
            organizer = Organizer(name=row["organizer_name"], url=row.get("organizer_url"))

        return cls(
            title=row["title"],
            description=row.get("description") or "",
            date=row["date"],
            time=row.get("time") or "00:00",
            venue=Venue(
                name=row.get("venue_name") or "TBA",
                address=row.get("venue_address") or "",
                city=row.get("venue_city") or "Sydney",
                state=row.get("venue_state") or "NSW",
                country=row.get("venue_country") or "Australia",
            ),
            price=Price(
                min=row.get("price_min") or 0,
                max=row.get("price_max") or 0,
                currency=row.get("price_currency") or "AUD",
                is_free=row.get("is_free", True),
            ),
            category=row.get("category") or Category.OTHER,
            image_url=row.get("image_url") or "",
            original_url=row["original_url"],
            source=row["source"],
            organizer=organizer,
            tags=row.get("tags") or [],
            is_active=row.get("is_active", True),
            scraped_at=row.get("scraped_at"),
            updated_at=row.get("updated_at"),
        )


class EventBatch(BaseModel):
    """Raw records from a single adapter run."""

    source_id: str
    source_name: str
    scraped_at: str
    records: list[RawRecord] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    used_fallback: bool = False

    @property
    def record_count(self) -> int:
        """Number of extracted records."""
        return len(self.records)

    @property
    def error_count(self) -> int:
        """Number of errors raised while fetching."""
        return len(self.errors)
