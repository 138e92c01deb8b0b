"""Core modules for the ingestion pipeline."""

from eventhub.core.event_model import (
    Category,
    EventBatch,
    EventRecord,
    EventSource,
    Organizer,
    Price,
    RawRecord,
    Venue,
)
from eventhub.core.exceptions import (
    AdapterNotFoundError,
    ConfigurationError,
    EventHubError,
    ExtractionError,
    FetchError,
    InvalidDateError,
    NavigationError,
    ParseError,
    PersistenceError,
    StorageError,
    StoreUnavailableError,
)

__all__ = [
    # Event models
    "Category",
    "EventBatch",
    "EventRecord",
    "EventSource",
    "Organizer",
    "Price",
    "RawRecord",
    "Venue",
    # Exceptions
    "EventHubError",
    "ConfigurationError",
    "AdapterNotFoundError",
    "FetchError",
    "NavigationError",
    "ExtractionError",
    "ParseError",
    "InvalidDateError",
    "StorageError",
    "PersistenceError",
    "StoreUnavailableError",
]
