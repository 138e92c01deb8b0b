"""Unified exception hierarchy for the event ingestion pipeline.

Exception categories:
- Configuration errors (missing credentials, unknown adapters)
- Fetch errors (navigation, timeouts, extraction points not found)
- Parse errors (unparseable dates, invalid records)
- Storage errors (Supabase failures, store unavailable)
"""


class EventHubError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(self, message: str, source: str | None = None, details: dict | None = None):
        self.source = source
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        msg = super().__str__()
        if self.source:
            msg = f"[{self.source}] {msg}"
        return msg


# ============================================================
# CONFIGURATION ERRORS
# ============================================================


class ConfigurationError(EventHubError):
    """Base class for configuration-related errors."""


class AdapterNotFoundError(ConfigurationError):
    """Raised when no adapter is registered for a source."""

    def __init__(self, slug: str, available: list[str] | None = None):
        self.slug = slug
        self.available = available or []
        msg = "No adapter registered for source"
        if self.available:
            msg += f". Available: {', '.join(self.available)}"
        super().__init__(msg, source=slug)


# ============================================================
# FETCH ERRORS
# ============================================================


class FetchError(EventHubError):
    """Base class for data fetching errors."""


class NavigationError(FetchError):
    """Raised when a page cannot be loaded within its timeout."""

    def __init__(self, url: str, reason: str, source: str | None = None):
        self.url = url
        super().__init__(
            f"Navigation failed: {reason}",
            source=source,
            details={"url": url},
        )


class ExtractionError(FetchError):
    """Raised when no selector in a chain matches on a page."""

    def __init__(self, role: str, url: str | None = None, source: str | None = None):
        self.role = role
        super().__init__(
            f"No extraction point found for '{role}'",
            source=source,
            details={"role": role, "url": url},
        )


# ============================================================
# PARSE ERRORS
# ============================================================


class ParseError(EventHubError):
    """Base class for data parsing errors."""


class InvalidDateError(ParseError):
    """Raised when a date cannot be parsed."""

    def __init__(self, value: str, source: str | None = None):
        self.value = value
        super().__init__(f"Invalid date: {value!r}", source=source, details={"value": value})


# ============================================================
# STORAGE ERRORS
# ============================================================


class StorageError(EventHubError):
    """Base class for storage-related errors."""


class PersistenceError(StorageError):
    """Raised when a single record cannot be written."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        original_url: str | None = None,
        source: str | None = None,
    ):
        self.operation = operation
        self.original_url = original_url
        super().__init__(
            message,
            source=source,
            details={"operation": operation, "original_url": original_url},
        )


class StoreUnavailableError(StorageError):
    """Raised when the store itself cannot be reached. Fails the whole run."""
