"""Adapters for the event sources (one per origin)."""

from typing import TYPE_CHECKING, Callable

from eventhub.core.exceptions import AdapterNotFoundError

if TYPE_CHECKING:
    from eventhub.config import Settings
    from eventhub.core.base_adapter import BaseAdapter

# Registry of all available adapters
ADAPTER_REGISTRY: dict[str, type["BaseAdapter"]] = {}

# Run order for a full pipeline run
DEFAULT_ORDER: tuple[str, ...] = ("synthetic", "eventbrite", "meetup")

# Flag to prevent circular imports during loading
_adapters_loaded = False


def register_adapter(source_id: str) -> Callable[[type["BaseAdapter"]], type["BaseAdapter"]]:
    """Decorator to register an adapter in the registry.

    Usage:
        @register_adapter("eventbrite")
        class EventbriteAdapter(BrowserAdapter):
            ...
    """

    def decorator(adapter_class: type["BaseAdapter"]) -> type["BaseAdapter"]:
        ADAPTER_REGISTRY[source_id] = adapter_class
        return adapter_class

    return decorator


def get_adapter(source_id: str) -> type["BaseAdapter"] | None:
    """Get an adapter class by its source_id."""
    _ensure_adapters_loaded()
    return ADAPTER_REGISTRY.get(source_id)


def list_adapters() -> list[str]:
    """List all registered adapter source_ids."""
    _ensure_adapters_loaded()
    return list(ADAPTER_REGISTRY.keys())


def create_adapter(source_id: str, settings: "Settings | None" = None) -> "BaseAdapter":
    """Instantiate a registered adapter.

    Raises:
        AdapterNotFoundError: no adapter is registered under source_id
    """
    adapter_class = get_adapter(source_id)
    if adapter_class is None:
        raise AdapterNotFoundError(source_id, available=list_adapters())
    return adapter_class.from_settings(settings)


def _ensure_adapters_loaded() -> None:
    """Ensure all adapter modules are loaded."""
    global _adapters_loaded
    if _adapters_loaded:
        return
    _adapters_loaded = True

    # Import adapter modules to trigger registration
    from eventhub.adapters import synthetic_adapter  # noqa: F401
    from eventhub.adapters import eventbrite_adapter  # noqa: F401
    from eventhub.adapters import meetup_adapter  # noqa: F401
