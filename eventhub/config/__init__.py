"""Configuration for the event ingestion pipeline."""

from eventhub.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
