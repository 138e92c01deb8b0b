"""Multi-source event listings scraper and ingestion pipeline."""

__version__ = "1.0.0"
