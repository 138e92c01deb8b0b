"""Logging configuration and handlers."""

from eventhub.logging.logger import get_logger, log_adapter_run, setup_logging

__all__ = ["get_logger", "log_adapter_run", "setup_logging"]
