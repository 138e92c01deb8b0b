"""structlog setup for scraper runs.

structlog renders through the standard ``logging`` module, so one event can
go to stdout (console or JSON) and, when ``LOG_FILE`` is set, to a JSON lines
file at the same time. Library loggers (httpx, apscheduler, playwright) share
the same handlers and formatting.
"""

import logging
import sys
from pathlib import Path

import structlog
from structlog.contextvars import bound_contextvars
from structlog.types import Processor

_PRE_CHAIN: list[Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.StackInfoRenderer(),
]


def _formatter(renderer: Processor) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_PRE_CHAIN,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )


def _json_renderer() -> Processor:
    return structlog.processors.JSONRenderer()


def setup_logging(
    level: str = "INFO",
    log_format: str = "console",
    log_file: str | None = None,
) -> None:
    """Route structlog through the root logger.

    Args:
        level: DEBUG, INFO, WARNING or ERROR
        log_format: "console" for coloured output, "json" for one object per line
        log_file: Optional path; receives JSON lines regardless of ``log_format``
    """
    log_level = logging.getLevelName(level.upper())

    if log_format == "json":
        stdout_renderer: Processor = _json_renderer()
    else:
        stdout_renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    handlers: list[logging.Handler] = []

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(_formatter(stdout_renderer))
    handlers.append(stream_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(_formatter(_json_renderer()))
        handlers.append(file_handler)

    root = logging.getLogger()
    for handler in root.handlers[:]:
        if getattr(handler, "_eventhub", False):
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        handler._eventhub = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.setLevel(log_level)

    structlog.configure(
        processors=[
            *_PRE_CHAIN,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        # Re-running setup (tests, CLI) must take effect on existing loggers
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def log_adapter_run(source_id: str, source_name: str):
    """Bind the running adapter to every log line emitted inside the block."""
    return bound_contextvars(source_id=source_id, source_name=source_name)
