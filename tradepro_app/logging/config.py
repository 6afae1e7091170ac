"""
Centralized logging configuration for the TradePro data core.

Normalizers, extractors and the journal store all log through loggers
obtained here, so skipped records and degraded lookups show up with the
same structured fields (record_kind, reason, path) whatever component
dropped them.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger, Processor

from ..config.defaults import LoggingParams

_SHARED_PROCESSORS: list[Processor] = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
]


def _build_processors(format_json: bool,
                      include_timestamp: bool,
                      include_caller: bool,
                      extra_processors: Optional[list[Processor]]) -> list[Processor]:
    processors = list(_SHARED_PROCESSORS)

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso", utc=True))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.MODULE,
                        structlog.processors.CallsiteParameter.LINENO]
        ))

    processors.extend(extra_processors or [])

    # Renderer must come last
    if format_json:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    return processors


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list[Processor]] = None
) -> None:
    """
    Configure structlog on top of the standard library logging module.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: Emit one JSON object per line instead of console output
        include_timestamp: Add an ISO-8601 UTC timestamp to every event
        include_caller: Add the emitting module and line number
        extra_processors: Processors inserted before the renderer

    Raises:
        ValueError: If the level name is unknown
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        raise ValueError(f"Unknown log level: {level}")

    logging.basicConfig(
        level=log_level,
        stream=sys.stderr,
        format="%(message)s",
        force=True,
    )

    structlog.configure(
        processors=_build_processors(format_json, include_timestamp, include_caller, extra_processors),
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_from_params(params: LoggingParams, **kwargs: Any) -> None:
    """Configure logging from the ``logging`` section of the configuration."""
    configure_logging(level=params.level, format_json=params.format_json, **kwargs)


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a structlog logger.

    Args:
        name: Logger name (typically __name__)
    """
    return structlog.get_logger(name)


def log_skipped_record(
    logger: FilteringBoundLogger,
    record_kind: str,
    reason: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a record that was dropped while the rest of its document was kept.

    Args:
        logger: Structlog logger instance
        record_kind: What was dropped ("open_map_key", "chart_tuple", ...)
        reason: Why it was dropped
        context: Location of the record (path, index, series)
    """
    logger.bind(record_kind=record_kind, reason=reason, **(context or {})).warning(
        "Skipped malformed record"
    )
