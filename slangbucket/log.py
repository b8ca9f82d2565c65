"""Logging setup for processes embedding a bucket store.

The library only emits records through ``structlog.get_logger(__name__)``; it
never configures logging itself. Applications (and the CLI) call
`configure_logging()` once at startup. Records from redis-py's stdlib loggers
are rendered through the same chain, so backend connection warnings and bucket
events share one format.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.stdlib import ProcessorFormatter

# redis-py logs every connection checkout at DEBUG
_REDIS_LOGGERS = ("redis", "redis.connection")


def _drop_formatter_bookkeeping(
    logger: logging.Logger | None, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    event_dict.pop("_record", None)
    event_dict.pop("_from_structlog", None)
    return event_dict


def _renderer(json_output: bool) -> Any:
    if json_output:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def configure_logging(*, json_output: bool = False, level: str = "INFO") -> None:
    """Send structlog and stdlib records to stderr through one handler.

    Args:
        json_output: One JSON object per line, e.g. for a log shipper. Otherwise
            ``key=value`` console lines.
        level: Minimum level name, case-insensitive. Redis client loggers are
            never set below WARNING.
    """
    log_level = getattr(logging, level.upper())

    pre_chain: list[Any] = [
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    structlog.configure(
        processors=[*pre_chain, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        ProcessorFormatter(
            processors=[
                _drop_formatter_bookkeeping,
                structlog.processors.format_exc_info,
                _renderer(json_output),
            ],
            foreign_pre_chain=pre_chain,
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)

    for name in _REDIS_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))
