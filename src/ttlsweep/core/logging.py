# src/ttlsweep/core/logging.py
"""Logging setup for the ttlsweep process.

Sweeper events (structlog) and library records (SQLAlchemy, Dynaconf via
stdlib logging) share one stdout handler, rendered either as JSON lines
or as console text.
"""

import logging
import sys

import structlog
from structlog.stdlib import ProcessorFormatter
from structlog.typing import Processor

# Held at WARNING or above whatever level the sweeper runs at
_QUIET_LOGGERS = ("sqlalchemy", "dynaconf")


def _render_chain(json_output: bool) -> list[Processor]:
    if json_output:
        return [
            ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [
        ProcessorFormatter.remove_processors_meta,
        structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()),
    ]


def configure_logging(*, json_output: bool = False, level: str = "INFO") -> None:
    """Send all log output to stdout at the given level.

    Calling it again replaces the previous configuration.

    Args:
        json_output: Render one JSON object per line instead of console text
        level: Root level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Raises:
        KeyError: If level is not a stdlib level name
    """
    log_level = logging.getLevelNamesMapping()[level.upper()]

    pre_chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    structlog.configure(
        processors=[*pre_chain, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ProcessorFormatter(processors=_render_chain(json_output), foreign_pre_chain=pre_chain))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))
