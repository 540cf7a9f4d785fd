"""
Structured logging for the metric engine.

Every module gets a named structlog logger and logs snake_case events
with key/value context (`_log.debug("cls_session_closed", gap_ms=1200)`).

Diagnostics about the host (an observation category that does not exist,
a navigation record that is missing) are never raised. They go through
`diagnostic()`, which only reaches warning level when the caller opted in
with the debug flag.
"""

from __future__ import annotations

import logging
import sys

import structlog


def setup_logging(*, level: str = "INFO", json_output: bool = False) -> None:
    """
    Call once at process startup. Configures both stdlib logging
    and structlog in one shot.
    """
    shared_processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a named, bound logger. Use this everywhere."""
    return structlog.get_logger(name)


def diagnostic(log: structlog.stdlib.BoundLogger, event: str, *, debug: bool, **kw) -> None:
    """Log a non-fatal host diagnostic: warning when debug is on, debug otherwise."""
    if debug:
        log.warning(event, **kw)
    else:
        log.debug(event, **kw)
