"""Logging configuration for selfupgrade.

Log lines go to stderr so that ``--json`` output on stdout stays parseable.
Every logger carries a ``component`` field (the last part of its module
name), and ``bind_upgrade_context`` attaches the executable and package path
of the running attempt to everything logged afterwards in the same task,
including installer and metadata reader events.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from selfupgrade.config import get_settings

UPGRADE_CONTEXT_KEYS = ("executable", "package_path")


def setup_logging(level: str | None = None) -> None:
    """Configure structured logging.

    *level* overrides ``Settings.log_level`` (the CLI passes ``DEBUG`` for
    ``--verbose``).
    """
    settings = get_settings()

    log_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            (
                structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
                if settings.is_development
                else structlog.processors.JSONRenderer()
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
    )

    # asyncio reports every subprocess transport at DEBUG
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def bind_upgrade_context(**values: Any) -> None:
    """Attach attempt details to all later log lines in this context.

    Only ``executable`` and ``package_path`` are accepted; ``None`` values
    are left out.
    """
    unknown = set(values) - set(UPGRADE_CONTEXT_KEYS)
    if unknown:
        raise TypeError(f"unknown upgrade context keys: {sorted(unknown)}")
    structlog.contextvars.bind_contextvars(
        **{key: value for key, value in values.items() if value is not None}
    )


def clear_upgrade_context() -> None:
    structlog.contextvars.unbind_contextvars(*UPGRADE_CONTEXT_KEYS)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger tagged with the component it belongs to."""
    return structlog.get_logger(name).bind(component=name.rsplit(".", 1)[-1])
