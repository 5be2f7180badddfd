"""
utils/logging.py — structlog configuration for the engine, CLI and API.

Output goes to stderr so the CLI can print match tables on stdout. The
format (JSON or console) and level come from settings unless overridden.
Bearer tokens and API keys never reach the log stream: any event field
whose name looks like a credential is masked by redact_secrets().

Usage:
    from tendermatch_engine.utils.logging import configure_logging

    configure_logging()                        # settings.log_level / log_format
    configure_logging("DEBUG", "json")

    log = structlog.get_logger(__name__).bind(generation=3)
    log.info("refresh_loaded", records=412)
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from tendermatch_shared.config import settings

# Event keys masked before rendering
SECRET_KEYS = frozenset({"token", "authorization", "api_key", "openai_api_key", "password"})

# Chatty third-party loggers; httpx logs every request URL at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "openai", "hpack")


def redact_secrets(_logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog processor: mask credential-looking fields."""
    for key in event_dict.keys() & SECRET_KEYS:
        value = event_dict[key]
        if value:
            event_dict[key] = f"***{str(value)[-4:]}" if len(str(value)) > 8 else "***"
    return event_dict


def configure_logging(
    log_level: str | None = None,
    log_format: str | None = None,
) -> None:
    """
    Configure structlog and stdlib logging for the process.

    Safe to call more than once; the last call wins.
    """
    level_name = (log_level or settings.log_level).upper()
    level = getattr(logging, level_name, logging.INFO)
    fmt = log_format or settings.log_format

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level, force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    if fmt == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            redact_secrets,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
