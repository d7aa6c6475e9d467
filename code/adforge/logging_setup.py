"""structlog setup for the AdForge client and the ``adforge`` CLI.

Logs always go to stderr. The CLI prints results and progress lines on
stdout, so ``adforge job status <id> | jq`` keeps working whatever the log
level.

Rendering depends on ``ENVIRONMENT``: a coloured console renderer for
development/local/test, one JSON object per line otherwise (CI, cron jobs,
anything that ships logs). Every event is tagged with the client name, the
environment and the package version.

A library caller that already configures structlog can skip this module
entirely; the client only ever calls ``structlog.get_logger(__name__)``.
"""
from __future__ import annotations

import logging
import os
import sys
from typing import Any, MutableMapping

import structlog

from adforge import __version__

_LOCAL_ENVIRONMENTS = ("development", "local", "test")

# Per-request chatter from the HTTP stack and the state store
_NOISY_LOGGERS = ("httpx", "httpcore", "aiosqlite")


def configure_logging(level: str | None = None) -> None:
    """Configure structlog and stdlib logging, both on stderr.

    ``level`` falls back to ``LOG_LEVEL`` and then to ``INFO``. The CLI passes
    its ``--log-level`` flag straight through.
    """
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    _route_stdlib_to_stderr(log_level)

    pretty = os.getenv("ENVIRONMENT", "development").lower() in _LOCAL_ENVIRONMENTS
    structlog.configure(
        processors=_processors(pretty),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    structlog.get_logger(__name__).debug("logging_configured", level=level_name, pretty=pretty)


def _processors(pretty: bool) -> list:
    chain: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        _tag_client,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    chain.append(structlog.dev.ConsoleRenderer(colors=True) if pretty else structlog.processors.JSONRenderer())
    return chain


def _tag_client(
    logger: Any,
    method: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    event_dict.setdefault("service", os.getenv("ADFORGE_SERVICE", "adforge-client"))
    event_dict.setdefault("env", os.getenv("ENVIRONMENT", "development"))
    event_dict.setdefault("version", __version__)
    return event_dict


def _route_stdlib_to_stderr(level: int) -> None:
    root = logging.getLogger()
    root.setLevel(level)

    # An embedding application may have installed its own handlers already
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(level)
        root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
