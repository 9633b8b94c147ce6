"""Observability utilities: logging setup.

Adapter log records use dotted event names as messages and pass their
context through ``extra``. `ContextualFormatter` appends the known context
keys to each line so that a poll cycle can be followed by its ``poll_id``.
Logs go to stderr; stdout carries the collected points.
"""

from __future__ import annotations

import logging
import sys
from typing import Iterable, Optional, Sequence

CONTEXT_KEYS: Sequence[str] = (
    "poll_id",
    "source_id",
    "sources",
    "server",
    "loggers",
    "measurement",
    "operation_type",
    "devices",
    "identifier",
    "method",
    "url",
    "timeout_seconds",
    "status",
    "status_code",
    "body_preview",
    "error_type",
    "retryable",
    "error",
    "total",
    "successes",
    "failures",
    "points",
    "sensors",
    "failed_loggers",
    "failed_sources",
    "invalid_value",
    "reading",
    "segments",
    "unavailable",
    "api_message",
)

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


class ContextualFormatter(logging.Formatter):
    """Formatter that appends ``key=value`` pairs for known ``extra`` keys."""

    def __init__(
        self,
        fmt: Optional[str] = None,
        datefmt: Optional[str] = None,
        context_keys: Optional[Iterable[str]] = None,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._context_keys = tuple(context_keys or CONTEXT_KEYS)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        parts = []
        for key in self._context_keys:
            value = getattr(record, key, None)
            if value is None or value == "":
                continue
            parts.append(f"{key}={value}")
        if parts:
            return f"{message} | {' '.join(parts)}"
        return message


def setup_logging(level: str = "INFO") -> None:
    """Configure application logging.

    Parameters
    ----------
    level: str
        Logging level name (e.g., "DEBUG", "INFO"). Defaults to "INFO".

    Behavior
    --------
    - Installs a stderr handler with `ContextualFormatter` on the root logger.
    - Keeps httpx/httpcore request logging at WARNING unless DEBUG is asked
      for; their INFO lines would repeat every poll.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        ContextualFormatter(fmt=_LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S")
    )
    logging.basicConfig(level=numeric_level, handlers=[handler], force=True)

    transport_level = logging.DEBUG if numeric_level <= logging.DEBUG else logging.WARNING
    for logger_name in ("httpx", "httpcore"):
        logging.getLogger(logger_name).setLevel(transport_level)
