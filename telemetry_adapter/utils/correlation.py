"""Lightweight poll correlation ID utilities for structured logging.

Provides a per-poll-cycle identifier via a ContextVar so that the
per-device tasks spawned during a cycle can include the same ``poll_id`` in
their log records. Tasks created with ``asyncio.create_task`` copy the
current context, so the id set before fan-out is visible inside every task.
"""

from __future__ import annotations

import uuid
from contextvars import ContextVar

_poll_id_var: ContextVar[str] = ContextVar("poll_id", default="")


def set_poll_id(poll_id: str) -> None:
    """Set the current poll correlation id in a context variable."""

    _poll_id_var.set(poll_id)


def get_poll_id() -> str:
    """Return the current poll correlation id, or empty string."""

    return _poll_id_var.get()


def new_poll_id() -> str:
    """Generate, set and return a fresh poll correlation id."""

    poll_id = uuid.uuid4().hex[:12]
    set_poll_id(poll_id)
    return poll_id
