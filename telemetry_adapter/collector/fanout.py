"""Concurrent per-device query fan-out.

Vendor APIs that are queried per device get one task per device
identifier. Every task is started before any result is awaited and the
coordinator returns only after all of them completed, with each device's
outcome recorded in a `PartialResult`.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence

from ..utils.correlation import get_poll_id
from ..utils.partial_results import PartialResult, gather_partial

logger = logging.getLogger(__name__)

# Identifier recorded for the single request made when no devices are listed.
ALL_DEVICES = "*"

QueryFn = Callable[[Optional[str]], Awaitable[Any]]


async def fan_out(
    device_ids: Sequence[str],
    query: QueryFn,
    operation_type: str = "device_query",
) -> PartialResult:
    """Run ``query`` once per device identifier and join the outcomes.

    Parameters
    ----------
    device_ids: Sequence[str]
        Devices to query. An empty sequence means "query all": ``query`` is
        called once with ``None`` and its outcome recorded under ``"*"``.
    query: Callable[[Optional[str]], Awaitable[Any]]
        Coroutine function issuing one request for a device.
    operation_type: str
        Label used in log event names.

    Returns
    -------
    PartialResult
        Successful results in device order plus one failure per failed device.
    """
    operations: Dict[str, Awaitable[Any]]
    if device_ids:
        # Duplicate ids would collapse into one dict key; keep first occurrence
        unique = list(dict.fromkeys(device_ids))
        operations = {device_id: query(device_id) for device_id in unique}
    else:
        operations = {ALL_DEVICES: query(None)}

    logger.debug(
        "fanout.start",
        extra={
            "poll_id": get_poll_id(),
            "operation_type": operation_type,
            "devices": list(operations.keys()),
        },
    )
    return await gather_partial(operations, operation_type=operation_type)
