"""
Per-device outcome tracking for poll cycles.

A poll cycle issues one request per device. Each request either yields a
decoded response or fails on its own; `gather_partial` runs them all and
returns a `PartialResult` that keeps both sides, so a cycle can emit what it
read and still name every device it could not read.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Dict, List, Tuple, Type

import httpx

from ..adapters.errors import (
    VendorConfigError,
    VendorDecodeError,
    VendorStatusError,
    VendorTransportError,
)

logger = logging.getLogger(__name__)

# Failure kinds that may clear up by the next poll cycle.
RETRYABLE_KINDS = frozenset({"timeout", "connection_error", "server_error", "rate_limit"})

_STATUS_KINDS: Dict[int, str] = {
    401: "auth_error",
    403: "auth_error",
    404: "not_found",
    429: "rate_limit",
}

# Checked in order; the first matching entry wins.
_EXCEPTION_KINDS: Tuple[Tuple[Tuple[Type[BaseException], ...], str], ...] = (
    ((VendorDecodeError,), "decode_error"),
    ((VendorConfigError,), "config_error"),
    ((httpx.TimeoutException, asyncio.TimeoutError), "timeout"),
    ((httpx.TransportError,), "connection_error"),
    ((ValueError,), "parse_error"),
    ((KeyError,), "missing_field"),
)

_MAX_LISTED_IDENTIFIERS = 3


@dataclass
class FailureInfo:
    """
    One failed device request.

    Attributes
    ----------
    identifier : str
        Device the request was made for (``"*"`` for an account-wide query)
    error : str
        Error message
    error_type : str
        Failure kind, e.g. "server_error", "timeout", "decode_error"
    retryable : bool
        Whether the next poll cycle may succeed for this device
    exception : BaseException or None
        The raised exception, kept so callers can chain it
    """

    identifier: str
    error: str
    error_type: str
    retryable: bool = False
    exception: Any = field(default=None, repr=False, compare=False)


@dataclass
class PartialResult:
    """Decoded responses and failures of one fan-out, in request order."""

    successes: List[Any] = field(default_factory=list)
    failures: List[FailureInfo] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.successes) + len(self.failures)

    @property
    def success_rate(self) -> float:
        """Share of requests that succeeded, 0.0 when nothing ran."""
        return len(self.successes) / self.total if self.total else 0.0

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)

    @property
    def all_succeeded(self) -> bool:
        return bool(self.successes) and not self.failures

    @property
    def all_failed(self) -> bool:
        return bool(self.failures) and not self.successes

    @property
    def failed_identifiers(self) -> List[str]:
        return [f.identifier for f in self.failures]

    def record_failure(self, identifier: str, exc: BaseException) -> FailureInfo:
        """Classify ``exc`` and append it as the failure of ``identifier``."""
        kind = classify_error(exc)
        info = FailureInfo(
            identifier=identifier,
            error=str(exc),
            error_type=kind,
            retryable=is_retryable(kind),
            exception=exc,
        )
        self.failures.append(info)
        return info


async def gather_partial(
    operations: Dict[str, Awaitable[Any]],
    operation_type: str = "operation",
) -> PartialResult:
    """
    Await every operation concurrently and split the outcomes.

    Each awaitable is wrapped in a task before any of them is awaited, and the
    call returns only after all tasks finished, whether they failed or not.

    Parameters
    ----------
    operations : Dict[str, Awaitable]
        Device identifier to pending request
    operation_type : str
        Label used in log event names

    Returns
    -------
    PartialResult
        Successes in the order of ``operations`` and one failure per failed
        identifier

    Raises
    ------
    ValueError
        If ``operations`` is empty

    Examples
    --------
    >>> result = await gather_partial(
    ...     {"SN-1": adapter.fetch_observations("SN-1"),
    ...      "SN-2": adapter.fetch_observations("SN-2")},
    ...     "hobolink_query",
    ... )
    >>> result.failed_identifiers
    ['SN-2']
    """
    if not operations:
        raise ValueError("operations dictionary cannot be empty")

    identifiers = list(operations)
    tasks = [asyncio.ensure_future(op) for op in operations.values()]
    outcomes = await asyncio.gather(*tasks, return_exceptions=True)

    result = PartialResult()
    for identifier, outcome in zip(identifiers, outcomes):
        if not isinstance(outcome, Exception):
            result.successes.append(outcome)
            continue
        info = result.record_failure(identifier, outcome)
        logger.warning(
            f"partial_results.{operation_type}.failed",
            extra={
                "identifier": identifier,
                "error_type": info.error_type,
                "retryable": info.retryable,
                "error": info.error,
            },
        )

    logger.info(
        f"partial_results.{operation_type}.complete",
        extra={
            "total": result.total,
            "successes": len(result.successes),
            "failures": len(result.failures),
        },
    )
    return result


def classify_error(exc: BaseException) -> str:
    """Map an exception raised by a device request to a failure kind."""
    if isinstance(exc, VendorStatusError):
        return _classify_status(exc.status_code)
    if isinstance(exc, VendorTransportError):
        return "timeout" if exc.timeout else "connection_error"
    for types, kind in _EXCEPTION_KINDS:
        if isinstance(exc, types):
            return kind
    return "unknown_error"


def _classify_status(status: int) -> str:
    if status >= 500:
        return "server_error"
    return _STATUS_KINDS.get(status, "http_error")


def is_retryable(error_type: str) -> bool:
    return error_type in RETRYABLE_KINDS


def format_failure_summary(
    result: PartialResult, operation_type: str = "operation"
) -> str:
    """
    Describe the failures of a fan-out for logs and error messages.

    Failures are grouped by kind; each group lists up to three affected
    identifiers.
    """
    if not result.has_failures:
        return f"{operation_type}: all {len(result.successes)} succeeded"

    grouped: Dict[str, List[FailureInfo]] = {}
    for failure in result.failures:
        grouped.setdefault(failure.error_type, []).append(failure)

    lines = [
        f"{operation_type}: {len(result.successes)} ok, {len(result.failures)} failed "
        f"of {result.total}"
    ]
    for kind, failures in grouped.items():
        shown = [f.identifier for f in failures[:_MAX_LISTED_IDENTIFIERS]]
        hidden = len(failures) - len(shown)
        if hidden:
            shown.append(f"+{hidden} more")
        note = "retryable" if failures[0].retryable else "permanent"
        lines.append(f"  {kind} x{len(failures)} [{note}]: {', '.join(shown)}")
    return "\n".join(lines)
