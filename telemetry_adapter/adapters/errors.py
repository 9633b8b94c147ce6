"""
Exception types raised by vendor adapters.

Every failure of a vendor request is reported as a subclass of
`VendorError` so callers can tell transport, protocol and decode failures
apart without inspecting httpx internals.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..utils.partial_results import PartialResult


class VendorError(Exception):
    """Base class for every failure raised by a vendor adapter."""


class VendorConfigError(VendorError):
    """Raised when an adapter is missing settings required for a request."""


class VendorTransportError(VendorError):
    """Connection or timeout failure while talking to the vendor API."""

    def __init__(self, message: str, *, timeout: bool = False) -> None:
        super().__init__(message)
        self.timeout = timeout


class VendorStatusError(VendorError):
    """Vendor API answered with an unexpected HTTP status."""

    def __init__(self, vendor: str, status_code: int, expected: int) -> None:
        super().__init__(
            f"{vendor}: API responded with status-code {status_code}, "
            f"expected {expected}"
        )
        self.vendor = vendor
        self.status_code = status_code
        self.expected = expected


class VendorDecodeError(VendorError):
    """Response body was not valid JSON or lacked required envelope fields."""


class PollCycleError(VendorError):
    """Every request of a poll cycle failed.

    Attributes
    ----------
    result: Optional[PartialResult]
        Per-device outcome of the failed cycle.
    """

    def __init__(self, message: str, result: Optional["PartialResult"] = None) -> None:
        super().__init__(message)
        self.result = result
