"""Vendor adapter interfaces and registry."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, Protocol

if TYPE_CHECKING:
    from ..domain.emitter import Accumulator
    from ..utils.partial_results import PartialResult


class VendorAdapter(Protocol):
    """Protocol for vendor adapters.

    Implementations poll one vendor account per call to `gather`, normalize
    the response and deliver metric points to the accumulator.
    """

    vendor: str
    description: str
    sample_config: str

    async def gather(self, accumulator: Accumulator) -> PartialResult:
        """Poll the vendor API once and emit normalized points.

        Returns the per-device outcome of the cycle. Raises
        `PollCycleError` when every request of the cycle failed.
        """
        raise NotImplementedError

    async def aclose(self) -> None:
        """Release the adapter's HTTP client."""
        raise NotImplementedError


_adapters: Dict[str, VendorAdapter] = {}


def register_adapter(source_id: str, adapter: VendorAdapter) -> None:
    """Register an adapter instance under a logical `source_id`."""
    _adapters[source_id] = adapter


def get_adapter(source_id: str) -> VendorAdapter:
    """Retrieve a registered adapter by `source_id`."""
    return _adapters[source_id]


def get_available_source_ids() -> list[str]:
    """Get list of registered adapter source_ids."""
    return list(_adapters.keys())


def log_adapter_status() -> None:
    """Log information about registered adapters."""
    logger = logging.getLogger(__name__)

    if not _adapters:
        logger.warning(
            "No vendor sources configured. Nothing will be collected.\n"
            "  - Add entries under 'sources' in the JSON config\n"
            "  - Supported types: hobolink, imonnit"
        )
    else:
        adapter_info = [
            f"'{source_id}' ({adapter.vendor})"
            for source_id, adapter in _adapters.items()
        ]
        logger.info("Vendor sources configured: %s", ", ".join(adapter_info))


def reset_adapters() -> None:
    """Test-only helper to clear registered adapters.

    Used by tests to ensure a clean registry when asserting behaviors that
    depend on adapter presence/absence.
    """
    _adapters.clear()
