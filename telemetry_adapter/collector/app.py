"""Telemetry collector: drives one poll cycle over all registered sources.

The collector is the entry point the host scheduler calls once per
collection interval. It owns no HTTP state itself; every registered adapter
holds its own client, created before the first cycle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from ..adapters import get_adapter, get_available_source_ids
from ..adapters.errors import VendorError
from ..domain.emitter import Accumulator
from ..utils.correlation import new_poll_id
from ..utils.partial_results import PartialResult, format_failure_summary

logger = logging.getLogger(__name__)


@dataclass
class SourceReport:
    """Outcome of one source within a poll cycle.

    Attributes
    ----------
    source_id : str
        Logical source identifier from the config.
    result : PartialResult or None
        Per-device outcome when at least one request succeeded.
    error : VendorError or None
        The failure that aborted the source's cycle, if any.
    """

    source_id: str
    result: Optional[PartialResult] = None
    error: Optional[VendorError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and not (self.result and self.result.has_failures)


@dataclass
class GatherReport:
    """Outcome of a full poll cycle across all sources."""

    poll_id: str
    sources: Dict[str, SourceReport] = field(default_factory=dict)

    @property
    def failed_sources(self) -> list[str]:
        return [sid for sid, rep in self.sources.items() if rep.error is not None]


class TelemetryCollector:
    """Async collector app.

    Responsibilities:
    - Run one poll cycle over every registered adapter per `gather` call
    - Record per-source and per-device outcomes instead of stopping at the
      first failure
    - Close adapter HTTP clients on shutdown
    """

    def __init__(self) -> None:
        """Create a new collector instance with stopped state."""
        self._started: bool = False

    @property
    def started(self) -> bool:
        return self._started

    async def start(self) -> None:
        """Mark the collector as started. Idempotent."""
        if self._started:
            logger.debug("collector.start no-op: already started")
            return
        self._started = True
        logger.info(
            "collector.started",
            extra={"sources": get_available_source_ids()},
        )

    async def stop(self) -> None:
        """Close every adapter's HTTP client. Idempotent."""
        if not self._started:
            logger.debug("collector.stop no-op: not started")
            return
        for source_id in get_available_source_ids():
            await get_adapter(source_id).aclose()
        self._started = False
        logger.info("collector.stopped")

    async def gather(self, accumulator: Accumulator) -> GatherReport:
        """Run one poll cycle and deliver every point to ``accumulator``.

        Sources are polled one after another; inside a source the adapter
        fans out per device. A failing source is recorded in the report and
        does not prevent the remaining sources from being polled.
        """
        report = GatherReport(poll_id=new_poll_id())
        for source_id in get_available_source_ids():
            adapter = get_adapter(source_id)
            try:
                result = await adapter.gather(accumulator)
            except VendorError as exc:
                logger.error(
                    "collector.source.failed",
                    extra={
                        "poll_id": report.poll_id,
                        "source_id": source_id,
                        "error": str(exc),
                    },
                )
                report.sources[source_id] = SourceReport(source_id, error=exc)
                continue
            if result.has_failures:
                logger.warning(
                    "collector.source.partial: %s",
                    format_failure_summary(result, "device query"),
                    extra={"poll_id": report.poll_id, "source_id": source_id},
                )
            report.sources[source_id] = SourceReport(source_id, result=result)
        logger.info(
            "collector.gather.complete",
            extra={
                "poll_id": report.poll_id,
                "sources": len(report.sources),
                "failed_sources": report.failed_sources,
            },
        )
        return report
