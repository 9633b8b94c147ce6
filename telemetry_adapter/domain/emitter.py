"""Metric emission: build `MetricPoint`s and hand them to an accumulator.

The accumulator is the collaborating sink of the host metrics pipeline. This
module only defines the protocol it must satisfy and an in-memory
implementation used by the CLI and tests.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Protocol

from .models import MetricPoint, ReadingGroup, TagHierarchy

logger = logging.getLogger(__name__)

UNIT_TAG_KEY = "unit"


class Accumulator(Protocol):
    """Sink that receives normalized metric points."""

    def add_fields(
        self,
        measurement: str,
        fields: Dict[str, Optional[float]],
        tags: Dict[str, str],
        timestamp: datetime,
    ) -> None:
        """Record one metric point."""
        raise NotImplementedError


class MemoryAccumulator:
    """Accumulator that keeps every received point in a list."""

    def __init__(self) -> None:
        self.points: List[MetricPoint] = []

    def add_fields(
        self,
        measurement: str,
        fields: Dict[str, Optional[float]],
        tags: Dict[str, str],
        timestamp: datetime,
    ) -> None:
        self.points.append(
            MetricPoint(
                measurement=measurement,
                fields=dict(fields),
                tags=dict(tags),
                timestamp=timestamp,
            )
        )

    def clear(self) -> None:
        self.points.clear()


def build_points(
    measurement: str,
    hierarchy: TagHierarchy,
    groups: Iterable[ReadingGroup],
    timestamp: datetime,
) -> List[MetricPoint]:
    """Combine reading groups with a tag hierarchy.

    Every group becomes one point that carries the hierarchy tags plus its
    own ``unit`` tag. All points share ``timestamp``.
    """
    base = hierarchy.as_tags()
    points: List[MetricPoint] = []
    for group in groups:
        tags = dict(base)
        tags[UNIT_TAG_KEY] = group.unit_tag
        points.append(
            MetricPoint(
                measurement=measurement,
                tags=tags,
                fields=group.fields(),
                timestamp=timestamp,
            )
        )
    return points


def emit(points: Iterable[MetricPoint], accumulator: Accumulator) -> int:
    """Deliver points to ``accumulator``; return the number delivered."""
    count = 0
    for point in points:
        if point.unavailable:
            logger.debug(
                "emitter.point.unavailable_fields",
                extra={
                    "measurement": point.measurement,
                    "unavailable": point.unavailable,
                },
            )
        accumulator.add_fields(
            point.measurement, point.fields, point.tags, point.timestamp
        )
        count += 1
    return count
