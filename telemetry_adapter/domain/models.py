"""Canonical metric data model produced by the normalization engine.

These Pydantic models are vendor-agnostic: vendor adapters decode their own
payloads and translate them into `ReadingGroup`s, `TagHierarchy`s and finally
`MetricPoint`s. Keeping this model small and stable lets every vendor target
the same shape regardless of how its API encodes readings.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

# Field names of the nine-segment device naming convention, in order.
HIERARCHY_TAG_KEYS: Tuple[str, ...] = (
    "customer",
    "country",
    "store",
    "zone",
    "equipment",
    "equipmentType",
    "cargo",
    "sensor",
    "sensorID",
)

# Tag key used when a name does not follow the convention.
FALLBACK_TAG_KEY = "customer"


class TagHierarchy(BaseModel):
    """Ordered tag values extracted from a delimited device name.

    Attributes
    ----------
    values: Tuple[str, ...]
        Either all nine segments of the naming convention or a single raw
        name. Partial hierarchies are never constructed.
    """

    model_config = ConfigDict(frozen=True)

    values: Tuple[str, ...]

    @property
    def is_complete(self) -> bool:
        """True when the name matched the full naming convention."""
        return len(self.values) == len(HIERARCHY_TAG_KEYS)

    def as_tags(self) -> Dict[str, str]:
        """Return the hierarchy as a tag mapping."""
        if self.is_complete:
            return dict(zip(HIERARCHY_TAG_KEYS, self.values))
        return {FALLBACK_TAG_KEY: self.values[0]}


class DecodedReading(BaseModel):
    """Single numeric value decoded from a free-form reading string.

    Attributes
    ----------
    name: str
        Field name the value is emitted under (e.g., "current", "average").
    value: Optional[float]
        Parsed value, or None when the source text was not numeric.
    unit: str
        Unit symbol of the value (e.g., "kWh", "A", "C").
    """

    model_config = ConfigDict(frozen=True)

    name: str
    value: Optional[float] = None
    unit: str

    @property
    def available(self) -> bool:
        return self.value is not None


class ReadingGroup(BaseModel):
    """Decoded readings that are emitted together under one `unit` tag."""

    model_config = ConfigDict(frozen=True)

    unit_tag: str
    readings: Tuple[DecodedReading, ...]

    def fields(self) -> Dict[str, Optional[float]]:
        return {r.name: r.value for r in self.readings}


class MetricPoint(BaseModel):
    """Single tagged metric observation in canonical form.

    Attributes
    ----------
    measurement: str
        Measurement name the point is recorded under (e.g., "imonnit").
    tags: Dict[str, str]
        Tag key/value pairs; keys are unique, order is irrelevant.
    fields: Dict[str, Optional[float]]
        Numeric field values. None marks a field whose source value could
        not be parsed ("unavailable").
    timestamp: datetime
        Collection (or observation) time of the point.
    """

    measurement: str
    tags: Dict[str, str] = Field(default_factory=dict)
    fields: Dict[str, Optional[float]] = Field(default_factory=dict)
    timestamp: datetime

    @property
    def unavailable(self) -> List[str]:
        """Names of fields that carry no value."""
        return [name for name, value in self.fields.items() if value is None]

    def available_fields(self) -> Dict[str, float]:
        return {k: v for k, v in self.fields.items() if v is not None}
