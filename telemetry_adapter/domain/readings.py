"""Reading decoder for free-form sensor reading strings.

iMonnit reports the current state of a sensor as display text rather than
numbers. Two shapes are recognized:

- Energy meters pack a composite reading into one string::

      "12.3 kWh, Avg Current: 1.2 A, Max Current: 2.5 A, Min Current: 0.4 A"

  The first segment is the energy total; the remaining three are the
  average, maximum and minimum current draw.

- Everything else is treated as a temperature such as ``"-4.2°C"``.

Decoding is permissive per field: a token that does not parse yields an
unavailable value for that field only.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from .models import DecodedReading, ReadingGroup
from .utils.validation import parse_float

logger = logging.getLogger(__name__)

ENERGY_MARKER = "kWh"
DEGREE_MARKER = "°"
# UTF-8 degree sign mis-decoded as Latin-1 leaves this prefix behind.
_MOJIBAKE_PREFIX = "Â"

ENERGY_UNIT = "kWh"
CURRENT_UNIT = "A"
TEMPERATURE_UNIT = "C"

ENERGY_UNIT_TAG = "kWh"
CURRENT_UNIT_TAG = "amps"
TEMPERATURE_UNIT_TAG = "C"

PRIMARY_FIELD = "current"
# Field names of the composite segments after the energy total, in order.
CURRENT_FIELDS: Tuple[str, ...] = ("average", "maximum", "minimum")
# Position of the value among space-separated tokens of a current segment.
_CURRENT_VALUE_TOKEN = 3


def is_composite(raw: str) -> bool:
    """Return True when ``raw`` is an energy/current composite reading."""
    return ENERGY_MARKER in raw


def decode_reading(raw: Optional[str]) -> List[ReadingGroup]:
    """Decode a raw reading string into reading groups.

    Parameters
    ----------
    raw: Optional[str]
        Reading text as reported by the vendor. None is treated as empty.

    Returns
    -------
    List[ReadingGroup]
        Two groups (``kWh`` then ``amps``) for composite readings, one group
        (``C``) otherwise. Never empty.
    """
    text = raw or ""
    if is_composite(text):
        return _decode_composite(text)
    return [_decode_temperature(text)]


def _decode_composite(text: str) -> List[ReadingGroup]:
    segments = text.split(",")
    primary = DecodedReading(
        name=PRIMARY_FIELD,
        value=parse_float(_first_token(segments[0])),
        unit=ENERGY_UNIT,
    )
    currents = []
    for offset, field_name in enumerate(CURRENT_FIELDS, start=1):
        segment = segments[offset] if offset < len(segments) else None
        currents.append(
            DecodedReading(
                name=field_name,
                value=_current_value(segment),
                unit=CURRENT_UNIT,
            )
        )
    if len(segments) != len(CURRENT_FIELDS) + 1:
        logger.debug(
            "readings.composite.segment_count",
            extra={"reading": text, "segments": len(segments)},
        )
    return [
        ReadingGroup(unit_tag=ENERGY_UNIT_TAG, readings=(primary,)),
        ReadingGroup(unit_tag=CURRENT_UNIT_TAG, readings=tuple(currents)),
    ]


def _decode_temperature(text: str) -> ReadingGroup:
    head = text.split(DEGREE_MARKER)[0]
    if head.endswith(_MOJIBAKE_PREFIX):
        head = head[: -len(_MOJIBAKE_PREFIX)]
    reading = DecodedReading(
        name=PRIMARY_FIELD,
        value=parse_float(head),
        unit=TEMPERATURE_UNIT,
    )
    return ReadingGroup(unit_tag=TEMPERATURE_UNIT_TAG, readings=(reading,))


def _first_token(segment: str) -> str:
    return segment.strip().split(" ")[0]


def _current_value(segment: Optional[str]) -> Optional[float]:
    """Extract the numeric value of a labelled current segment.

    The vendor format puts the value at a fixed token position
    (``" Avg Current: 1.2 A"``); shorter labels (``" Avg 1.2 A"``) are
    matched by taking the first numeric token after the label.
    """
    if segment is None:
        return None
    tokens = segment.split(" ")
    if len(tokens) > _CURRENT_VALUE_TOKEN:
        value = parse_float(tokens[_CURRENT_VALUE_TOKEN])
        if value is not None:
            return value
    words = segment.split()
    for token in words[1:]:
        value = parse_float(token)
        if value is not None:
            return value
    return None
