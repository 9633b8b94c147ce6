"""Tag hierarchy extraction from delimited device names.

Sensors following the naming convention carry their location hierarchy in
the name itself, e.g. ``Acme|US|Store12|ZoneA|Freezer|Refrigeration|Dairy|
TempProbe|SN001``. Names that do not split into exactly the expected number
of segments are kept whole under a single fallback tag.
"""

from __future__ import annotations

from typing import Dict

from .models import HIERARCHY_TAG_KEYS, TagHierarchy

DEFAULT_DELIMITER = "|"


def extract_tag_hierarchy(name: str, delimiter: str = DEFAULT_DELIMITER) -> TagHierarchy:
    """Split ``name`` into a `TagHierarchy`.

    Parameters
    ----------
    name: str
        Raw device name as reported by the vendor.
    delimiter: str
        Segment separator of the naming convention.

    Returns
    -------
    TagHierarchy
        All nine segments when the count matches exactly, otherwise a
        single-value hierarchy holding the raw name.
    """
    segments = name.split(delimiter) if delimiter else [name]
    if len(segments) == len(HIERARCHY_TAG_KEYS):
        return TagHierarchy(values=tuple(segments))
    return TagHierarchy(values=(name,))


def hierarchy_tags(name: str, delimiter: str = DEFAULT_DELIMITER) -> Dict[str, str]:
    """Shortcut returning the tag mapping for ``name``."""
    return extract_tag_hierarchy(name, delimiter).as_tags()
