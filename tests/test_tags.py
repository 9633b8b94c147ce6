"""Tests for tag hierarchy extraction from device names."""

from __future__ import annotations

import pytest

from telemetry_adapter.domain.models import HIERARCHY_TAG_KEYS
from telemetry_adapter.domain.tags import extract_tag_hierarchy, hierarchy_tags

FULL_NAME = "Acme|US|Store12|ZoneA|Freezer|Refrigeration|Dairy|TempProbe|SN001"


def test_nine_segments_map_to_named_tags():
    """A name following the convention yields all nine named tags."""
    tags = hierarchy_tags(FULL_NAME)
    assert tags == {
        "customer": "Acme",
        "country": "US",
        "store": "Store12",
        "zone": "ZoneA",
        "equipment": "Freezer",
        "equipmentType": "Refrigeration",
        "cargo": "Dairy",
        "sensor": "TempProbe",
        "sensorID": "SN001",
    }


def test_complete_hierarchy_keeps_segment_order():
    hierarchy = extract_tag_hierarchy(FULL_NAME)
    assert hierarchy.is_complete
    assert list(hierarchy.as_tags().keys()) == list(HIERARCHY_TAG_KEYS)
    assert hierarchy.values[-1] == "SN001"


@pytest.mark.parametrize(
    "name",
    [
        "Walk-in cooler",
        "Acme|US|Store12",
        "Acme|US|Store12|ZoneA|Freezer|Refrigeration|Dairy|TempProbe",
        "Acme|US|Store12|ZoneA|Freezer|Refrigeration|Dairy|TempProbe|SN001|extra",
        "",
    ],
)
def test_other_segment_counts_fall_back_to_raw_name(name):
    """Anything but exactly nine segments collapses to one customer tag."""
    hierarchy = extract_tag_hierarchy(name)
    assert not hierarchy.is_complete
    assert hierarchy.as_tags() == {"customer": name}


def test_empty_segments_still_count():
    """Empty segments are kept; only the count decides."""
    name = "Acme||Store12|||||Probe|SN9"
    tags = hierarchy_tags(name)
    assert tags["country"] == ""
    assert tags["sensorID"] == "SN9"


def test_custom_delimiter():
    name = FULL_NAME.replace("|", "/")
    assert hierarchy_tags(name, delimiter="/")["store"] == "Store12"
    # Default delimiter does not split it
    assert hierarchy_tags(name) == {"customer": name}
