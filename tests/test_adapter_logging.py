"""Test adapter registration and logging functionality."""

from __future__ import annotations

import logging

from telemetry_adapter.adapters import (
    _adapters as adapter_registry,
    get_adapter,
    get_available_source_ids,
    log_adapter_status,
    register_adapter,
)
from telemetry_adapter.adapters.imonnit import ImonnitAdapter


def test_log_adapter_status_no_adapters(caplog):
    """Test log_adapter_status when no adapters are configured."""
    with caplog.at_level(logging.WARNING):
        log_adapter_status()

    warning_logs = [
        record.message for record in caplog.records if record.levelname == "WARNING"
    ]
    assert "No vendor sources configured" in " ".join(warning_logs)


def test_log_adapter_status_with_adapters(caplog):
    """Test log_adapter_status when adapters are configured."""
    register_adapter("stores", ImonnitAdapter("http://imonnit.test/json", token="t"))

    with caplog.at_level(logging.INFO):
        log_adapter_status()

    info_logs = [
        record.message for record in caplog.records if record.levelname == "INFO"
    ]
    combined_logs = " ".join(info_logs)
    assert "Vendor sources configured" in combined_logs
    assert "'stores' (imonnit)" in combined_logs


def test_registry_lookup_and_clear():
    adapter = ImonnitAdapter("http://imonnit.test/json", token="t")
    register_adapter("stores", adapter)

    assert get_adapter("stores") is adapter
    assert get_available_source_ids() == ["stores"]

    adapter_registry.clear()
    assert get_available_source_ids() == []
