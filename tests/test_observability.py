"""Tests for logging setup and the contextual formatter."""

import logging

import httpx
import pytest

from telemetry_adapter.adapters.errors import VendorStatusError
from telemetry_adapter.adapters.imonnit import ImonnitAdapter
from telemetry_adapter.observability import ContextualFormatter, setup_logging
from telemetry_adapter.utils.partial_results import gather_partial


def _record(**extra):
    record = logging.LogRecord(
        "telemetry_adapter.test", logging.INFO, __file__, 1, "imonnit.gather.complete", None, None
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_appends_known_context():
    formatter = ContextualFormatter(fmt="%(message)s")
    line = formatter.format(_record(poll_id="abc123", points=4, unrelated="x"))
    assert line == "imonnit.gather.complete | poll_id=abc123 points=4"


def test_formatter_skips_empty_context():
    formatter = ContextualFormatter(fmt="%(message)s")
    assert formatter.format(_record(poll_id="")) == "imonnit.gather.complete"


def test_setup_logging_installs_contextual_handler(monkeypatch):
    calls = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.update(kwargs))
    monkeypatch.setattr(logging.getLogger("httpx"), "level", logging.NOTSET)
    monkeypatch.setattr(logging.getLogger("httpcore"), "level", logging.NOTSET)

    setup_logging("info")
    assert calls["level"] == logging.INFO
    (handler,) = calls["handlers"]
    assert isinstance(handler.formatter, ContextualFormatter)
    assert logging.getLogger("httpx").level == logging.WARNING

    setup_logging("DEBUG")
    assert calls["level"] == logging.DEBUG
    assert logging.getLogger("httpcore").level == logging.DEBUG


def _formatted(caplog, message):
    formatter = ContextualFormatter(fmt="%(message)s")
    (record,) = [r for r in caplog.records if r.getMessage() == message]
    return formatter.format(record)


@pytest.mark.asyncio
async def test_fanout_summary_lines_carry_counts(caplog):
    async def ok():
        return "ok"

    with caplog.at_level(logging.INFO):
        await gather_partial({"SN-1": ok(), "SN-2": ok()}, "logger_query")

    line = _formatted(caplog, "partial_results.logger_query.complete")
    assert "total=2 successes=2 failures=0" in line


@pytest.mark.asyncio
async def test_status_error_line_carries_body_preview(caplog):
    adapter = ImonnitAdapter("https://imonnit.test/json", token="tok")
    adapter.inject_http_client_for_testing(
        httpx.AsyncClient(
            transport=httpx.MockTransport(
                lambda request: httpx.Response(503, text="maintenance window")
            )
        )
    )

    with caplog.at_level(logging.ERROR):
        with pytest.raises(VendorStatusError):
            await adapter.sensor_list()

    line = _formatted(caplog, "imonnit.http.status_error")
    assert "status=503" in line
    assert "body_preview=maintenance window" in line
