"""HOBOlink adapter tests with mocked HTTP."""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

import httpx
import pytest

from telemetry_adapter.adapters.errors import (
    PollCycleError,
    VendorConfigError,
    VendorStatusError,
    VendorTransportError,
)
from telemetry_adapter.adapters.hobolink import HobolinkAdapter
from telemetry_adapter.domain.emitter import MemoryAccumulator
from telemetry_adapter.schemas.vendor_envelopes import HobolinkObservation

SERVER = "https://hobolink.test/restv2/data/json"


def _observation(logger_sn: str, channel: int, si_value: Any = 21.5) -> Dict[str, Any]:
    return {
        "logger_sn": logger_sn,
        "serial_sn": f"{logger_sn}-S{channel}",
        "channel_num": channel,
        "timestamp": "2026-10-19T11:45:00Z",
        "data_type": "Temperature",
        "si_value": si_value,
        "si_unit": "°C",
        "us_value": 70.7,
        "us_unit": "°F",
        "scaled_value": None,
        "scaled_unit": "",
    }


def _adapter(handler, **kwargs: Any) -> HobolinkAdapter:
    adapter = HobolinkAdapter(
        SERVER,
        user="ops",
        password="secret",
        token=kwargs.pop("token", "tok"),
        **kwargs,
    )
    adapter.inject_http_client_for_testing(
        httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )
    return adapter


def _body(request: httpx.Request) -> Dict[str, Any]:
    return json.loads(request.content)


def test_build_request_queries_last_hour():
    adapter = HobolinkAdapter(SERVER, "ops", "secret", "tok")
    now = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

    body = adapter.build_request("SN-1", now=now)

    assert body.query.end_date_time == now
    assert body.query.start_date_time == now - timedelta(hours=1)
    assert body.query.loggers == ["SN-1"]
    assert body.authentication.user == "ops"
    assert adapter.build_request(None, now=now).query.loggers == []


@pytest.mark.asyncio
async def test_fetch_posts_json_body():
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200, json={"observationList": [_observation("SN-1", 1)], "message": "OK"}
        )

    adapter = _adapter(handler)
    observations = await adapter.fetch_observations("SN-1")

    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == SERVER
    assert request.headers["content-type"] == "application/json"
    body = _body(request)
    assert body["authentication"] == {"user": "ops", "password": "secret", "token": "tok"}
    assert body["query"]["loggers"] == ["SN-1"]
    assert set(body["query"]) == {"start_date_time", "end_date_time", "loggers"}
    assert observations.message == "OK"
    assert observations.observations[0].sensor_sn == "SN-1-S1"


@pytest.mark.asyncio
async def test_gather_fans_out_one_request_per_logger():
    """N configured loggers produce N concurrent requests joined before return."""
    loggers = ["SN-1", "SN-2", "SN-3"]
    in_flight = 0
    peak = 0
    all_started = asyncio.Event()
    requested: List[str] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        nonlocal in_flight, peak
        (logger_sn,) = _body(request)["query"]["loggers"]
        requested.append(logger_sn)
        in_flight += 1
        peak = max(peak, in_flight)
        if in_flight == len(loggers):
            all_started.set()
        await asyncio.wait_for(all_started.wait(), timeout=2)
        in_flight -= 1
        return httpx.Response(
            200, json={"observationList": [_observation(logger_sn, 1)], "message": ""}
        )

    adapter = _adapter(handler, serial_numbers=loggers)
    acc = MemoryAccumulator()

    result = await adapter.gather(acc)

    assert sorted(requested) == loggers
    assert peak == len(loggers)
    assert result.all_succeeded
    assert sorted(p.tags["logger_sn"] for p in acc.points) == loggers


@pytest.mark.asyncio
async def test_gather_without_serials_queries_all_once():
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "observationList": [_observation("SN-1", 1), _observation("SN-2", 2)],
                "message": "",
            },
        )

    adapter = _adapter(handler)
    acc = MemoryAccumulator()
    await adapter.gather(acc)

    assert len(seen) == 1
    assert _body(seen[0])["query"]["loggers"] == []
    assert len(acc.points) == 2


@pytest.mark.asyncio
async def test_gather_reports_partial_failures():
    def handler(request: httpx.Request) -> httpx.Response:
        (logger_sn,) = _body(request)["query"]["loggers"]
        if logger_sn == "SN-2":
            return httpx.Response(500, json={"message": "boom"})
        return httpx.Response(
            200, json={"observationList": [_observation(logger_sn, 1)], "message": ""}
        )

    adapter = _adapter(handler, serial_numbers=["SN-1", "SN-2", "SN-3"])
    acc = MemoryAccumulator()

    result = await adapter.gather(acc)

    assert len(result.successes) == 2
    assert [f.identifier for f in result.failures] == ["SN-2"]
    assert result.failures[0].error_type == "server_error"
    assert sorted(p.tags["logger_sn"] for p in acc.points) == ["SN-1", "SN-3"]


@pytest.mark.asyncio
async def test_gather_all_failed_raises():
    adapter = _adapter(
        lambda request: httpx.Response(403), serial_numbers=["SN-1", "SN-2"]
    )
    with pytest.raises(PollCycleError) as excinfo:
        await adapter.gather(MemoryAccumulator())
    assert isinstance(excinfo.value.__cause__, VendorStatusError)
    assert len(excinfo.value.result.failures) == 2


@pytest.mark.asyncio
async def test_missing_token_raises_config_error():
    adapter = _adapter(lambda request: httpx.Response(200), token="")
    with pytest.raises(VendorConfigError):
        await adapter.gather(MemoryAccumulator())


def test_normalize_observation_tags_fields_and_timestamp():
    adapter = HobolinkAdapter(SERVER, token="tok")

    obs = HobolinkObservation.model_validate(_observation("SN-9", 3, si_value=None))
    collected = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

    point = adapter.normalize_observation(obs, collected)

    assert point.measurement == "hobolink"
    assert point.tags == {
        "logger_sn": "SN-9",
        "serial_sn": "SN-9-S3",
        "channel_num": "3",
        "data_type": "Temperature",
        "si_unit": "°C",
        "us_unit": "°F",
    }
    assert point.fields == {"si_value": None, "us_value": 70.7, "scaled_value": None}
    assert point.unavailable == ["si_value", "scaled_value"]
    assert point.timestamp == datetime(2026, 10, 19, 11, 45, tzinfo=timezone.utc)


def test_normalize_observation_without_timestamp_uses_collection_time():
    adapter = HobolinkAdapter(SERVER, token="tok")

    obs = HobolinkObservation.model_validate({"logger_sn": "SN-1"})
    collected = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
    assert adapter.normalize_observation(obs, collected).timestamp == collected


@pytest.mark.asyncio
async def test_null_units_and_message_are_accepted():
    observation = {**_observation("SN-1", 1), "si_unit": None, "data_type": None}
    adapter = _adapter(
        lambda request: httpx.Response(
            200, json={"observationList": [observation], "message": None}
        )
    )
    acc = MemoryAccumulator()

    result = await adapter.gather(acc)

    assert result.all_succeeded
    (point,) = acc.points
    assert point.fields["si_value"] == 21.5
    assert "si_unit" not in point.tags
    assert "data_type" not in point.tags
    assert point.tags["us_unit"] == "°F"


@pytest.mark.asyncio
async def test_stalled_logger_fails_alone_within_deadline():
    async def handler(request: httpx.Request) -> httpx.Response:
        (logger_sn,) = _body(request)["query"]["loggers"]
        if logger_sn == "SN-2":
            await asyncio.sleep(5)
        return httpx.Response(
            200, json={"observationList": [_observation(logger_sn, 1)]}
        )

    adapter = _adapter(handler, serial_numbers=["SN-1", "SN-2"], timeout=0.05)
    acc = MemoryAccumulator()

    result = await asyncio.wait_for(adapter.gather(acc), timeout=2)

    assert result.failed_identifiers == ["SN-2"]
    assert result.failures[0].error_type == "timeout"
    assert isinstance(result.failures[0].exception, VendorTransportError)
    assert [p.tags["logger_sn"] for p in acc.points] == ["SN-1"]
