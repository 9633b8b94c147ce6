"""iMonnit vendor adapter.

Reads the current state of every sensor of an iMonnit account from the JSON
API (``GET <server>/sensorlist/<token>``) and normalizes it:

- the sensor name is decomposed into the nine-level location hierarchy
  (see `telemetry_adapter.domain.tags`);
- the ``CurrentReading`` display text is decoded into numeric fields
  (see `telemetry_adapter.domain.readings`).

The sensor list is an account-wide "list all" call, so one poll cycle makes
a single request regardless of how many sensors exist. When serial numbers
are configured, only sensors whose ``SensorID`` is listed are emitted.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence

from ..collector.fanout import fan_out
from ..domain.emitter import Accumulator, build_points, emit
from ..domain.models import MetricPoint
from ..domain.readings import decode_reading
from ..domain.tags import DEFAULT_DELIMITER, extract_tag_hierarchy
from ..schemas.vendor_envelopes import (
    ImonnitNetworkList,
    ImonnitSensorDetail,
    ImonnitSensorList,
)
from ..utils.correlation import get_poll_id
from ..utils.partial_results import PartialResult
from .base import DEFAULT_TIMEOUT_SECONDS, HTTPVendorClient
from .errors import VendorConfigError

logger = logging.getLogger(__name__)

DEFAULT_SERVER = "https://www.imonnit.com/json"
MEASUREMENT = "imonnit"

SAMPLE_CONFIG = """\
{
  "type": "imonnit",
  "server": "https://www.imonnit.com/json",
  "token": "",
  "serial_numbers": [],
  "http_timeout_seconds": 5
}
  NOTE: this adapter only supports the iMonnit JSON API.
  NOTE: with an empty serial_numbers list every sensor of the account is
        collected; otherwise only the listed sensor IDs are collected.
"""


class ImonnitAdapter(HTTPVendorClient):
    """Adapter for the iMonnit JSON API.

    Parameters
    ----------
    server: str
        Base URL of the JSON API, without trailing slash.
    token: str
        Account API token; embedded in the request path.
    serial_numbers: Optional[Sequence[str]]
        Sensor IDs to keep; empty or None keeps every sensor.
    timeout: float
        Per-request timeout in seconds.
    name_delimiter: str
        Separator of the sensor naming convention.
    measurement: str
        Measurement name of emitted points.
    """

    description = "Read stats from the iMonnit API for a given user account"
    sample_config = SAMPLE_CONFIG

    def __init__(
        self,
        server: str = DEFAULT_SERVER,
        token: str = "",
        serial_numbers: Optional[Sequence[str]] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        *,
        name_delimiter: str = DEFAULT_DELIMITER,
        measurement: str = MEASUREMENT,
    ) -> None:
        super().__init__("imonnit", timeout)
        self.server = server.rstrip("/")
        self.token = token
        self.serial_numbers = [s for s in (serial_numbers or []) if s]
        self.name_delimiter = name_delimiter
        self.measurement = measurement
        logger.info(
            "imonnit.adapter.init",
            extra={"server": self.server, "timeout_seconds": timeout},
        )

    def _require_token(self) -> None:
        if not self.token:
            raise VendorConfigError("token required for the imonnit API")

    def _url(self, resource: str) -> str:
        return f"{self.server}/{resource}/{self.token}"

    def _log_url(self, resource: str) -> str:
        return f"{self.server}/{resource}/<token>"

    async def sensor_list(self) -> ImonnitSensorList:
        """Fetch every sensor of the account with its current reading."""
        self._require_token()
        return await self._request_json(
            "GET",
            self._url("sensorlist"),
            ImonnitSensorList,
            log_url=self._log_url("sensorlist"),
        )

    async def network_list(self) -> ImonnitNetworkList:
        """Fetch the wireless networks of the account."""
        self._require_token()
        return await self._request_json(
            "GET",
            self._url("networklist"),
            ImonnitNetworkList,
            log_url=self._log_url("networklist"),
        )

    def selected(self, sensors: Iterable[ImonnitSensorDetail]) -> List[ImonnitSensorDetail]:
        """Apply the configured serial number filter."""
        if not self.serial_numbers:
            return list(sensors)
        wanted = set(self.serial_numbers)
        return [s for s in sensors if str(s.sensor_id) in wanted]

    def normalize_sensor(
        self, sensor: ImonnitSensorDetail, timestamp: datetime
    ) -> List[MetricPoint]:
        """Translate one sensor into one or more metric points."""
        hierarchy = extract_tag_hierarchy(sensor.sensor_name, self.name_delimiter)
        groups = decode_reading(sensor.current_reading)
        return build_points(self.measurement, hierarchy, groups, timestamp)

    def process_results(
        self,
        sensors: ImonnitSensorList,
        accumulator: Accumulator,
        timestamp: Optional[datetime] = None,
    ) -> int:
        """Normalize a sensor list and deliver the points.

        All points of one call share ``timestamp`` (default: now, UTC).
        Returns the number of points delivered.
        """
        ts = timestamp or datetime.now(timezone.utc)
        emitted = 0
        for sensor in self.selected(sensors.sensors):
            emitted += emit(self.normalize_sensor(sensor, ts), accumulator)
        return emitted

    async def gather(self, accumulator: Accumulator) -> PartialResult:
        """Poll the sensor list once and emit normalized points."""
        self._require_token()
        result = await fan_out([], lambda _: self.sensor_list(), "imonnit_sensorlist")
        self._raise_if_all_failed(result)

        emitted = 0
        for sensor_list in result.successes:
            emitted += self.process_results(sensor_list, accumulator)
        logger.info(
            "imonnit.gather.complete",
            extra={"poll_id": get_poll_id(), "points": emitted},
        )
        return result
