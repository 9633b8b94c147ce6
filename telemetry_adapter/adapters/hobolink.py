"""HOBOlink vendor adapter.

Queries the HOBOlink data web service for the observations of the last hour
(``POST <server>`` with an authentication and query block). When logger
serial numbers are configured, one request per logger is issued
concurrently and the per-logger outcomes are joined; with no serial numbers
a single request queries every logger of the account.

Each observation becomes one metric point carrying the logger/channel
identity as tags and the SI, US and scaled values as fields. The point is
stamped with the observation's own timestamp when the API reports one.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional, Sequence

from ..collector.fanout import fan_out
from ..domain.emitter import Accumulator, emit
from ..domain.models import MetricPoint
from ..schemas.vendor_envelopes import (
    HobolinkAuthentication,
    HobolinkObservation,
    HobolinkObservations,
    HobolinkQuery,
    HobolinkRequest,
)
from ..utils.correlation import get_poll_id
from ..utils.partial_results import PartialResult
from .base import DEFAULT_TIMEOUT_SECONDS, HTTPVendorClient
from .errors import VendorConfigError

logger = logging.getLogger(__name__)

DATA_PATH = "/data/json"
DEFAULT_SERVER = f"https://webservice.hobolink.com/restv2{DATA_PATH}"
MEASUREMENT = "hobolink"
DEFAULT_WINDOW = timedelta(hours=1)

SAMPLE_CONFIG = """\
{
  "type": "hobolink",
  "server": "https://webservice.hobolink.com/restv2/data/json",
  "user": "",
  "password": "",
  "token": "",
  "serial_numbers": [],
  "http_timeout_seconds": 5
}
  NOTE: each poll queries a one-hour window ending now.
  NOTE: with an empty serial_numbers list every logger of the account is
        queried in one request; otherwise one request per listed logger.
"""


class HobolinkAdapter(HTTPVendorClient):
    """Adapter for the HOBOlink data web service.

    Parameters
    ----------
    server: str
        Full URL of the data endpoint.
    user, password, token: str
        Account credentials sent in the request body.
    serial_numbers: Optional[Sequence[str]]
        Logger serial numbers to query; empty or None queries all.
    timeout: float
        Per-request timeout in seconds.
    measurement: str
        Measurement name of emitted points.
    window: timedelta
        Length of the queried time window, ending at poll time.
    """

    description = "Read stats from the HOBOlink API for a given user account"
    sample_config = SAMPLE_CONFIG

    def __init__(
        self,
        server: str = DEFAULT_SERVER,
        user: str = "",
        password: str = "",
        token: str = "",
        serial_numbers: Optional[Sequence[str]] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        *,
        measurement: str = MEASUREMENT,
        window: timedelta = DEFAULT_WINDOW,
    ) -> None:
        super().__init__("hobolink", timeout)
        self.server = server
        self.user = user
        self.password = password
        self.token = token
        self.serial_numbers = [s for s in (serial_numbers or []) if s]
        self.measurement = measurement
        self.window = window
        logger.info(
            "hobolink.adapter.init",
            extra={
                "server": server,
                "timeout_seconds": timeout,
                "loggers": len(self.serial_numbers),
            },
        )

    def build_request(
        self, logger_sn: Optional[str], now: Optional[datetime] = None
    ) -> HobolinkRequest:
        """Build the request body for one logger (or all when None)."""
        end = now or datetime.now(timezone.utc)
        return HobolinkRequest(
            authentication=HobolinkAuthentication(
                user=self.user, password=self.password, token=self.token
            ),
            query=HobolinkQuery(
                start_date_time=end - self.window,
                end_date_time=end,
                loggers=[logger_sn] if logger_sn else [],
            ),
        )

    async def fetch_observations(
        self, logger_sn: Optional[str] = None
    ) -> HobolinkObservations:
        """Issue one data request for ``logger_sn`` (all loggers when None)."""
        if not self.token:
            raise VendorConfigError("token required for the hobolink API")
        body = self.build_request(logger_sn)
        return await self._request_json(
            "POST",
            self.server,
            HobolinkObservations,
            payload=body.model_dump(mode="json"),
        )

    def normalize_observation(
        self, observation: HobolinkObservation, collected_at: datetime
    ) -> MetricPoint:
        """Translate one observation into a metric point."""
        tags: Dict[str, str] = {"logger_sn": observation.logger_sn}
        if observation.sensor_sn:
            tags["serial_sn"] = observation.sensor_sn
        if observation.channel_num is not None:
            tags["channel_num"] = str(observation.channel_num)
        for key in ("data_type", "si_unit", "us_unit", "scaled_unit"):
            value = getattr(observation, key)
            if value:
                tags[key] = value
        return MetricPoint(
            measurement=self.measurement,
            tags=tags,
            fields={
                "si_value": observation.si_value,
                "us_value": observation.us_value,
                "scaled_value": observation.scaled_value,
            },
            timestamp=observation.timestamp or collected_at,
        )

    def process_observations(
        self,
        observations: HobolinkObservations,
        accumulator: Accumulator,
        collected_at: Optional[datetime] = None,
    ) -> int:
        """Normalize an observation list and deliver the points."""
        ts = collected_at or datetime.now(timezone.utc)
        points = [self.normalize_observation(o, ts) for o in observations.observations]
        return emit(points, accumulator)

    async def gather(self, accumulator: Accumulator) -> PartialResult:
        """Query every configured logger concurrently and emit the points."""
        if not self.token:
            raise VendorConfigError("token required for the hobolink API")
        result = await fan_out(
            self.serial_numbers, self.fetch_observations, "hobolink_query"
        )
        self._raise_if_all_failed(result)

        emitted = 0
        for observations in result.successes:
            if observations.message:
                logger.debug(
                    "hobolink.response.message",
                    extra={"poll_id": get_poll_id(), "api_message": observations.message},
                )
            emitted += self.process_observations(observations, accumulator)
        logger.info(
            "hobolink.gather.complete",
            extra={
                "poll_id": get_poll_id(),
                "points": emitted,
                "failed_loggers": result.failed_identifiers,
            },
        )
        return result
