"""Shared HTTP transport for vendor adapters.

Each adapter owns one ``httpx.AsyncClient`` created when the adapter is
constructed, i.e. before the first poll, and reused by every request and
every concurrent per-device task afterwards. The client is never modified
after construction, so concurrent use needs no locking.

A request is attempted exactly once. Failures are translated into the
`VendorError` hierarchy:

- transport problems (connect, timeout) -> `VendorTransportError`
- unexpected HTTP status -> `VendorStatusError`, checked before decoding
- malformed JSON or missing envelope fields -> `VendorDecodeError`
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional, Type, TypeVar

import httpx
import orjson
from pydantic import BaseModel, ValidationError

from ..utils.correlation import get_poll_id
from ..utils.partial_results import PartialResult, format_failure_summary
from .errors import (
    PollCycleError,
    VendorDecodeError,
    VendorStatusError,
    VendorTransportError,
)

logger = logging.getLogger(__name__)

EnvelopeT = TypeVar("EnvelopeT", bound=BaseModel)

DEFAULT_TIMEOUT_SECONDS = 5.0


class HTTPVendorClient:
    """Base class for vendor adapters talking JSON over HTTP.

    Parameters
    ----------
    vendor: str
        Short vendor name used in log events and error messages.
    timeout: float
        Per-request deadline in seconds. Bounds each httpx phase and the
        request as a whole, from connecting to the last byte of the body.

    Attributes
    ----------
    _client: httpx.AsyncClient
        Shared async client configured with timeout and JSON headers.
    """

    expected_status: int = 200

    def __init__(self, vendor: str, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self.vendor = vendor
        self._timeout_seconds = timeout
        self._client = self._create_http_client(timeout)

    def _create_http_client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers={"accept": "application/json"},
        )

    def inject_http_client_for_testing(self, client: Any) -> None:
        """Replace underlying HTTP client (testing only).

        This allows unit tests to provide an ``httpx.AsyncClient`` backed by
        ``httpx.MockTransport`` or any object exposing ``request()``.
        """
        self._client = client

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def _request_json(
        self,
        method: str,
        url: str,
        envelope: Type[EnvelopeT],
        *,
        payload: Optional[Dict[str, Any]] = None,
        log_url: Optional[str] = None,
    ) -> EnvelopeT:
        """Send one request and decode the response into ``envelope``.

        Parameters
        ----------
        method: str
            HTTP method ("GET" or "POST").
        url: str
            Absolute request URL.
        envelope: Type[BaseModel]
            Pydantic model the JSON body is validated against.
        payload: Optional[Dict[str, Any]]
            JSON body for POST requests.
        log_url: Optional[str]
            URL to log instead of ``url`` when the latter embeds credentials.

        Raises
        ------
        VendorTransportError
            On connect/read failures or timeouts.
        VendorStatusError
            When the response status differs from ``expected_status``.
        VendorDecodeError
            If the body is not JSON or does not match ``envelope``.
        """
        shown_url = log_url or url
        logger.debug(
            f"{self.vendor}.http.request",
            extra={"poll_id": get_poll_id(), "method": method, "url": shown_url},
        )
        try:
            if payload is None:
                send = self._client.request(method, url)
            else:
                send = self._client.request(
                    method,
                    url,
                    content=orjson.dumps(payload),
                    headers={"content-type": "application/json"},
                )
            # httpx limits each phase separately; this bounds the whole request
            resp = await asyncio.wait_for(send, self._timeout_seconds)
        except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
            logger.warning(
                f"{self.vendor}.http.timeout",
                extra={
                    "poll_id": get_poll_id(),
                    "url": shown_url,
                    "timeout_seconds": self._timeout_seconds,
                },
            )
            raise VendorTransportError(
                f"{self.vendor}: request to {shown_url} timed out after "
                f"{self._timeout_seconds}s",
                timeout=True,
            ) from exc
        except httpx.TransportError as exc:
            raise VendorTransportError(
                f"{self.vendor}: request to {shown_url} failed: {exc}"
            ) from exc

        if resp.status_code != self.expected_status:
            body_preview = resp.text[:500] if resp.content else ""
            logger.error(
                f"{self.vendor}.http.status_error",
                extra={
                    "poll_id": get_poll_id(),
                    "url": shown_url,
                    "status": resp.status_code,
                    "body_preview": body_preview,
                },
            )
            raise VendorStatusError(self.vendor, resp.status_code, self.expected_status)

        try:
            data = orjson.loads(resp.content)
        except orjson.JSONDecodeError as exc:
            raise VendorDecodeError(
                f"{self.vendor}: response from {shown_url} is not valid JSON: {exc}"
            ) from exc
        try:
            decoded = envelope.model_validate(data)
        except ValidationError as exc:
            raise VendorDecodeError(
                f"{self.vendor}: unexpected response envelope from {shown_url}: "
                f"{exc.error_count()} validation error(s)"
            ) from exc

        logger.debug(
            f"{self.vendor}.http.response",
            extra={
                "poll_id": get_poll_id(),
                "url": shown_url,
                "status_code": resp.status_code,
            },
        )
        return decoded

    def _raise_if_all_failed(self, result: PartialResult) -> None:
        """Surface a poll cycle in which no request succeeded.

        The first failure's exception is chained as ``__cause__`` so callers
        can still tell transport, status and decode failures apart.
        """
        if not result.all_failed:
            return
        first = result.failures[0]
        raise PollCycleError(
            f"{self.vendor}: poll cycle failed\n"
            + format_failure_summary(result, f"{self.vendor} request"),
            result,
        ) from first.exception
