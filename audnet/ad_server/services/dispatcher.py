"""
Bidder dispatcher – sends adapter requests downstream and collects bids.

Flow:
    1. Adapter builds one outbound request per valid impression
    2. All outbound requests are sent concurrently over a shared httpx client
    3. Each response is mapped back to typed bids independently
    4. Bids and errors from every call are merged into one ``AuctionResult``

Failed calls are not retried; one failing call never affects its siblings.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Optional

import httpx
import orjson
from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from audnet.ad_server.middleware.metrics import (
    record_adapter_error,
    record_bids,
    record_outbound_request,
)
from audnet.adapters.base import Bidder
from audnet.common.exceptions import BadInputError, ConfigError, TransportError
from audnet.common.logger import LoggerMixin
from audnet.schemas.adapter import BidderResponse, RequestData, ResponseData, TypedBid
from audnet.schemas.openrtb import BidRequest


@dataclass
class AuctionResult:
    """Everything one adapter produced for one inbound bid request."""

    request_id: str
    bids: list[TypedBid] = field(default_factory=list)
    errors: list[Exception] = field(default_factory=list)
    currency: str = "USD"


def error_kind(error: Exception) -> str:
    """Classify an error for reporting and metrics."""
    if isinstance(error, BadInputError):
        return "bad_input"
    if isinstance(error, ConfigError):
        return "config"
    if isinstance(error, TransportError):
        return "transport"
    if isinstance(error, ValidationError):
        return "decode"
    if isinstance(error, (PydanticSerializationError, orjson.JSONEncodeError)):
        return "serialization"
    return "unknown"


class BidderDispatcher(LoggerMixin):
    """Runs one bidder adapter against its downstream endpoint."""

    def __init__(
        self,
        bidder: Bidder,
        client: httpx.AsyncClient,
        timeout_ms: Optional[int] = None,
    ):
        self._bidder = bidder
        self._client = client
        self._timeout = timeout_ms / 1000 if timeout_ms else None

    @property
    def bidder(self) -> Bidder:
        return self._bidder

    async def run(self, request: BidRequest) -> AuctionResult:
        """Build, send and map every outbound request for ``request``."""
        result = AuctionResult(request_id=request.id)

        request_datas, build_errors = self._bidder.make_requests(request)
        result.errors.extend(build_errors)

        responses = await asyncio.gather(
            *(self._call(request, request_data) for request_data in request_datas)
        )

        for bidder_response, call_errors in responses:
            result.errors.extend(call_errors)
            if bidder_response is not None:
                result.bids.extend(bidder_response.bids)
                result.currency = bidder_response.currency

        for error in result.errors:
            record_adapter_error(error_kind(error))
        record_bids(len(result.bids))

        self.logger.info(
            "Auction completed",
            request_id=request.id,
            bidder=self._bidder.name,
            imps=len(request.imp),
            outbound=len(request_datas),
            bids=len(result.bids),
            errors=len(result.errors),
        )

        return result

    async def _call(
        self,
        request: BidRequest,
        request_data: RequestData,
    ) -> tuple[BidderResponse | None, list[Exception]]:
        """Send one outbound request and map its response."""
        start_time = time.perf_counter()
        try:
            http_response = await self._client.request(
                request_data.method,
                request_data.uri,
                content=request_data.body,
                headers=request_data.headers,
                timeout=self._timeout if self._timeout is not None else httpx.USE_CLIENT_DEFAULT,
            )
        except httpx.HTTPError as e:
            record_outbound_request("error", time.perf_counter() - start_time)
            self.logger.warning(
                "Placement-bid request failed",
                request_id=request.id,
                uri=request_data.uri,
                error=str(e),
                error_type=e.__class__.__name__,
            )
            return None, [
                TransportError(
                    f"{e.__class__.__name__}: {e}",
                    details={"uri": request_data.uri},
                )
            ]

        record_outbound_request(
            str(http_response.status_code), time.perf_counter() - start_time
        )

        response = ResponseData(
            status_code=http_response.status_code,
            body=http_response.content,
            headers=http_response.headers,
        )
        return self._bidder.make_bids(request, request_data, response)
