"""
Audience Network bidder adapter.

Audience Network expects one impression per placement-bid request, so an
inbound bid request is split into one outbound request per impression:

    1. Parse placement / publisher ids from ``imp.ext.bidder``
    2. Tag the impression with ``<publisherId>_<placementId>``
    3. Attach the publisher to the app (or site) and the platform id to ``ext``
    4. POST the single-impression request to the placement-bid endpoint

Every returned bid is a banner bid.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import httpx
import orjson
from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from audnet.adapters.base import Bidder, MisconfiguredAdapter
from audnet.adapters.params import PlacementIds, parse_placement_ids
from audnet.common.config import AdapterSettings
from audnet.common.exceptions import BadInputError, ConfigError
from audnet.common.logger import get_logger
from audnet.common.utils import json_dumps_bytes
from audnet.schemas.adapter import (
    BidderResponse,
    BidType,
    RequestData,
    ResponseData,
    TypedBid,
)
from audnet.schemas.ext import ExtRequestAudienceNetwork
from audnet.schemas.openrtb import BidRequest, BidResponse, Imp, Publisher

logger = get_logger(__name__)

BIDDER_NAME = "audienceNetwork"

ERROR_HEADER = "x-fb-an-errors"

_REQUEST_HEADERS: dict[str, str] = {
    "Content-Type": "application/json;charset=utf-8",
    "Accept": "application/json",
}


@dataclass(frozen=True)
class AdapterConfig:
    """Immutable per-deployment adapter configuration."""

    endpoint: str
    platform_id: str


class AudienceNetworkAdapter(Bidder):
    """Splits bid requests per impression and maps placement-bid responses."""

    def __init__(self, config: AdapterConfig):
        self._config = config

    @property
    def name(self) -> str:
        return BIDDER_NAME

    @property
    def config(self) -> AdapterConfig:
        return self._config

    # ------------------------------------------------------------------
    # Request building
    # ------------------------------------------------------------------

    def make_requests(
        self,
        request: BidRequest,
    ) -> tuple[list[RequestData], list[Exception]]:
        """
        Build one placement-bid request per impression.

        Impressions with bad parameters are skipped and reported. A
        serialization failure aborts the call and discards every request.
        """
        errors: list[Exception] = []

        if not request.imp:
            errors.append(BadInputError("no impressions provided"))
            return [], errors

        inventory = _inventory_field(request)
        if inventory is None:
            errors.append(BadInputError("no app or site provided"))
            return [], errors

        reqs: list[RequestData] = []
        ext = ExtRequestAudienceNetwork(platformid=self._config.platform_id).model_dump()

        for imp in request.imp:
            try:
                ids = parse_placement_ids(imp.ext)
            except BadInputError as e:
                logger.debug(
                    "Skipping impression with invalid params",
                    request_id=request.id,
                    imp_id=imp.id,
                    error=e.message,
                )
                errors.append(e)
                continue

            single = self._single_imp_request(request, imp, ids, inventory, ext)

            try:
                body = _serialize(single)
            except (PydanticSerializationError, orjson.JSONEncodeError) as e:
                logger.error(
                    "Failed to serialize placement-bid request",
                    request_id=request.id,
                    imp_id=imp.id,
                    error=str(e),
                )
                errors.append(e)
                return [], errors

            reqs.append(
                RequestData(
                    method="POST",
                    uri=self._config.endpoint,
                    body=body,
                    headers=httpx.Headers(_REQUEST_HEADERS),
                )
            )

        if not reqs:
            errors.append(BadInputError("no valid impressions provided"))
            return [], errors

        return reqs, errors

    @staticmethod
    def _single_imp_request(
        request: BidRequest,
        imp: Imp,
        ids: PlacementIds,
        inventory: str,
        ext: dict[str, Any],
    ) -> BidRequest:
        """Copy ``request`` scoped to ``imp``; the originals are left untouched."""
        tagged_imp = imp.model_copy(update={"tagid": ids.tag_id, "ext": None})

        owner = getattr(request, inventory)
        publisher = Publisher(id=ids.publisher_id)

        return request.model_copy(
            update={
                "imp": [tagged_imp],
                "ext": dict(ext),
                inventory: owner.model_copy(update={"publisher": publisher}),
            }
        )

    # ------------------------------------------------------------------
    # Response mapping
    # ------------------------------------------------------------------

    def make_bids(
        self,
        request: BidRequest,
        request_data: RequestData,
        response: ResponseData,
    ) -> tuple[BidderResponse | None, list[Exception]]:
        """Map a placement-bid response to banner bids."""
        if response.status_code != httpx.codes.OK:
            msg = response.headers.get(ERROR_HEADER, "")
            return None, [
                BadInputError(
                    f"Unexpected status code {response.status_code} with error message '{msg}'",
                    details={"status_code": response.status_code},
                )
            ]

        try:
            bid_resp = BidResponse.model_validate_json(response.body)
        except ValidationError as e:
            return None, [e]

        out = BidderResponse(currency=bid_resp.cur)
        for seatbid in bid_resp.seatbid:
            for bid in seatbid.bid:
                out.bids.append(TypedBid(bid=bid, bid_type=BidType.BANNER))

        return out, []


def _inventory_field(request: BidRequest) -> Optional[str]:
    """Return ``"app"`` or ``"site"``, whichever carries the inventory."""
    if request.app is not None:
        return "app"
    if request.site is not None:
        return "site"
    return None


def _serialize(request: BidRequest) -> bytes:
    """Serialize exactly the fields the host sent plus the ones set here."""
    return json_dumps_bytes(request.model_dump(exclude_unset=True, exclude_none=True))


def new_audience_network_bidder(settings: AdapterSettings) -> Bidder:
    """
    Build the Audience Network adapter from deployment settings.

    Returns a ``MisconfiguredAdapter`` when no platform id is configured,
    since every call to Audience Network would be rejected without one.
    """
    if not settings.platform_id:
        logger.error(
            "No Audience Network platform id specified. Calls to the Audience "
            "Network will fail. Did you set adapter.platform_id in the app config?"
        )
        return MisconfiguredAdapter(
            name=BIDDER_NAME,
            error=ConfigError(
                "Audience Network is not configured properly on this deployment. "
                "If you believe this should work, contact the company hosting the "
                "service and tell them to check their configuration."
            ),
        )

    return AudienceNetworkAdapter(
        AdapterConfig(endpoint=settings.endpoint, platform_id=settings.platform_id)
    )
