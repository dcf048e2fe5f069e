"""
Auction Router.

Endpoints:
    POST /api/v1/auction/bid – Run an OpenRTB bid request through Audience Network
"""

from __future__ import annotations

import time

from fastapi import APIRouter, Depends

from audnet.ad_server.routers.deps import get_dispatcher
from audnet.ad_server.services.dispatcher import AuctionResult, BidderDispatcher, error_kind
from audnet.common.logger import get_logger
from audnet.schemas.openrtb import BidRequest
from audnet.schemas.response import AuctionResponse, ErrorDetail, TypedBidResponse

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/bid",
    response_model=AuctionResponse,
    response_model_exclude_none=True,
    summary="Audience Network auction",
    description=(
        "Splits an OpenRTB bid request into one placement-bid request per "
        "impression, calls Audience Network and returns the banner bids "
        "together with every error encountered. Bad impressions are reported "
        "without failing the rest of the request."
    ),
)
async def auction_bid(
    bid_request: BidRequest,
    dispatcher: BidderDispatcher = Depends(get_dispatcher),
) -> AuctionResponse:
    """Run one auction round against Audience Network."""
    start_time = time.monotonic()

    result = await dispatcher.run(bid_request)

    logger.info(
        "Auction response",
        request_id=bid_request.id,
        num_bids=len(result.bids),
        num_errors=len(result.errors),
        processing_ms=round((time.monotonic() - start_time) * 1000, 2),
    )

    return _to_auction_response(dispatcher.bidder.name, result)


def _to_auction_response(bidder: str, result: AuctionResult) -> AuctionResponse:
    """Convert an ``AuctionResult`` to the API schema."""
    return AuctionResponse(
        id=result.request_id,
        bidder=bidder,
        currency=result.currency,
        bids=[
            TypedBidResponse(
                bid=typed.bid.model_dump(exclude_none=True),
                type=typed.bid_type.value,
            )
            for typed in result.bids
        ],
        errors=[
            ErrorDetail(kind=error_kind(error), message=str(error))
            for error in result.errors
        ],
    )
