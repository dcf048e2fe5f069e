"""
Pydantic schemas and adapter values.
Includes OpenRTB bid request / response models.
"""

from audnet.schemas.adapter import (
    BidderResponse,
    BidType,
    RequestData,
    ResponseData,
    TypedBid,
)
from audnet.schemas.ext import (
    ExtImpAudienceNetwork,
    ExtImpBidder,
    ExtRequestAudienceNetwork,
)
from audnet.schemas.openrtb import (
    App,
    Banner,
    Bid,
    BidRequest,
    BidResponse,
    Imp,
    Publisher,
    SeatBid,
    Site,
)
from audnet.schemas.response import (
    AuctionResponse,
    ErrorDetail,
    ErrorResponse,
    HealthResponse,
    TypedBidResponse,
)

__all__ = [
    # Adapter values
    "BidType",
    "BidderResponse",
    "RequestData",
    "ResponseData",
    "TypedBid",
    # Extensions
    "ExtImpBidder",
    "ExtImpAudienceNetwork",
    "ExtRequestAudienceNetwork",
    # OpenRTB
    "App",
    "Banner",
    "Bid",
    "BidRequest",
    "BidResponse",
    "Imp",
    "Publisher",
    "SeatBid",
    "Site",
    # API responses
    "AuctionResponse",
    "ErrorDetail",
    "ErrorResponse",
    "HealthResponse",
    "TypedBidResponse",
]
