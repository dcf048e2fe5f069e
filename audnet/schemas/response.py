"""
API response schemas for the auction endpoint.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class TypedBidResponse(BaseModel):
    """A returned bid and its ad format."""

    bid: dict[str, Any] = Field(..., description="OpenRTB bid object")
    type: str = Field(..., description="Ad format: banner, video, audio or native")


class ErrorDetail(BaseModel):
    """One error raised while building requests or mapping responses."""

    kind: str = Field(
        ...,
        description="bad_input, config, transport, decode, serialization or unknown",
    )
    message: str = Field(..., description="Human-readable error message")


class AuctionResponse(BaseModel):
    """Bids and errors collected for one inbound bid request."""

    id: str = Field(..., description="Inbound BidRequest.id")
    bidder: str = Field(..., description="Adapter name")
    currency: str = Field("USD", description="Currency of the returned bids")
    bids: list[TypedBidResponse] = Field(default_factory=list)
    errors: list[ErrorDetail] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str = Field(..., description="Service status")
    version: str = Field(..., description="Service version")
    bidder: str = Field(..., description="Adapter name")
    configured: bool = Field(..., description="Adapter has a platform id")


class ErrorResponse(BaseModel):
    """Error response schema."""

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    details: dict[str, Any] | None = Field(None, description="Error details")
