"""
Values exchanged between a bidder adapter and the HTTP transport.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

import httpx

from audnet.schemas.openrtb import Bid


class BidType(str, Enum):
    """Ad format a bid is made for."""

    BANNER = "banner"
    VIDEO = "video"
    AUDIO = "audio"
    NATIVE = "native"


@dataclass(frozen=True)
class RequestData:
    """One outbound HTTP request to a bidder endpoint."""

    method: str
    uri: str
    body: bytes
    headers: httpx.Headers = field(default_factory=httpx.Headers)


@dataclass(frozen=True)
class ResponseData:
    """Downstream HTTP reply paired with the ``RequestData`` that produced it."""

    status_code: int
    body: bytes = b""
    headers: httpx.Headers = field(default_factory=httpx.Headers)


@dataclass
class TypedBid:
    """A bid together with the ad format it was made for."""

    bid: Bid
    bid_type: BidType


@dataclass
class BidderResponse:
    """Bids extracted from a single downstream response."""

    bids: list[TypedBid] = field(default_factory=list)
    currency: str = "USD"
