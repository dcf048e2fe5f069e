"""
OpenRTB 2.5 / 2.6 Bid Request / Response schemas.

Reference: IAB OpenRTB 2.6 Specification
https://iabtechlab.com/standards/openrtb/

Only the fields an auction host commonly forwards to Audience Network are
declared. Every object also accepts unknown fields so nothing the host
sends is dropped when a request is re-serialized for the downstream
endpoint.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# OpenRTB – Bid Request objects
# ============================================================================

class Geo(BaseModel):
    """Geographic location (Section 3.2.19)."""

    model_config = ConfigDict(extra="allow")

    lat: Optional[float] = None
    lon: Optional[float] = None
    type: Optional[int] = None          # 1=GPS, 2=IP, 3=User
    accuracy: Optional[int] = None
    country: Optional[str] = None       # ISO-3166-1 Alpha-3
    region: Optional[str] = None
    metro: Optional[str] = None
    city: Optional[str] = None
    zip: Optional[str] = None
    utcoffset: Optional[int] = None
    ext: Optional[dict[str, Any]] = None


class Device(BaseModel):
    """Device information (Section 3.2.18)."""

    model_config = ConfigDict(extra="allow")

    ua: Optional[str] = None
    dnt: Optional[int] = None
    lmt: Optional[int] = None           # Limit Ad Tracking (0 or 1)
    ip: Optional[str] = None
    ipv6: Optional[str] = None
    geo: Optional[Geo] = None
    devicetype: Optional[int] = None
    make: Optional[str] = None
    model: Optional[str] = None
    os: Optional[str] = None
    osv: Optional[str] = None
    hwv: Optional[str] = None
    w: Optional[int] = None
    h: Optional[int] = None
    ppi: Optional[int] = None
    pxratio: Optional[float] = None
    js: Optional[int] = None
    language: Optional[str] = None
    carrier: Optional[str] = None
    connectiontype: Optional[int] = None
    ifa: Optional[str] = None           # Advertising ID
    didsha1: Optional[str] = None
    didmd5: Optional[str] = None
    ext: Optional[dict[str, Any]] = None


class Format(BaseModel):
    """Allowed banner size (Section 3.2.10)."""

    model_config = ConfigDict(extra="allow")

    w: Optional[int] = None
    h: Optional[int] = None
    wratio: Optional[int] = None
    hratio: Optional[int] = None
    wmin: Optional[int] = None
    ext: Optional[dict[str, Any]] = None


class Banner(BaseModel):
    """Banner impression object (Section 3.2.6)."""

    model_config = ConfigDict(extra="allow")

    format: list[Format] = Field(default_factory=list)
    w: Optional[int] = None
    h: Optional[int] = None
    btype: list[int] = Field(default_factory=list)
    battr: list[int] = Field(default_factory=list)
    pos: Optional[int] = None
    mimes: list[str] = Field(default_factory=list)
    topframe: Optional[int] = None
    expdir: list[int] = Field(default_factory=list)
    api: list[int] = Field(default_factory=list)
    id: Optional[str] = None
    vcm: Optional[int] = None
    ext: Optional[dict[str, Any]] = None


class Video(BaseModel):
    """Video impression object (Section 3.2.7)."""

    model_config = ConfigDict(extra="allow")

    mimes: list[str] = Field(default_factory=list)
    minduration: Optional[int] = None
    maxduration: Optional[int] = None
    protocols: list[int] = Field(default_factory=list)
    w: Optional[int] = None
    h: Optional[int] = None
    startdelay: Optional[int] = None    # 0=pre-roll, >0=mid-roll, -1=generic mid, -2=generic post
    placement: Optional[int] = None
    linearity: Optional[int] = None
    skip: Optional[int] = None
    battr: list[int] = Field(default_factory=list)
    playbackmethod: list[int] = Field(default_factory=list)
    delivery: list[int] = Field(default_factory=list)
    pos: Optional[int] = None
    api: list[int] = Field(default_factory=list)
    ext: Optional[dict[str, Any]] = None


class Audio(BaseModel):
    """Audio impression object (Section 3.2.8)."""

    model_config = ConfigDict(extra="allow")

    mimes: list[str] = Field(default_factory=list)
    minduration: Optional[int] = None
    maxduration: Optional[int] = None
    protocols: list[int] = Field(default_factory=list)
    startdelay: Optional[int] = None
    ext: Optional[dict[str, Any]] = None


class Native(BaseModel):
    """Native impression object (Section 3.2.9)."""

    model_config = ConfigDict(extra="allow")

    request: str = ""                   # Native markup request payload
    ver: Optional[str] = None
    api: list[int] = Field(default_factory=list)
    battr: list[int] = Field(default_factory=list)
    ext: Optional[dict[str, Any]] = None


class Deal(BaseModel):
    """Deal object for private marketplace (Section 3.2.12)."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., description="Unique deal ID")
    bidfloor: float = 0.0
    bidfloorcur: str = "USD"
    at: Optional[int] = None
    wseat: list[str] = Field(default_factory=list)
    wadomain: list[str] = Field(default_factory=list)
    ext: Optional[dict[str, Any]] = None


class PMP(BaseModel):
    """Private marketplace container (Section 3.2.11)."""

    model_config = ConfigDict(extra="allow")

    private_auction: Optional[int] = None
    deals: list[Deal] = Field(default_factory=list)
    ext: Optional[dict[str, Any]] = None


class Imp(BaseModel):
    """Impression object (Section 3.2.4).

    ``ext`` carries the bidder-specific parameters, e.g.
    ``{"bidder": {"placementId": "...", "publisherId": "..."}}``.
    """

    model_config = ConfigDict(extra="allow")

    id: str = "1"
    banner: Optional[Banner] = None
    video: Optional[Video] = None
    audio: Optional[Audio] = None
    native: Optional[Native] = None
    pmp: Optional[PMP] = None
    displaymanager: Optional[str] = None
    displaymanagerver: Optional[str] = None
    instl: Optional[int] = None
    tagid: Optional[str] = None
    bidfloor: Optional[float] = None
    bidfloorcur: Optional[str] = None
    clickbrowser: Optional[int] = None
    secure: Optional[int] = None
    iframebuster: list[str] = Field(default_factory=list)
    exp: Optional[int] = None
    ext: Optional[dict[str, Any]] = None


class Publisher(BaseModel):
    """Publisher object (Section 3.2.15)."""

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    name: Optional[str] = None
    cat: list[str] = Field(default_factory=list)
    domain: Optional[str] = None
    ext: Optional[dict[str, Any]] = None


class Content(BaseModel):
    """Content object (Section 3.2.16)."""

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    episode: Optional[int] = None
    title: Optional[str] = None
    series: Optional[str] = None
    season: Optional[str] = None
    genre: Optional[str] = None
    url: Optional[str] = None
    cat: list[str] = Field(default_factory=list)
    contentrating: Optional[str] = None
    keywords: Optional[str] = None
    livestream: Optional[int] = None
    len: Optional[int] = None
    language: Optional[str] = None
    ext: Optional[dict[str, Any]] = None


class App(BaseModel):
    """App object (Section 3.2.14)."""

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    name: Optional[str] = None
    bundle: Optional[str] = None
    domain: Optional[str] = None
    storeurl: Optional[str] = None
    cat: list[str] = Field(default_factory=list)
    sectioncat: list[str] = Field(default_factory=list)
    pagecat: list[str] = Field(default_factory=list)
    ver: Optional[str] = None
    privacypolicy: Optional[int] = None
    paid: Optional[int] = None
    publisher: Optional[Publisher] = None
    content: Optional[Content] = None
    keywords: Optional[str] = None
    ext: Optional[dict[str, Any]] = None


class Site(BaseModel):
    """Site object (Section 3.2.13)."""

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    name: Optional[str] = None
    domain: Optional[str] = None
    cat: list[str] = Field(default_factory=list)
    sectioncat: list[str] = Field(default_factory=list)
    pagecat: list[str] = Field(default_factory=list)
    page: Optional[str] = None
    ref: Optional[str] = None           # Referrer URL
    search: Optional[str] = None
    mobile: Optional[int] = None
    privacypolicy: Optional[int] = None
    publisher: Optional[Publisher] = None
    content: Optional[Content] = None
    keywords: Optional[str] = None
    ext: Optional[dict[str, Any]] = None


class Segment(BaseModel):
    """Audience segment (Section 3.2.22)."""

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    name: Optional[str] = None
    value: Optional[str] = None


class Data(BaseModel):
    """User data segment (Section 3.2.21)."""

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    name: Optional[str] = None
    segment: list[Segment] = Field(default_factory=list)


class User(BaseModel):
    """User object (Section 3.2.20)."""

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    buyeruid: Optional[str] = None
    yob: Optional[int] = None
    gender: Optional[str] = None
    keywords: Optional[str] = None
    customdata: Optional[str] = None
    geo: Optional[Geo] = None
    data: list[Data] = Field(default_factory=list)
    ext: Optional[dict[str, Any]] = None


class Regs(BaseModel):
    """Regulatory signals (Section 3.2.3)."""

    model_config = ConfigDict(extra="allow")

    coppa: Optional[int] = None
    gdpr: Optional[int] = None
    us_privacy: Optional[str] = None
    gpp: Optional[str] = None
    gpp_sid: Optional[list[int]] = None
    ext: Optional[dict[str, Any]] = None


class Source(BaseModel):
    """Request source (Section 3.2.2)."""

    model_config = ConfigDict(extra="allow")

    fd: Optional[int] = None
    tid: Optional[str] = None           # Transaction ID
    pchain: Optional[str] = None
    ext: Optional[dict[str, Any]] = None


class BidRequest(BaseModel):
    """
    OpenRTB Bid Request (Section 3.2.1).

    ``imp`` may be empty here; the adapter reports an empty request as bad
    input instead of rejecting it at parse time.
    """

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., description="Unique auction ID")
    imp: list[Imp] = Field(default_factory=list, description="Array of impression objects")
    site: Optional[Site] = None
    app: Optional[App] = None
    device: Optional[Device] = None
    user: Optional[User] = None
    test: Optional[int] = None
    at: Optional[int] = None            # 1=first-price, 2=second-price
    tmax: Optional[int] = None          # Max response time (ms)
    wseat: list[str] = Field(default_factory=list)
    bseat: list[str] = Field(default_factory=list)
    allimps: Optional[int] = None
    cur: list[str] = Field(default_factory=list)
    wlang: list[str] = Field(default_factory=list)
    bcat: list[str] = Field(default_factory=list)
    badv: list[str] = Field(default_factory=list)
    bapp: list[str] = Field(default_factory=list)
    source: Optional[Source] = None
    regs: Optional[Regs] = None
    ext: Optional[dict[str, Any]] = None


# ============================================================================
# OpenRTB – Bid Response objects
# ============================================================================

class Bid(BaseModel):
    """Single bid (Section 4.2.3)."""

    model_config = ConfigDict(extra="allow")

    id: str = Field("", description="Bidder-generated bid ID")
    impid: str = Field("", description="Impression ID from request")
    price: float = Field(0.0, description="Bid price in CPM")
    nurl: Optional[str] = None          # Win notice URL
    burl: Optional[str] = None          # Billing notice URL
    lurl: Optional[str] = None          # Loss notice URL
    adm: Optional[str] = None           # Ad markup
    adid: Optional[str] = None
    adomain: list[str] = Field(default_factory=list)
    bundle: Optional[str] = None
    iurl: Optional[str] = None
    cid: Optional[str] = None           # Campaign ID
    crid: Optional[str] = None          # Creative ID
    tactic: Optional[str] = None
    cat: list[str] = Field(default_factory=list)
    attr: list[int] = Field(default_factory=list)
    api: Optional[int] = None
    protocol: Optional[int] = None
    qagmediarating: Optional[int] = None
    language: Optional[str] = None
    dealid: Optional[str] = None
    w: Optional[int] = None
    h: Optional[int] = None
    wratio: Optional[int] = None
    hratio: Optional[int] = None
    exp: Optional[int] = None
    ext: Optional[dict[str, Any]] = None


class SeatBid(BaseModel):
    """Seat bid (Section 4.2.2)."""

    model_config = ConfigDict(extra="allow")

    bid: list[Bid] = Field(default_factory=list)
    seat: Optional[str] = None          # Buyer seat ID
    group: int = 0
    ext: Optional[dict[str, Any]] = None


class BidResponse(BaseModel):
    """OpenRTB Bid Response (Section 4.2.1)."""

    model_config = ConfigDict(extra="allow")

    id: str = Field("", description="Matches BidRequest.id")
    seatbid: list[SeatBid] = Field(default_factory=list)
    bidid: Optional[str] = None
    cur: str = "USD"
    customdata: Optional[str] = None
    nbr: Optional[int] = None           # No-bid reason code (Section 5.24)
    ext: Optional[dict[str, Any]] = None
