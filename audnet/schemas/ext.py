"""
Extension payloads carried in ``imp.ext`` and ``request.ext``.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ExtImpBidder(BaseModel):
    """Generic ``imp.ext`` envelope: ``{"bidder": {...}, "prebid": {...}}``."""

    bidder: dict[str, Any] = Field(..., description="Bidder-specific parameters")
    prebid: Optional[dict[str, Any]] = None


class ExtImpAudienceNetwork(BaseModel):
    """Audience Network parameters inside ``imp.ext.bidder``.

    ``placementId`` is either a bare placement id or the legacy
    ``<publisherId>_<placementId>`` composite.
    """

    model_config = ConfigDict(populate_by_name=True)

    placement_id: Optional[str] = Field(None, alias="placementId")
    publisher_id: Optional[str] = Field(None, alias="publisherId")


class ExtRequestAudienceNetwork(BaseModel):
    """Top-level ``ext`` sent to Audience Network."""

    platformid: str
