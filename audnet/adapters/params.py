"""
Placement / publisher identifier extraction for Audience Network impressions.

Callers send ``placementId`` and ``publisherId`` separately. Older
integrations send only ``placementId`` as ``<publisherId>_<placementId>``;
in that case the composite wins over any separately supplied publisher id.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from pydantic import ValidationError

from audnet.common.exceptions import BadInputError
from audnet.schemas.ext import ExtImpAudienceNetwork, ExtImpBidder

_DELIMITER = "_"


@dataclass(frozen=True)
class PlacementIds:
    """Normalized identifier pair; both fields are non-empty."""

    placement_id: str
    publisher_id: str

    @property
    def tag_id(self) -> str:
        """Value sent downstream as ``imp.tagid``."""
        return f"{self.publisher_id}{_DELIMITER}{self.placement_id}"


def parse_placement_ids(imp_ext: Optional[dict[str, Any]]) -> PlacementIds:
    """
    Extract the identifier pair from an impression's ``ext``.

    Args:
        imp_ext: The impression extension, ``{"bidder": {...}}``.

    Returns:
        The normalized ``PlacementIds``.

    Raises:
        BadInputError: If the extension cannot be decoded or the
            identifiers are missing or malformed.
    """
    try:
        bidder_ext = ExtImpBidder.model_validate(imp_ext)
        params = ExtImpAudienceNetwork.model_validate(bidder_ext.bidder)
    except ValidationError as e:
        raise BadInputError(str(e)) from e

    placement_id = params.placement_id or ""
    publisher_id = params.publisher_id or ""

    if not placement_id:
        raise BadInputError("Missing placementId param")

    tokens = placement_id.split(_DELIMITER)
    if len(tokens) == 1:
        if not publisher_id:
            raise BadInputError("Missing publisherId param")
        return PlacementIds(placement_id=placement_id, publisher_id=publisher_id)

    if len(tokens) == 2 and all(tokens):
        return PlacementIds(placement_id=tokens[1], publisher_id=tokens[0])

    raise BadInputError(
        f"Invalid placementId param '{placement_id}' and publisherId param '{publisher_id}'",
        details={"placementId": placement_id, "publisherId": publisher_id},
    )
