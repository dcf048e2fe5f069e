"""
Bidder adapters.
"""

from audnet.adapters.audience_network import (
    BIDDER_NAME,
    AdapterConfig,
    AudienceNetworkAdapter,
    new_audience_network_bidder,
)
from audnet.adapters.base import Bidder, MisconfiguredAdapter
from audnet.adapters.params import PlacementIds, parse_placement_ids

__all__ = [
    "BIDDER_NAME",
    "AdapterConfig",
    "AudienceNetworkAdapter",
    "Bidder",
    "MisconfiguredAdapter",
    "PlacementIds",
    "new_audience_network_bidder",
    "parse_placement_ids",
]
