"""
Services used by the adapter server.
"""

from audnet.ad_server.services.dispatcher import AuctionResult, BidderDispatcher, error_kind

__all__ = [
    "AuctionResult",
    "BidderDispatcher",
    "error_kind",
]
