"""
audnet – Audience Network bidder adapter.

Splits OpenRTB bid requests into one placement-bid request per impression
and maps Audience Network bid responses back into typed bids.
"""

__version__ = "0.1.0"
