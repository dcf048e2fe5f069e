"""
audnet API Routers.

Modules:
    auction – OpenRTB bid request in, Audience Network bids out
    health  – Health check
"""
