"""
Shared router dependencies.
"""

from fastapi import Request

from audnet.ad_server.services.dispatcher import BidderDispatcher


def get_dispatcher(request: Request) -> BidderDispatcher:
    """Dispatcher created by the application lifespan."""
    return request.app.state.dispatcher
