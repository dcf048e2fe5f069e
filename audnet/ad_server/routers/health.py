"""
Health check endpoints.
"""

from fastapi import APIRouter, Depends

from audnet.ad_server.routers.deps import get_dispatcher
from audnet.ad_server.services.dispatcher import BidderDispatcher
from audnet.common.config import get_settings
from audnet.schemas.response import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(
    dispatcher: BidderDispatcher = Depends(get_dispatcher),
) -> HealthResponse:
    """
    Health check endpoint.

    Reports "degraded" when the adapter is running without a platform id.
    """
    settings = get_settings()
    bidder = dispatcher.bidder

    return HealthResponse(
        status="healthy" if bidder.configured else "degraded",
        version=settings.app_version,
        bidder=bidder.name,
        configured=bidder.configured,
    )


@router.get("/ping")
async def ping() -> dict:
    """Simple ping endpoint."""
    return {"pong": True}


@router.get("/ready")
async def readiness_check(
    dispatcher: BidderDispatcher = Depends(get_dispatcher),
) -> dict:
    """Readiness check for Kubernetes."""
    if not dispatcher.bidder.configured:
        return {"ready": False, "reason": "Adapter is not configured"}

    return {"ready": True}


@router.get("/live")
async def liveness_check() -> dict:
    """Liveness check for Kubernetes."""
    return {"alive": True}
