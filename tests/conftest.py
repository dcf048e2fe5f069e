"""
Pytest configuration and fixtures.
"""

import os

os.environ.setdefault("AUDNET_ENV", "test")

from collections.abc import AsyncGenerator, Callable
from typing import Any

import httpx
import orjson
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from audnet.ad_server.main import app
from audnet.ad_server.routers.deps import get_dispatcher
from audnet.ad_server.services.dispatcher import BidderDispatcher
from audnet.adapters.audience_network import AdapterConfig, AudienceNetworkAdapter
from audnet.schemas.openrtb import BidRequest

TEST_ENDPOINT = "https://an.example.test/placementbid.ortb"
TEST_PLATFORM_ID = "test-platform"


@pytest.fixture
def adapter() -> AudienceNetworkAdapter:
    """Adapter configured for the fake downstream endpoint."""
    return AudienceNetworkAdapter(
        AdapterConfig(endpoint=TEST_ENDPOINT, platform_id=TEST_PLATFORM_ID)
    )


@pytest.fixture
def make_imp() -> Callable[..., dict[str, Any]]:
    """Factory for impression dicts carrying Audience Network params."""

    def _make_imp(
        imp_id: str,
        placement_id: str | None = None,
        publisher_id: str | None = None,
    ) -> dict[str, Any]:
        bidder: dict[str, Any] = {}
        if placement_id is not None:
            bidder["placementId"] = placement_id
        if publisher_id is not None:
            bidder["publisherId"] = publisher_id
        return {
            "id": imp_id,
            "banner": {"format": [{"w": 300, "h": 250}]},
            "ext": {"bidder": bidder},
        }

    return _make_imp


@pytest.fixture
def app_bid_request(make_imp: Callable[..., dict[str, Any]]) -> BidRequest:
    """Two valid impressions on app inventory."""
    return BidRequest.model_validate({
        "id": "req-app-1",
        "imp": [
            make_imp("imp-1", placement_id="abc", publisher_id="123"),
            make_imp("imp-2", placement_id="456_def"),
        ],
        "app": {
            "id": "app-1",
            "bundle": "com.example.game",
            "publisher": {"id": "host-publisher", "name": "Example Games"},
        },
        "device": {"ua": "Mozilla/5.0", "ip": "203.0.113.7", "ifa": "ifa-1"},
        "user": {"buyeruid": "fb-uid-1"},
        "ext": {"prebid": {"debug": True}},
        "tmax": 500,
    })


@pytest.fixture
def site_bid_request(make_imp: Callable[..., dict[str, Any]]) -> BidRequest:
    """One valid impression on site inventory."""
    return BidRequest.model_validate({
        "id": "req-site-1",
        "imp": [make_imp("imp-1", placement_id="abc", publisher_id="123")],
        "site": {"id": "site-1", "page": "https://news.example.com/article"},
    })


def bid_response_body(response_id: str, *seats: list[dict[str, Any]]) -> bytes:
    """Encode an OpenRTB bid response with one seatbid per ``seats`` entry."""
    return orjson.dumps({
        "id": response_id,
        "cur": "USD",
        "seatbid": [
            {"seat": f"seat-{i}", "bid": bids} for i, bids in enumerate(seats)
        ],
    })


@pytest.fixture
def downstream_requests() -> list[httpx.Request]:
    """Requests received by the fake downstream endpoint."""
    return []


@pytest.fixture
def downstream(
    downstream_requests: list[httpx.Request],
) -> Callable[[httpx.Request], httpx.Response]:
    """
    Fake Audience Network endpoint.

    Bids 1.5 on every impression whose tag id does not start with "nobid";
    tag ids starting with "reject" get a 400 with an error header and
    tag ids starting with "down" raise a connection error.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        downstream_requests.append(request)
        payload = orjson.loads(request.content)
        imp = payload["imp"][0]
        tag_id = imp["tagid"]

        if tag_id.startswith("down"):
            raise httpx.ConnectError("connection refused", request=request)
        if tag_id.startswith("reject"):
            return httpx.Response(400, headers={"x-fb-an-errors": "rejected"})
        if tag_id.startswith("nobid"):
            return httpx.Response(200, content=bid_response_body(payload["id"]))

        bid = {
            "id": f"bid-{imp['id']}",
            "impid": imp["id"],
            "price": 1.5,
            "adm": "{\"type\":\"ID\",\"bid_id\":\"1\"}",
            "crid": f"cr-{tag_id}",
        }
        return httpx.Response(200, content=bid_response_body(payload["id"], [bid]))

    return handler


@pytest_asyncio.fixture
async def http_client(
    downstream: Callable[[httpx.Request], httpx.Response],
) -> AsyncGenerator[httpx.AsyncClient, None]:
    """httpx client wired to the fake downstream endpoint."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(downstream)) as client:
        yield client


@pytest.fixture
def dispatcher(
    adapter: AudienceNetworkAdapter,
    http_client: httpx.AsyncClient,
) -> BidderDispatcher:
    """Dispatcher running the adapter against the fake endpoint."""
    return BidderDispatcher(bidder=adapter, client=http_client, timeout_ms=200)


@pytest_asyncio.fixture
async def client(dispatcher: BidderDispatcher) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with the dispatcher overridden."""
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
