"""
Tests for the Audience Network adapter.
"""

from collections.abc import Callable
from typing import Any

import httpx
import orjson
import pytest
from pydantic import ValidationError

from audnet.adapters.audience_network import (
    BIDDER_NAME,
    AudienceNetworkAdapter,
    new_audience_network_bidder,
)
from audnet.adapters.base import MisconfiguredAdapter
from audnet.common.config import AdapterSettings
from audnet.common.exceptions import BadInputError, ConfigError
from audnet.schemas.adapter import BidType, RequestData, ResponseData
from audnet.schemas.openrtb import BidRequest

ENDPOINT = "https://an.example.test/placementbid.ortb"


def _decode(request_data: RequestData) -> dict[str, Any]:
    return orjson.loads(request_data.body)


class TestIdentity:
    """Adapter name and cookie handling."""

    def test_name(self, adapter: AudienceNetworkAdapter) -> None:
        assert adapter.name == "audienceNetwork"

    def test_does_not_skip_without_cookies(self, adapter: AudienceNetworkAdapter) -> None:
        assert adapter.skip_no_cookies is False


class TestMakeRequests:
    """Per-impression request fan-out."""

    def test_no_impressions(self, adapter: AudienceNetworkAdapter) -> None:
        reqs, errs = adapter.make_requests(
            BidRequest.model_validate({"id": "r", "imp": [], "app": {"id": "a"}})
        )
        assert reqs == []
        assert len(errs) == 1
        assert isinstance(errs[0], BadInputError)
        assert str(errs[0]) == "no impressions provided"

    def test_one_request_per_impression(
        self,
        adapter: AudienceNetworkAdapter,
        app_bid_request: BidRequest,
    ) -> None:
        reqs, errs = adapter.make_requests(app_bid_request)
        assert errs == []
        assert len(reqs) == 2

        first, second = (_decode(r) for r in reqs)
        assert [imp["id"] for imp in first["imp"]] == ["imp-1"]
        assert [imp["id"] for imp in second["imp"]] == ["imp-2"]

    def test_request_envelope(
        self,
        adapter: AudienceNetworkAdapter,
        app_bid_request: BidRequest,
    ) -> None:
        reqs, _ = adapter.make_requests(app_bid_request)
        request_data = reqs[0]

        assert request_data.method == "POST"
        assert request_data.uri == adapter.config.endpoint
        assert request_data.headers["Content-Type"] == "application/json;charset=utf-8"
        assert request_data.headers["Accept"] == "application/json"

    def test_body_for_modern_params(
        self,
        adapter: AudienceNetworkAdapter,
        app_bid_request: BidRequest,
    ) -> None:
        reqs, _ = adapter.make_requests(app_bid_request)
        body = _decode(reqs[0])

        assert len(body["imp"]) == 1
        assert body["imp"][0]["tagid"] == "123_abc"
        assert "ext" not in body["imp"][0]
        assert body["app"]["publisher"] == {"id": "123"}
        assert body["ext"] == {"platformid": adapter.config.platform_id}

    def test_body_for_legacy_params(
        self,
        adapter: AudienceNetworkAdapter,
        app_bid_request: BidRequest,
    ) -> None:
        reqs, _ = adapter.make_requests(app_bid_request)
        body = _decode(reqs[1])

        assert body["imp"][0]["tagid"] == "456_def"
        assert body["app"]["publisher"] == {"id": "456"}

    def test_forwards_host_fields(
        self,
        adapter: AudienceNetworkAdapter,
        app_bid_request: BidRequest,
    ) -> None:
        reqs, _ = adapter.make_requests(app_bid_request)
        body = _decode(reqs[0])

        assert body["id"] == "req-app-1"
        assert body["app"]["bundle"] == "com.example.game"
        assert body["device"]["ifa"] == "ifa-1"
        assert body["user"]["buyeruid"] == "fb-uid-1"
        assert body["tmax"] == 500
        assert body["imp"][0]["banner"] == {"format": [{"w": 300, "h": 250}]}
        assert "site" not in body
        # Defaults the host never sent are not invented
        assert "cur" not in body
        assert "bidfloor" not in body["imp"][0]

    def test_forwards_undeclared_nested_fields(
        self,
        adapter: AudienceNetworkAdapter,
    ) -> None:
        request = BidRequest.model_validate({
            "id": "r",
            "imp": [{
                "id": "1",
                "video": {"mimes": ["video/mp4"], "minbitrate": 300, "sequence": 2},
                "ext": {"bidder": {"placementId": "abc", "publisherId": "123"}},
            }],
            "app": {"id": "a", "publisher": {"id": "p", "cattax": 2}},
            "device": {"ua": "x", "mccmnc": "310-005", "geofetch": 1, "geo": {"ipservice": 3}},
            "user": {"id": "u", "eids": [{"source": "example.com"}]},
            "regs": {"coppa": 0, "gpc": "1"},
            "source": {"tid": "t", "schain": {"ver": "1.0"}},
        })
        reqs, errs = adapter.make_requests(request)
        assert errs == []
        body = _decode(reqs[0])

        assert body["device"]["mccmnc"] == "310-005"
        assert body["device"]["geofetch"] == 1
        assert body["device"]["geo"] == {"ipservice": 3}
        assert body["imp"][0]["video"]["minbitrate"] == 300
        assert body["imp"][0]["video"]["sequence"] == 2
        assert body["user"]["eids"] == [{"source": "example.com"}]
        assert body["regs"]["gpc"] == "1"
        assert body["source"]["schain"] == {"ver": "1.0"}
        assert body["app"]["publisher"] == {"id": "123"}

    def test_site_inventory(
        self,
        adapter: AudienceNetworkAdapter,
        site_bid_request: BidRequest,
    ) -> None:
        reqs, errs = adapter.make_requests(site_bid_request)
        assert errs == []
        body = _decode(reqs[0])

        assert body["site"]["publisher"] == {"id": "123"}
        assert body["site"]["page"] == "https://news.example.com/article"
        assert "app" not in body

    def test_app_wins_over_site(
        self,
        adapter: AudienceNetworkAdapter,
        make_imp: Callable[..., dict[str, Any]],
    ) -> None:
        request = BidRequest.model_validate({
            "id": "r",
            "imp": [make_imp("1", placement_id="abc", publisher_id="123")],
            "app": {"id": "a"},
            "site": {"id": "s"},
        })
        reqs, _ = adapter.make_requests(request)
        body = _decode(reqs[0])

        assert body["app"]["publisher"] == {"id": "123"}
        assert "publisher" not in body["site"]

    def test_no_app_or_site(
        self,
        adapter: AudienceNetworkAdapter,
        make_imp: Callable[..., dict[str, Any]],
    ) -> None:
        request = BidRequest.model_validate({
            "id": "r",
            "imp": [make_imp("1", placement_id="abc", publisher_id="123")],
        })
        reqs, errs = adapter.make_requests(request)

        assert reqs == []
        assert len(errs) == 1
        assert isinstance(errs[0], BadInputError)
        assert str(errs[0]) == "no app or site provided"

    def test_original_request_not_mutated(
        self,
        adapter: AudienceNetworkAdapter,
        app_bid_request: BidRequest,
    ) -> None:
        before = app_bid_request.model_dump()

        adapter.make_requests(app_bid_request)

        assert app_bid_request.model_dump() == before
        assert app_bid_request.app.publisher.id == "host-publisher"
        assert app_bid_request.imp[0].tagid is None
        assert app_bid_request.imp[0].ext == {
            "bidder": {"placementId": "abc", "publisherId": "123"}
        }
        assert app_bid_request.ext == {"prebid": {"debug": True}}

    def test_bad_impression_skipped(
        self,
        adapter: AudienceNetworkAdapter,
        make_imp: Callable[..., dict[str, Any]],
    ) -> None:
        request = BidRequest.model_validate({
            "id": "r",
            "imp": [
                make_imp("bad", placement_id="abc"),
                make_imp("good", placement_id="abc", publisher_id="123"),
            ],
            "app": {"id": "a"},
        })
        reqs, errs = adapter.make_requests(request)

        assert len(reqs) == 1
        assert _decode(reqs[0])["imp"][0]["id"] == "good"
        assert len(errs) == 1
        assert str(errs[0]) == "Missing publisherId param"

    def test_all_impressions_invalid(
        self,
        adapter: AudienceNetworkAdapter,
        make_imp: Callable[..., dict[str, Any]],
    ) -> None:
        request = BidRequest.model_validate({
            "id": "r",
            "imp": [
                make_imp("1", placement_id=""),
                make_imp("2", placement_id="1_2_3"),
            ],
            "app": {"id": "a"},
        })
        reqs, errs = adapter.make_requests(request)

        assert reqs == []
        assert [str(e) for e in errs] == [
            "Missing placementId param",
            "Invalid placementId param '1_2_3' and publisherId param ''",
            "no valid impressions provided",
        ]
        assert all(isinstance(e, BadInputError) for e in errs)

    def test_serialization_failure_aborts(
        self,
        adapter: AudienceNetworkAdapter,
        make_imp: Callable[..., dict[str, Any]],
    ) -> None:
        unserializable = make_imp("2", placement_id="abc", publisher_id="123")
        unserializable["banner"]["ext"] = {"handle": object()}

        request = BidRequest.model_validate({
            "id": "r",
            "imp": [
                make_imp("1", placement_id="abc", publisher_id="123"),
                make_imp("bad", placement_id=""),
                unserializable,
                make_imp("4", placement_id="abc", publisher_id="123"),
            ],
            "app": {"id": "a"},
        })
        reqs, errs = adapter.make_requests(request)

        assert reqs == []
        assert len(errs) == 2
        assert str(errs[0]) == "Missing placementId param"
        assert not isinstance(errs[1], BadInputError)


class TestMakeBids:
    """Downstream response mapping."""

    @pytest.fixture
    def request_data(self) -> RequestData:
        return RequestData(method="POST", uri=ENDPOINT, body=b"{}")

    def test_non_ok_status(
        self,
        adapter: AudienceNetworkAdapter,
        app_bid_request: BidRequest,
        request_data: RequestData,
    ) -> None:
        response = ResponseData(
            status_code=400,
            headers=httpx.Headers({"X-FB-AN-Errors": "rejected"}),
        )
        bidder_response, errs = adapter.make_bids(app_bid_request, request_data, response)

        assert bidder_response is None
        assert len(errs) == 1
        assert isinstance(errs[0], BadInputError)
        assert "400" in str(errs[0])
        assert "rejected" in str(errs[0])

    def test_non_ok_status_without_error_header(
        self,
        adapter: AudienceNetworkAdapter,
        app_bid_request: BidRequest,
        request_data: RequestData,
    ) -> None:
        response = ResponseData(status_code=204)
        bidder_response, errs = adapter.make_bids(app_bid_request, request_data, response)

        assert bidder_response is None
        assert str(errs[0]) == "Unexpected status code 204 with error message ''"

    def test_malformed_body(
        self,
        adapter: AudienceNetworkAdapter,
        app_bid_request: BidRequest,
        request_data: RequestData,
    ) -> None:
        response = ResponseData(status_code=200, body=b"{not json")
        bidder_response, errs = adapter.make_bids(app_bid_request, request_data, response)

        assert bidder_response is None
        assert len(errs) == 1
        assert isinstance(errs[0], ValidationError)

    def test_bids_from_every_seat(
        self,
        adapter: AudienceNetworkAdapter,
        app_bid_request: BidRequest,
        request_data: RequestData,
    ) -> None:
        body = orjson.dumps({
            "id": "req-app-1",
            "cur": "USD",
            "seatbid": [
                {"seat": "a", "bid": [{"id": "b1", "impid": "imp-1", "price": 1.25}]},
                {"seat": "b", "bid": [{"id": "b2", "impid": "imp-1", "price": 0.75}]},
            ],
        })
        response = ResponseData(status_code=200, body=body)
        bidder_response, errs = adapter.make_bids(app_bid_request, request_data, response)

        assert errs == []
        assert bidder_response is not None
        assert [b.bid.id for b in bidder_response.bids] == ["b1", "b2"]
        assert all(b.bid_type is BidType.BANNER for b in bidder_response.bids)
        assert bidder_response.bids[0].bid.price == 1.25

    def test_response_without_ids_or_price(
        self,
        adapter: AudienceNetworkAdapter,
        app_bid_request: BidRequest,
        request_data: RequestData,
    ) -> None:
        body = orjson.dumps({
            "seatbid": [{"bid": [{"id": "b", "impid": "imp-1", "price": 1.0}, {"adm": "<div/>"}]}],
        })
        response = ResponseData(status_code=200, body=body)
        bidder_response, errs = adapter.make_bids(app_bid_request, request_data, response)

        assert errs == []
        assert bidder_response is not None
        assert [b.bid.id for b in bidder_response.bids] == ["b", ""]
        assert bidder_response.bids[1].bid.price == 0.0
        assert bidder_response.currency == "USD"

    def test_wrong_field_type(
        self,
        adapter: AudienceNetworkAdapter,
        app_bid_request: BidRequest,
        request_data: RequestData,
    ) -> None:
        body = orjson.dumps({"id": "r", "seatbid": [{"bid": [{"id": "b", "price": "high"}]}]})
        response = ResponseData(status_code=200, body=body)
        bidder_response, errs = adapter.make_bids(app_bid_request, request_data, response)

        assert bidder_response is None
        assert len(errs) == 1
        assert isinstance(errs[0], ValidationError)

    def test_no_bids_is_not_an_error(
        self,
        adapter: AudienceNetworkAdapter,
        app_bid_request: BidRequest,
        request_data: RequestData,
    ) -> None:
        response = ResponseData(status_code=200, body=b'{"id": "req-app-1"}')
        bidder_response, errs = adapter.make_bids(app_bid_request, request_data, response)

        assert errs == []
        assert bidder_response is not None
        assert bidder_response.bids == []


class TestFactory:
    """Construction from deployment settings."""

    def test_configured(self) -> None:
        bidder = new_audience_network_bidder(
            AdapterSettings(endpoint=ENDPOINT, platform_id="p-1")
        )
        assert isinstance(bidder, AudienceNetworkAdapter)
        assert bidder.config.endpoint == ENDPOINT
        assert bidder.config.platform_id == "p-1"
        assert bidder.configured is True

    def test_missing_platform_id(self, app_bid_request: BidRequest) -> None:
        bidder = new_audience_network_bidder(
            AdapterSettings(endpoint=ENDPOINT, platform_id="")
        )
        assert isinstance(bidder, MisconfiguredAdapter)
        assert bidder.name == BIDDER_NAME
        assert bidder.configured is False

        reqs, errs = bidder.make_requests(app_bid_request)
        assert reqs == []
        assert len(errs) == 1
        assert isinstance(errs[0], ConfigError)
        assert "not configured properly" in str(errs[0])
