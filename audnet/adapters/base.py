"""
Base bidder class for adapters that talk to a single demand endpoint.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from audnet.common.exceptions import ConfigError
from audnet.schemas.adapter import BidderResponse, RequestData, ResponseData
from audnet.schemas.openrtb import BidRequest


class Bidder(ABC):
    """
    Abstract base class for bidder adapters.

    An adapter turns one inbound bid request into outbound HTTP requests and
    each HTTP response back into typed bids. It performs no I/O itself.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Adapter name used for cookie sync bookkeeping."""
        pass

    @property
    def skip_no_cookies(self) -> bool:
        """Whether the host may skip this bidder when the user has no cookie."""
        return False

    @property
    def configured(self) -> bool:
        return True

    @abstractmethod
    def make_requests(
        self,
        request: BidRequest,
    ) -> tuple[list[RequestData], list[Exception]]:
        """
        Build outbound requests for a bid request.

        Args:
            request: Inbound bid request; never mutated

        Returns:
            Requests to send and errors for the parts that were rejected
        """
        pass

    @abstractmethod
    def make_bids(
        self,
        request: BidRequest,
        request_data: RequestData,
        response: ResponseData,
    ) -> tuple[BidderResponse | None, list[Exception]]:
        """
        Map one downstream response to typed bids.

        Args:
            request: Inbound bid request the outbound request was built from
            request_data: Outbound request that produced ``response``
            response: Downstream HTTP response

        Returns:
            Bidder response, or ``None`` with the errors that prevented it
        """
        pass


class MisconfiguredAdapter(Bidder):
    """Stand-in for an adapter whose deployment configuration is invalid."""

    def __init__(self, name: str, error: ConfigError):
        self._name = name
        self._error = error

    @property
    def name(self) -> str:
        return self._name

    @property
    def configured(self) -> bool:
        return False

    def make_requests(
        self,
        request: BidRequest,
    ) -> tuple[list[RequestData], list[Exception]]:
        return [], [self._error]

    def make_bids(
        self,
        request: BidRequest,
        request_data: RequestData,
        response: ResponseData,
    ) -> tuple[BidderResponse | None, list[Exception]]:
        return None, [self._error]
