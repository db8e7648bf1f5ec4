"""HTTP-facing controllers that validate requests and call the use cases.

Successful calls return a JSON-serialisable body (or None); failures raise
RestError carrying the status code and body of the response.
"""

from __future__ import annotations

import re
from typing import Any

from auctionhouse.entities import is_valid_uuid
from auctionhouse.errors import (
    Cause,
    InternalError,
    RestError,
    convert_error,
    rest_bad_request,
)
from auctionhouse.validation import (
    InputTypeError,
    InputValidationError,
    parse_auction_input,
    parse_bid_input,
    validate_err,
)

_INT_RE = re.compile(r"[+-]?\d+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_BODY_ERRORS = (InputTypeError, InputValidationError, ValueError)


def _require_uuid(name: str, value: str) -> None:
    if not is_valid_uuid(value):
        raise rest_bad_request(
            "Invalid fields", Cause(field=name, message="Invalid UUID value")
        )


def _parse_status(text: str) -> int:
    if _INT_RE.fullmatch(text) is not None:
        value = int(text)
        if _INT64_MIN <= value <= _INT64_MAX:
            return value
    raise rest_bad_request("Error trying to validate auction status param")


def _rest(err: InternalError) -> RestError:
    return convert_error(err)


class AuctionController:
    """Handles the auction endpoints."""

    def __init__(self, auction_use_case: Any) -> None:
        self.auction_use_case = auction_use_case

    def create_auction(self, payload: Any) -> None:
        """Create an auction from a raw or decoded JSON body."""
        try:
            auction_input = parse_auction_input(payload)
        except _BODY_ERRORS as err:
            raise validate_err(err) from err
        try:
            self.auction_use_case.create_auction(auction_input)
        except InternalError as err:
            raise _rest(err) from err

    def find_auction_by_id(self, auction_id: str) -> dict[str, Any]:
        """Return one auction."""
        _require_uuid("auctionId", auction_id)
        try:
            auction = self.auction_use_case.find_auction_by_id(auction_id)
        except InternalError as err:
            raise _rest(err) from err
        return auction.to_dict()

    def find_auctions(
        self, status: str, category: str, product_name: str
    ) -> list[dict[str, Any]] | None:
        """Return the matching auctions, or None when there are none."""
        status_number = _parse_status(status)
        try:
            auctions = self.auction_use_case.find_auctions(
                status_number, category, product_name
            )
        except InternalError as err:
            raise _rest(err) from err
        return [auction.to_dict() for auction in auctions] or None

    def find_winning_bid_by_auction_id(self, auction_id: str) -> dict[str, Any]:
        """Return an auction together with its winning bid, if any."""
        _require_uuid("auctionId", auction_id)
        try:
            winning = self.auction_use_case.find_winning_bid_by_auction_id(auction_id)
        except InternalError as err:
            raise _rest(err) from err
        return winning.to_dict()


class BidController:
    """Handles the bid endpoints."""

    def __init__(self, bid_use_case: Any) -> None:
        self.bid_use_case = bid_use_case

    def create_bid(self, payload: Any) -> None:
        """Place a bid from a raw or decoded JSON body."""
        try:
            bid_input = parse_bid_input(payload)
        except _BODY_ERRORS as err:
            raise validate_err(err) from err
        try:
            self.bid_use_case.create_bid(bid_input)
        except InternalError as err:
            raise _rest(err) from err

    def find_bid_by_auction_id(self, auction_id: str) -> list[dict[str, Any]] | None:
        """Return the bids of an auction, or None when there are none."""
        _require_uuid("auctionId", auction_id)
        try:
            bids = self.bid_use_case.find_bid_by_auction_id(auction_id)
        except InternalError as err:
            raise _rest(err) from err
        return [bid.to_dict() for bid in bids] or None


class UserController:
    """Handles the user endpoints."""

    def __init__(self, user_use_case: Any) -> None:
        self.user_use_case = user_use_case

    def find_user_by_id(self, user_id: str) -> dict[str, Any]:
        """Return one user."""
        _require_uuid("userId", user_id)
        try:
            user = self.user_use_case.find_user_by_id(user_id)
        except InternalError as err:
            raise _rest(err) from err
        return user.to_dict()