"""Core domain entities: auctions, bids and users."""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum

from auctionhouse.errors import bad_request_error


class ProductCondition(IntEnum):
    NEW = 1
    USED = 2
    REFURBISHED = 3


class AuctionStatus(IntEnum):
    ACTIVE = 0
    COMPLETED = 1


_HEX_UUID = r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}"
_UUID_RE = re.compile(
    rf"urn:uuid:{_HEX_UUID}|\{{{_HEX_UUID}\}}|{_HEX_UUID}|[0-9a-f]{{32}}",
    re.IGNORECASE,
)


def is_valid_uuid(value: str) -> bool:
    """Tell whether value is a UUID in canonical, braced, URN or bare-hex form."""
    return _UUID_RE.fullmatch(value) is not None


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _byte_length(text: str) -> int:
    return len(text.encode("utf-8"))


@dataclass
class Auction:
    id: str
    product_name: str
    category: str
    description: str
    condition: int
    status: AuctionStatus = AuctionStatus.ACTIVE
    timestamp: datetime = field(default_factory=_now)

    def validate(self) -> None:
        """Raise a bad-request InternalError if the auction is not acceptable."""
        invalid_condition = self.condition not in (
            ProductCondition.NEW,
            ProductCondition.REFURBISHED,
            ProductCondition.USED,
        )
        if (
            _byte_length(self.product_name) <= 1
            or _byte_length(self.category) <= 2
            or (_byte_length(self.description) <= 10 and invalid_condition)
        ):
            raise bad_request_error("invalid auction object")


def create_auction(
    product_name: str, category: str, description: str, condition: int
) -> Auction:
    """Build a new active auction and validate it."""
    auction = Auction(
        id=str(uuid.uuid4()),
        product_name=product_name,
        category=category,
        description=description,
        condition=condition,
        status=AuctionStatus.ACTIVE,
        timestamp=_now(),
    )
    auction.validate()
    return auction


@dataclass
class Bid:
    id: str
    user_id: str
    auction_id: str
    amount: float
    timestamp: datetime = field(default_factory=_now)

    def validate(self) -> None:
        """Raise a bad-request InternalError if the bid is not acceptable."""
        if not is_valid_uuid(self.user_id):
            raise bad_request_error("UserId is not a valid id")
        if not is_valid_uuid(self.auction_id):
            raise bad_request_error("AuctionId is not a valid id")
        if self.amount <= 0:
            raise bad_request_error("Amount is not a valid value")


def create_bid(user_id: str, auction_id: str, amount: float) -> Bid:
    """Build a new bid and validate it."""
    bid = Bid(
        id=str(uuid.uuid4()),
        user_id=user_id,
        auction_id=auction_id,
        amount=amount,
        timestamp=_now(),
    )
    bid.validate()
    return bid


@dataclass
class User:
    id: str
    name: str