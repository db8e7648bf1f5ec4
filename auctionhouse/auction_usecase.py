"""Auction use cases: creation, lookups and winner resolution."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from auctionhouse import applog
from auctionhouse.bid_usecase import BidOutput, bid_output_from_entity
from auctionhouse.entities import Auction, create_auction
from auctionhouse.errors import InternalError


@dataclass(frozen=True)
class AuctionInput:
    product_name: str
    category: str
    description: str
    condition: int


@dataclass(frozen=True)
class AuctionOutput:
    id: str
    product_name: str
    category: str
    description: str
    condition: int
    status: int
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-serialisable representation of the auction."""
        return {
            "id": self.id,
            "product_name": self.product_name,
            "category": self.category,
            "description": self.description,
            "condition": int(self.condition),
            "status": int(self.status),
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class WinningInfoOutput:
    auction: AuctionOutput
    bid: BidOutput | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the auction and, when there is one, its winning bid."""
        body: dict[str, Any] = {"auction": self.auction.to_dict()}
        if self.bid is not None:
            body["bid"] = self.bid.to_dict()
        return body


def auction_output_from_entity(auction: Auction) -> AuctionOutput:
    """Build the output view of an auction entity."""
    return AuctionOutput(
        id=auction.id,
        product_name=auction.product_name,
        category=auction.category,
        description=auction.description,
        condition=int(auction.condition),
        status=int(auction.status),
        timestamp=auction.timestamp,
    )


class AuctionUseCase:
    """Coordinates auction creation and queries over the repositories."""

    def __init__(self, auction_repository: Any, bid_repository: Any) -> None:
        self.auction_repository = auction_repository
        self.bid_repository = bid_repository

    def create_auction(self, auction_input: AuctionInput) -> None:
        """Validate and store a new active auction."""
        auction = create_auction(
            auction_input.product_name,
            auction_input.category,
            auction_input.description,
            auction_input.condition,
        )
        self.auction_repository.create_auction(auction)

    def find_auction_by_id(self, auction_id: str) -> AuctionOutput:
        """Return a single auction."""
        return auction_output_from_entity(
            self.auction_repository.find_auction_by_id(auction_id)
        )

    def find_auctions(
        self, status: int, category: str, product_name: str
    ) -> list[AuctionOutput]:
        """Return the auctions matching the given filters."""
        auctions = self.auction_repository.find_auctions(
            int(status), category, product_name
        )
        return [auction_output_from_entity(auction) for auction in auctions]

    def find_winning_bid_by_auction_id(self, auction_id: str) -> WinningInfoOutput:
        """Return an auction with its highest bid, or without one if none is found."""
        auction = self.auction_repository.find_auction_by_id(auction_id)
        auction_output = auction_output_from_entity(auction)

        try:
            winner = self.bid_repository.find_winning_bid_by_auction_id(auction.id)
        except InternalError as err:
            applog.error("", err)
            return WinningInfoOutput(auction=auction_output, bid=None)

        return WinningInfoOutput(
            auction=auction_output, bid=bid_output_from_entity(winner)
        )