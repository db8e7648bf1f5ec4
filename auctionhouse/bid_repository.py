"""MongoDB storage for bids."""

from __future__ import annotations

import math
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from typing import Any

from pymongo.errors import PyMongoError

from auctionhouse import applog, settings
from auctionhouse.auction_repository import AuctionRepository
from auctionhouse.entities import AuctionStatus, Bid
from auctionhouse.errors import InternalError, internal_server_error

_MAX_WORKERS = 32


def _bid_to_document(bid: Bid) -> dict[str, Any]:
    return {
        "_id": bid.id,
        "user_id": bid.user_id,
        "auction_id": bid.auction_id,
        "amount": bid.amount,
        "timestamp": math.floor(bid.timestamp.timestamp()),
    }


def _bid_from_document(document: dict[str, Any]) -> Bid:
    return Bid(
        id=document.get("_id", ""),
        user_id=document.get("user_id", ""),
        auction_id=document.get("auction_id", ""),
        amount=document.get("amount", 0.0),
        timestamp=datetime.fromtimestamp(document.get("timestamp", 0), timezone.utc),
    )


class BidRepository:
    """Stores bids in the "bids" collection, refusing bids on closed auctions.

    The status and end time of each auction are cached after the first
    lookup, so later bids on the same auction are checked without a query.
    """

    def __init__(
        self,
        database: Any,
        auction_repository: AuctionRepository,
        auction_interval: timedelta | None = None,
    ) -> None:
        self.collection = database["bids"]
        self.auction_repository = auction_repository
        self.auction_interval = (
            settings.bid_auction_interval() if auction_interval is None else auction_interval
        )
        self._status: dict[str, Any] = {}
        self._end_time: dict[str, datetime] = {}
        self._lock = threading.Lock()

    def _insert(self, bid: Bid) -> None:
        try:
            self.collection.insert_one(_bid_to_document(bid))
        except PyMongoError as err:
            applog.error("Error trying to insert bid", err)

    def _store(self, bid: Bid) -> None:
        with self._lock:
            status = self._status.get(bid.auction_id)
            end_time = self._end_time.get(bid.auction_id)

        if status is not None and end_time is not None:
            if status == AuctionStatus.COMPLETED or datetime.now(timezone.utc) > end_time:
                return
            self._insert(bid)
            return

        try:
            auction = self.auction_repository.find_auction_by_id(bid.auction_id)
        except InternalError as err:
            applog.error("Error trying to find auction by id", err)
            return
        if auction.status == AuctionStatus.COMPLETED:
            return

        with self._lock:
            self._status[bid.auction_id] = auction.status
            self._end_time[bid.auction_id] = auction.timestamp + self.auction_interval

        self._insert(bid)

    def create_bid(self, bids: list[Bid]) -> None:
        """Store each bid whose auction is still open; failures are logged."""
        if not bids:
            return
        with ThreadPoolExecutor(max_workers=min(len(bids), _MAX_WORKERS)) as pool:
            list(pool.map(self._store, bids))

    def find_bid_by_auction_id(self, auction_id: str) -> list[Bid]:
        """Return the bids recorded under the given auction id."""
        message = f"Error trying to find bids by auctionId {auction_id}"
        try:
            documents = list(self.collection.find({"auctionId": auction_id}))
        except PyMongoError as err:
            applog.error(message, err)
            raise internal_server_error(message) from err
        return [_bid_from_document(document) for document in documents]

    def find_winning_bid_by_auction_id(self, auction_id: str) -> Bid:
        """Return the highest bid of an auction."""
        message = "Error trying to find the auction winner"
        try:
            document = self.collection.find_one(
                {"auction_id": auction_id}, sort=[("amount", -1)]
            )
        except PyMongoError as err:
            applog.error(message, err)
            raise internal_server_error(message) from err
        if document is None:
            applog.error(message, LookupError("no documents in result"))
            raise internal_server_error(message)
        return _bid_from_document(document)