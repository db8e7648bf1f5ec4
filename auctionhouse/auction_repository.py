"""MongoDB storage for auctions, with a background task closing expired ones."""

from __future__ import annotations

import math
import threading
from datetime import datetime, timedelta, timezone
from typing import Any

from pymongo.errors import PyMongoError

from auctionhouse import applog, settings
from auctionhouse.entities import Auction, AuctionStatus
from auctionhouse.errors import InternalError, internal_server_error


def _to_unix(moment: datetime) -> int:
    return math.floor(moment.timestamp())


def _from_unix(seconds: int) -> datetime:
    return datetime.fromtimestamp(seconds, timezone.utc)


def _status(value: Any) -> Any:
    try:
        return AuctionStatus(value)
    except ValueError:
        return value


def _auction_to_document(auction: Auction) -> dict[str, Any]:
    return {
        "_id": auction.id,
        "product_name": auction.product_name,
        "category": auction.category,
        "description": auction.description,
        "condition": int(auction.condition),
        "status": int(auction.status),
        "timestamp": _to_unix(auction.timestamp),
    }


def _auction_from_document(document: dict[str, Any]) -> Auction:
    return Auction(
        id=document.get("_id", ""),
        product_name=document.get("product_name", ""),
        category=document.get("category", ""),
        description=document.get("description", ""),
        condition=document.get("condition", 0),
        status=_status(document.get("status", 0)),
        timestamp=_from_unix(document.get("timestamp", 0)),
    )


def _seconds(interval: timedelta | float) -> float:
    if isinstance(interval, timedelta):
        return interval.total_seconds()
    return float(interval)


class AuctionRepository:
    """Stores auctions in the "auctions" collection."""

    def __init__(self, database: Any, interval: timedelta | float | None = None) -> None:
        self.collection = database["auctions"]
        self.interval = settings.auction_interval() if interval is None else interval
        self._stop_event = threading.Event()
        self._worker: threading.Thread | None = None

    def create_auction(self, auction: Auction) -> None:
        """Insert a new auction."""
        try:
            self.collection.insert_one(_auction_to_document(auction))
        except PyMongoError as err:
            applog.error("Error trying to insert auction", err)
            raise internal_server_error("Error trying to insert auction") from err

    def find_auction_by_id(self, auction_id: str) -> Auction:
        """Return the auction with the given id."""
        try:
            document = self.collection.find_one({"_id": auction_id})
        except PyMongoError as err:
            applog.error(f"Error trying to find auction by id = {auction_id}", err)
            raise internal_server_error("Error trying to find auction by id") from err
        if document is None:
            applog.error(
                f"Error trying to find auction by id = {auction_id}",
                LookupError("no documents in result"),
            )
            raise internal_server_error("Error trying to find auction by id")
        return _auction_from_document(document)

    def find_auctions(
        self, status: int, category: str, product_name: str
    ) -> list[Auction]:
        """Return auctions matching the filters; empty or zero filters are ignored."""
        query: dict[str, Any] = {}
        if status != 0:
            query["status"] = int(status)
        if category:
            query["category"] = category
        if product_name:
            query["productName"] = {"$regex": product_name, "$options": "i"}

        try:
            documents = list(self.collection.find(query))
        except PyMongoError as err:
            applog.error("Error finding auctions", err)
            raise internal_server_error("Error finding auctions") from err

        return [_auction_from_document(document) for document in documents]

    def update_auction_status(self, auction_id: str, status: int) -> None:
        """Set the status of one auction."""
        try:
            self.collection.update_one(
                {"_id": auction_id}, {"$set": {"status": int(status)}}
            )
        except PyMongoError as err:
            applog.error(
                f"Error trying to update auction status for id = {auction_id}", err
            )
            raise internal_server_error("Error trying to update auction status") from err

    def close_expired_auctions(self) -> list[str]:
        """Complete every active auction whose duration has passed; return their ids."""
        active = self.find_auctions(AuctionStatus.ACTIVE, "", "")
        duration = settings.auction_duration()
        now = datetime.now(timezone.utc)
        closed = []
        for auction in active:
            if now > auction.timestamp + duration:
                try:
                    self.update_auction_status(auction.id, AuctionStatus.COMPLETED)
                except InternalError as err:
                    applog.error(f"Error closing auction {auction.id}", err)
                    continue
                closed.append(auction.id)
        return closed

    def _run(self) -> None:
        period = _seconds(self.interval)
        while not self._stop_event.wait(period):
            try:
                self.close_expired_auctions()
            except InternalError as err:
                applog.error("Error finding active auctions in routine", err)

    def start(self) -> None:
        """Start the background task that periodically closes expired auctions."""
        if self._worker is not None and self._worker.is_alive():
            return
        self._stop_event.clear()
        self._worker = threading.Thread(
            target=self._run, name="auction-closer", daemon=True
        )
        self._worker.start()

    def stop(self) -> None:
        """Stop the background task and wait for it to finish."""
        self._stop_event.set()
        if self._worker is not None:
            self._worker.join()
            self._worker = None