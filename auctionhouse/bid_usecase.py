"""Bid use cases: batched bid creation and bid lookups."""

from __future__ import annotations

import queue
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from auctionhouse import applog, settings
from auctionhouse.entities import Bid, create_bid

_STOP = object()


@dataclass(frozen=True)
class BidInput:
    user_id: str
    auction_id: str
    amount: float


@dataclass(frozen=True)
class BidOutput:
    id: str
    user_id: str
    auction_id: str
    amount: float
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-serialisable representation of the bid."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "auction_id": self.auction_id,
            "amount": self.amount,
            "timestamp": self.timestamp.isoformat(),
        }


def bid_output_from_entity(bid: Bid) -> BidOutput:
    """Build the output view of a bid entity."""
    return BidOutput(
        id=bid.id,
        user_id=bid.user_id,
        auction_id=bid.auction_id,
        amount=bid.amount,
        timestamp=bid.timestamp,
    )


def _seconds(interval: timedelta | float) -> float:
    if isinstance(interval, timedelta):
        return interval.total_seconds()
    return float(interval)


class BidUseCase:
    """Accepts bids and stores them in batches from a background worker.

    A batch is written when it reaches the maximum size or when the insert
    interval elapses, whichever comes first. Closing the use case writes
    whatever is still pending.
    """

    def __init__(
        self,
        bid_repository: Any,
        max_batch_size: int | None = None,
        batch_insert_interval: timedelta | float | None = None,
    ) -> None:
        self.bid_repository = bid_repository
        self._max_batch_size = (
            settings.max_batch_size() if max_batch_size is None else max_batch_size
        )
        self._interval = _seconds(
            settings.batch_insert_interval()
            if batch_insert_interval is None
            else batch_insert_interval
        )
        self._queue: queue.Queue[Any] = queue.Queue(maxsize=max(self._max_batch_size, 0))
        self._lock = threading.Lock()
        self._closed = False
        self._worker = threading.Thread(
            target=self._run, name="bid-batch-writer", daemon=True
        )
        self._worker.start()

    def __enter__(self) -> BidUseCase:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _flush(self, batch: list[Bid]) -> None:
        if not batch:
            return
        try:
            self.bid_repository.create_bid(list(batch))
        except Exception as err:
            applog.error("error trying to process bid batch list", err)

    def _run(self) -> None:
        batch: list[Bid] = []
        deadline = time.monotonic() + self._interval
        while True:
            timeout = max(0.0, deadline - time.monotonic())
            try:
                item = self._queue.get(timeout=timeout)
            except queue.Empty:
                self._flush(batch)
                batch = []
                deadline = time.monotonic() + self._interval
                continue

            if item is _STOP:
                self._flush(batch)
                return

            batch.append(item)
            if len(batch) >= self._max_batch_size:
                self._flush(batch)
                batch = []
                deadline = time.monotonic() + self._interval

    def create_bid(self, bid_input: BidInput) -> None:
        """Validate a bid and queue it for the next batch write."""
        bid = create_bid(bid_input.user_id, bid_input.auction_id, bid_input.amount)
        with self._lock:
            if self._closed:
                raise RuntimeError("bid use case is closed")
            self._queue.put(bid)

    def find_bid_by_auction_id(self, auction_id: str) -> list[BidOutput]:
        """Return every stored bid of an auction."""
        bids = self.bid_repository.find_bid_by_auction_id(auction_id)
        return [bid_output_from_entity(bid) for bid in bids]

    def find_winning_bid_by_auction_id(self, auction_id: str) -> BidOutput:
        """Return the highest bid of an auction."""
        bid = self.bid_repository.find_winning_bid_by_auction_id(auction_id)
        return bid_output_from_entity(bid)

    def close(self) -> None:
        """Stop the worker after writing any pending bids."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(_STOP)
        self._worker.join()