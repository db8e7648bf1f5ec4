import threading
import uuid
from datetime import datetime, timedelta, timezone

import pytest

from auctionhouse.bid_usecase import (
    BidInput,
    BidOutput,
    BidUseCase,
    bid_output_from_entity,
)
from auctionhouse.entities import Bid
from auctionhouse.errors import InternalError, internal_server_error


class FakeBidRepository:
    def __init__(self, fail_first=False):
        self.batches = []
        self._lock = threading.Lock()
        self._event = threading.Event()
        self._fail_first = fail_first
        self.stored = {}
        self.winner = None
        self.find_error = None

    def create_bid(self, bids):
        with self._lock:
            if self._fail_first:
                self._fail_first = False
                raise internal_server_error("boom")
            self.batches.append(list(bids))
            self._event.set()

    def wait(self, timeout=5.0):
        return self._event.wait(timeout)

    def all_bids(self):
        with self._lock:
            return [bid for batch in self.batches for bid in batch]

    def find_bid_by_auction_id(self, auction_id):
        if self.find_error is not None:
            raise self.find_error
        return self.stored.get(auction_id, [])

    def find_winning_bid_by_auction_id(self, auction_id):
        if self.find_error is not None:
            raise self.find_error
        return self.winner


def _input(amount=10.0):
    return BidInput(str(uuid.uuid4()), str(uuid.uuid4()), amount)


def test_batch_is_written_when_full():
    repo = FakeBidRepository()
    use_case = BidUseCase(repo, 2, timedelta(hours=1))
    first, second = _input(), _input(20.0)
    use_case.create_bid(first)
    use_case.create_bid(second)
    assert repo.wait()
    assert len(repo.batches[0]) == 2
    assert [b.user_id for b in repo.batches[0]] == [first.user_id, second.user_id]
    use_case.close()


def test_batch_is_written_when_interval_elapses():
    repo = FakeBidRepository()
    use_case = BidUseCase(repo, 10, timedelta(milliseconds=50))
    bid_input = _input()
    use_case.create_bid(bid_input)
    assert repo.wait()
    assert [b.auction_id for b in repo.all_bids()] == [bid_input.auction_id]
    use_case.close()


def test_close_flushes_pending_bids():
    repo = FakeBidRepository()
    use_case = BidUseCase(repo, 10, timedelta(hours=1))
    bid_input = _input(7.5)
    use_case.create_bid(bid_input)
    use_case.close()
    bids = repo.all_bids()
    assert len(bids) == 1
    assert bids[0].amount == 7.5
    assert bids[0].user_id == bid_input.user_id


def test_context_manager_closes_and_flushes():
    repo = FakeBidRepository()
    bid_input = _input()
    with BidUseCase(repo, 10, timedelta(hours=1)) as use_case:
        use_case.create_bid(bid_input)
    assert [b.user_id for b in repo.all_bids()] == [bid_input.user_id]


def test_create_after_close_raises():
    use_case = BidUseCase(FakeBidRepository(), 10, timedelta(hours=1))
    use_case.close()
    with pytest.raises(RuntimeError):
        use_case.create_bid(_input())


def test_invalid_bid_raises_bad_request():
    repo = FakeBidRepository()
    use_case = BidUseCase(repo, 10, timedelta(hours=1))
    with pytest.raises(InternalError) as info:
        use_case.create_bid(BidInput("not-a-uuid", str(uuid.uuid4()), 5.0))
    assert info.value.err == "bad_request"
    use_case.close()
    assert repo.all_bids() == []


def test_non_positive_amount_raises():
    use_case = BidUseCase(FakeBidRepository(), 10, timedelta(hours=1))
    with pytest.raises(InternalError) as info:
        use_case.create_bid(_input(0))
    assert str(info.value) == "Amount is not a valid value"
    use_case.close()


def test_repository_failure_does_not_stop_worker():
    repo = FakeBidRepository(fail_first=True)
    use_case = BidUseCase(repo, 1, timedelta(hours=1))
    use_case.create_bid(_input())
    second = _input()
    use_case.create_bid(second)
    use_case.close()
    assert [b.user_id for b in repo.all_bids()] == [second.user_id]


def test_defaults_come_from_environment(monkeypatch):
    monkeypatch.setenv("MAX_BATCH_SIZE", "1")
    monkeypatch.setenv("BATCH_INSERT_INTERVAL", "1h")
    repo = FakeBidRepository()
    use_case = BidUseCase(repo)
    bid_input = _input()
    use_case.create_bid(bid_input)
    assert repo.wait()
    assert [b.user_id for b in repo.batches[0]] == [bid_input.user_id]
    use_case.close()


def _bid(auction_id, amount):
    return Bid(
        id=str(uuid.uuid4()),
        user_id=str(uuid.uuid4()),
        auction_id=auction_id,
        amount=amount,
        timestamp=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
    )


def test_find_bid_by_auction_id_maps_entities():
    repo = FakeBidRepository()
    auction_id = str(uuid.uuid4())
    bids = [_bid(auction_id, 1.0), _bid(auction_id, 2.0)]
    repo.stored[auction_id] = bids
    use_case = BidUseCase(repo, 10, timedelta(hours=1))
    outputs = use_case.find_bid_by_auction_id(auction_id)
    assert [o.id for o in outputs] == [b.id for b in bids]
    assert [o.amount for o in outputs] == [1.0, 2.0]
    assert use_case.find_bid_by_auction_id(str(uuid.uuid4())) == []
    use_case.close()


def test_find_bid_by_auction_id_propagates_error():
    repo = FakeBidRepository()
    repo.find_error = internal_server_error("lookup failed")
    use_case = BidUseCase(repo, 10, timedelta(hours=1))
    with pytest.raises(InternalError) as info:
        use_case.find_bid_by_auction_id(str(uuid.uuid4()))
    assert info.value.err == "internal_server_error"
    use_case.close()


def test_find_winning_bid_maps_entity():
    repo = FakeBidRepository()
    winner = _bid(str(uuid.uuid4()), 99.0)
    repo.winner = winner
    use_case = BidUseCase(repo, 10, timedelta(hours=1))
    output = use_case.find_winning_bid_by_auction_id(winner.auction_id)
    assert output == bid_output_from_entity(winner)
    assert output.user_id == winner.user_id
    use_case.close()


def test_find_winning_bid_propagates_error():
    repo = FakeBidRepository()
    repo.find_error = internal_server_error("Error trying to find the auction winner")
    use_case = BidUseCase(repo, 10, timedelta(hours=1))
    with pytest.raises(InternalError) as info:
        use_case.find_winning_bid_by_auction_id(str(uuid.uuid4()))
    assert str(info.value) == "Error trying to find the auction winner"
    use_case.close()


def test_bid_output_to_dict():
    stamp = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    output = BidOutput("id-1", "user-1", "auction-1", 3.5, stamp)
    assert output.to_dict() == {
        "id": "id-1",
        "user_id": "user-1",
        "auction_id": "auction-1",
        "amount": 3.5,
        "timestamp": stamp.isoformat(),
    }