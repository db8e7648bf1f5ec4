"""Environment-driven settings with duration parsing."""

from __future__ import annotations

import os
import re
from datetime import timedelta
from fractions import Fraction

_UNIT_NANOS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,
    "μs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}

_NUMBER = r"(?:\d+(?:\.\d*)?|\.\d+)"
_UNIT = r"(?:ns|us|µs|μs|ms|s|m|h)"
_DURATION_RE = re.compile(rf"([+-]?)((?:{_NUMBER}{_UNIT})+)")
_PART_RE = re.compile(rf"({_NUMBER})({_UNIT})")
_INT_RE = re.compile(r"[+-]?\d+")


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as "300ms", "-1.5h" or "2h45m".

    Raises ValueError when the text is not a valid duration.
    """
    if text in ("0", "+0", "-0"):
        return timedelta(0)
    match = _DURATION_RE.fullmatch(text)
    if match is None:
        raise ValueError(f"invalid duration {text!r}")
    sign, body = match.groups()
    total = sum(
        (Fraction(number) * _UNIT_NANOS[unit] for number, unit in _PART_RE.findall(body)),
        Fraction(0),
    )
    if sign == "-":
        total = -total
    return timedelta(microseconds=round(total / 1000))


def _duration_from_env(name: str, default: timedelta) -> timedelta:
    try:
        return parse_duration(os.environ.get(name, ""))
    except ValueError:
        return default


def batch_insert_interval() -> timedelta:
    """Interval after which pending bids are flushed (default three minutes)."""
    return _duration_from_env("BATCH_INSERT_INTERVAL", timedelta(minutes=3))


def max_batch_size() -> int:
    """Number of bids collected before a flush (default five)."""
    value = os.environ.get("MAX_BATCH_SIZE", "")
    if _INT_RE.fullmatch(value) is None:
        return 5
    return int(value)


def auction_duration() -> timedelta:
    """How long an auction stays open (default one minute)."""
    return _duration_from_env("AUCTION_DURATION", timedelta(minutes=1))


def auction_interval() -> timedelta:
    """How often expired auctions are checked for closing (default ten seconds)."""
    return _duration_from_env("AUCTION_INTERVAL", timedelta(seconds=10))


def bid_auction_interval() -> timedelta:
    """Auction lifetime assumed when accepting bids (default five minutes)."""
    return _duration_from_env("AUCTION_INTERVAL", timedelta(minutes=5))