import json
import re
from datetime import datetime, timedelta, timezone

from auctionhouse import applog


def _last_entry(capsys):
    lines = [line for line in capsys.readouterr().err.splitlines() if line.strip()]
    return json.loads(lines[-1])


def test_info_writes_json_line(capsys):
    applog.info("auction created", auction_id="abc")
    entry = _last_entry(capsys)
    assert entry["level"] == "info"
    assert entry["message"] == "auction created"
    assert entry["auction_id"] == "abc"


def test_info_time_is_iso8601(capsys):
    before = datetime.now(timezone.utc) - timedelta(seconds=1)
    applog.info("tick")
    after = datetime.now(timezone.utc) + timedelta(seconds=1)
    entry = _last_entry(capsys)
    assert entry["message"] == "tick"
    matched = re.fullmatch(
        r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}(Z|[+-]\d{4})", entry["time"]
    )
    assert bool(matched) is True
    logged = datetime.strptime(entry["time"], "%Y-%m-%dT%H:%M:%S.%f%z")
    assert before <= logged <= after


def test_error_attaches_error_text(capsys):
    applog.error("Error trying to insert bid", ValueError("duplicate key"), bid="b1")
    entry = _last_entry(capsys)
    assert entry["level"] == "error"
    assert entry["message"] == "Error trying to insert bid"
    assert entry["error"] == "duplicate key"
    assert entry["bid"] == "b1"


def test_error_without_error_omits_key(capsys):
    applog.error("nothing attached", None)
    entry = _last_entry(capsys)
    assert "error" not in entry
    assert entry["message"] == "nothing attached"