"""Structured JSON logging for the service."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime
from typing import Any

_LOGGER_NAME = "auctionhouse"


def _iso8601(created: float) -> str:
    moment = datetime.fromtimestamp(created).astimezone()
    offset = moment.strftime("%z")
    if offset in ("+0000", "-0000"):
        offset = "Z"
    millis = moment.microsecond // 1000
    return f"{moment.strftime('%Y-%m-%dT%H:%M:%S')}.{millis:03d}{offset}"


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "level": record.levelname.lower(),
            "time": _iso8601(record.created),
            "message": record.getMessage(),
        }
        entry.update(getattr(record, "fields", {}))
        return json.dumps(entry, default=str, ensure_ascii=False)


class _StderrHandler(logging.Handler):
    """Writes to whatever sys.stderr is at the moment of logging."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            sys.stderr.write(self.format(record) + "\n")
            sys.stderr.flush()
        except Exception:
            self.handleError(record)


def _build_logger() -> logging.Logger:
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    if not any(isinstance(h, _StderrHandler) for h in logger.handlers):
        handler = _StderrHandler()
        handler.setFormatter(_JsonFormatter())
        logger.addHandler(handler)
    return logger


_log = _build_logger()


def info(message: str, **kwargs: Any) -> None:
    """Log an informational message with extra structured fields."""
    _log.info(message, extra={"fields": kwargs})


def error(message: str, err: BaseException | None, **kwargs: Any) -> None:
    """Log an error message, attaching the error under the "error" key."""
    fields = dict(kwargs)
    if err is not None:
        fields["error"] = str(err)
    _log.error(message, extra={"fields": fields})