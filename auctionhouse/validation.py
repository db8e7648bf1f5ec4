"""Request body decoding and validation, and mapping of its failures to REST errors."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, Callable

from auctionhouse.auction_usecase import AuctionInput
from auctionhouse.bid_usecase import BidInput
from auctionhouse.errors import Cause, RestError, rest_bad_request, rest_not_found

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_JSON_WHITESPACE = " \t\r\n"


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON literal {name}")


_DECODER = json.JSONDecoder(parse_constant=_reject_constant)


@dataclass(frozen=True)
class FieldError:
    """A rule that one field of a request body broke."""

    field: str
    message: str


class InputTypeError(Exception):
    """A value in the request body has the wrong JSON type."""

    def __init__(self, field: str, value: Any) -> None:
        target = f" into field {field}" if field else ""
        super().__init__(f"cannot use {type(value).__name__} value{target}")
        self.field = field
        self.value = value


class InputValidationError(Exception):
    """One or more fields of the request body failed validation."""

    def __init__(self, errors: list[FieldError]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(error.message for error in self.errors))


def validate_err(error: BaseException) -> RestError:
    """Turn a body decoding or validation failure into a REST error."""
    if isinstance(error, InputTypeError):
        return rest_not_found("Invalid type error")
    if isinstance(error, InputValidationError):
        causes = [Cause(field=e.field, message=e.message) for e in error.errors]
        return rest_bad_request("Invalid field values", *causes)
    return rest_bad_request("Error trying to convert fields")


def _load(payload: Any) -> Any:
    """Decode the first JSON value of a raw body; decoded values pass through."""
    if isinstance(payload, (bytes, bytearray)):
        payload = bytes(payload).decode("utf-8", errors="replace")
    if isinstance(payload, str):
        value, _ = _DECODER.raw_decode(payload.lstrip(_JSON_WHITESPACE))
        return value
    return payload


def _as_string(field: str, value: Any) -> str:
    if isinstance(value, str):
        return value
    raise InputTypeError(field, value)


def _as_int(field: str, value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        if _INT64_MIN <= value <= _INT64_MAX:
            return value
    raise InputTypeError(field, value)


def _as_float(field: str, value: Any) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            number = float(value)
        except OverflowError:
            raise InputTypeError(field, value) from None
        if math.isfinite(number):
            return number
    raise InputTypeError(field, value)


_Converter = Callable[[str, Any], Any]


def _bind(payload: Any, schema: dict[str, _Converter]) -> dict[str, Any]:
    """Decode a JSON object, matching keys case-insensitively against the schema."""
    document = _load(payload)
    if document is None:
        return {}
    if not isinstance(document, dict):
        raise InputTypeError("", document)

    values: dict[str, Any] = {}
    for key, raw in document.items():
        name = key.casefold()
        converter = schema.get(name)
        if converter is None or raw is None:
            continue
        values[name] = converter(name, raw)
    return values


def _min_message(field: str, minimum: int) -> str:
    unit = "character" if minimum == 1 else "characters"
    return f"{field} must be at least {minimum} {unit} in length"


def _max_message(field: str, maximum: int) -> str:
    unit = "character" if maximum == 1 else "characters"
    return f"{field} must be a maximum of {maximum} {unit} in length"


def _check_text(
    field: str, value: str, minimum: int, maximum: int | None = None
) -> FieldError | None:
    if value == "":
        return FieldError(field, f"{field} is a required field")
    if len(value) < minimum:
        return FieldError(field, _min_message(field, minimum))
    if maximum is not None and len(value) > maximum:
        return FieldError(field, _max_message(field, maximum))
    return None


def _check_one_of(field: str, value: int, allowed: tuple[int, ...]) -> FieldError | None:
    if value in allowed:
        return None
    choices = " ".join(str(choice) for choice in allowed)
    return FieldError(field, f"{field} must be one of [{choices}]")


_AUCTION_SCHEMA: dict[str, _Converter] = {
    "product_name": _as_string,
    "category": _as_string,
    "description": _as_string,
    "condition": _as_int,
}

_BID_SCHEMA: dict[str, _Converter] = {
    "user_id": _as_string,
    "auction_id": _as_string,
    "amount": _as_float,
}


def parse_auction_input(payload: Any) -> AuctionInput:
    """Decode and validate the body of an auction creation request.

    Raises ValueError for malformed JSON, InputTypeError for wrongly typed
    values and InputValidationError when field rules are broken.
    """
    values = _bind(payload, _AUCTION_SCHEMA)
    product_name = values.get("product_name", "")
    category = values.get("category", "")
    description = values.get("description", "")
    condition = values.get("condition", 0)

    checks = (
        _check_text("ProductName", product_name, 1),
        _check_text("Category", category, 2),
        _check_text("Description", description, 10, 200),
        _check_one_of("Condition", condition, (0, 1, 2)),
    )
    errors = [error for error in checks if error is not None]
    if errors:
        raise InputValidationError(errors)

    return AuctionInput(
        product_name=product_name,
        category=category,
        description=description,
        condition=condition,
    )


def parse_bid_input(payload: Any) -> BidInput:
    """Decode the body of a bid creation request.

    Raises ValueError for malformed JSON and InputTypeError for wrongly typed values.
    """
    values = _bind(payload, _BID_SCHEMA)
    return BidInput(
        user_id=values.get("user_id", ""),
        auction_id=values.get("auction_id", ""),
        amount=values.get("amount", 0.0),
    )