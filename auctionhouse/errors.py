"""Domain errors and their HTTP representations."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from http import HTTPStatus


class InternalError(Exception):
    """An error raised by the domain and persistence layers."""

    def __init__(self, message: str, err: str) -> None:
        super().__init__(message)
        self.message = message
        self.err = err

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"InternalError(message={self.message!r}, err={self.err!r})"


def not_found_error(message: str) -> InternalError:
    return InternalError(message, "not_found")


def internal_server_error(message: str) -> InternalError:
    return InternalError(message, "internal_server_error")


def bad_request_error(message: str) -> InternalError:
    return InternalError(message, "bad_request")


@dataclass(frozen=True)
class Cause:
    """A single field-level reason attached to a REST error."""

    field: str
    message: str


class RestError(Exception):
    """An error ready to be returned as an HTTP response body."""

    def __init__(
        self,
        message: str,
        err: str,
        code: int,
        causes: list[Cause] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.err = err
        self.code = code
        self.causes = causes

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict:
        """Return the JSON-serialisable body of the error."""
        return {
            "message": self.message,
            "err": self.err,
            "code": self.code,
            "causes": None if self.causes is None else [asdict(c) for c in self.causes],
        }


def rest_bad_request(message: str, *args: Cause) -> RestError:
    return RestError(message, "bad_request", HTTPStatus.BAD_REQUEST, list(args) or None)


def rest_internal_server(message: str) -> RestError:
    return RestError(message, "internal_server", HTTPStatus.INTERNAL_SERVER_ERROR)


def rest_not_found(message: str) -> RestError:
    return RestError(message, "not_found", HTTPStatus.NOT_FOUND)


def convert_error(internal_error: InternalError) -> RestError:
    """Map a domain error onto the matching REST error."""
    if internal_error.err == "bad_request":
        return rest_bad_request(str(internal_error))
    if internal_error.err == "not_found":
        return rest_not_found(str(internal_error))
    return rest_internal_server(str(internal_error))