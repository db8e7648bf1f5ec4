from http import HTTPStatus

import pytest

from auctionhouse.errors import (
    Cause,
    InternalError,
    RestError,
    bad_request_error,
    convert_error,
    internal_server_error,
    not_found_error,
    rest_bad_request,
    rest_internal_server,
    rest_not_found,
)


@pytest.mark.parametrize(
    "factory, kind",
    [
        (not_found_error, "not_found"),
        (internal_server_error, "internal_server_error"),
        (bad_request_error, "bad_request"),
    ],
)
def test_internal_error_factories(factory, kind):
    error = factory("something happened")
    assert error.err == kind
    assert error.message == "something happened"
    assert str(error) == "something happened"


def test_internal_error_is_raisable():
    error = bad_request_error("invalid auction object")
    assert error.message == "invalid auction object"
    with pytest.raises(InternalError, match="invalid auction object") as info:
        raise error
    assert info.value is error
    assert info.value.err == "bad_request"


def test_rest_bad_request_without_causes_has_null_causes():
    error = rest_bad_request("Invalid fields")
    assert error.code == HTTPStatus.BAD_REQUEST
    assert error.err == "bad_request"
    assert error.to_dict() == {
        "message": "Invalid fields",
        "err": "bad_request",
        "code": HTTPStatus.BAD_REQUEST,
        "causes": None,
    }


def test_rest_bad_request_with_causes():
    error = rest_bad_request("Invalid fields", Cause("auctionId", "Invalid UUID value"))
    assert error.causes == [Cause("auctionId", "Invalid UUID value")]
    assert error.to_dict()["causes"] == [
        {"field": "auctionId", "message": "Invalid UUID value"}
    ]


def test_rest_internal_server_and_not_found():
    internal = rest_internal_server("boom")
    missing = rest_not_found("gone")
    assert (internal.err, internal.code) == ("internal_server", HTTPStatus.INTERNAL_SERVER_ERROR)
    assert (missing.err, missing.code) == ("not_found", HTTPStatus.NOT_FOUND)
    assert str(missing) == "gone"


@pytest.mark.parametrize(
    "internal, err, code",
    [
        (bad_request_error("bad"), "bad_request", HTTPStatus.BAD_REQUEST),
        (not_found_error("missing"), "not_found", HTTPStatus.NOT_FOUND),
        (internal_server_error("broken"), "internal_server", HTTPStatus.INTERNAL_SERVER_ERROR),
        (InternalError("odd", "something_else"), "internal_server", HTTPStatus.INTERNAL_SERVER_ERROR),
    ],
)
def test_convert_error(internal, err, code):
    rest = convert_error(internal)
    assert isinstance(rest, RestError)
    assert rest.err == err
    assert rest.code == code
    assert rest.message == internal.message
    assert rest.causes is None