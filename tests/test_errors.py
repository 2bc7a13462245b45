import json

from bitstamp_api.errors import classify_error_response, is_success
from bitstamp_api.exceptions import (
    ProtocolError,
    ProtocolErrorV1,
    ProtocolErrorV2,
    ProtocolStatusError,
)


def test_v2_envelope():
    body = json.dumps({"status": "error", "reason": "Invalid nonce", "code": "API0004"})
    err = classify_error_response(403, body)
    assert isinstance(err, ProtocolErrorV2)
    assert err.status == 403
    assert err.reason == "Invalid nonce"
    assert err.code == "API0004"
    assert str(err) == "HTTP status client error (403) - Invalid nonce (API0004)"


def test_v2_takes_precedence_over_v1():
    """A body that fits both shapes is classified as v2."""
    body = json.dumps({"status": "error", "reason": "r", "code": "c", "error": "e"})
    assert isinstance(classify_error_response(400, body), ProtocolErrorV2)


def test_v1_envelope():
    err = classify_error_response(500, json.dumps({"error": "Internal error"}))
    assert isinstance(err, ProtocolErrorV1)
    assert err.status == 500
    assert err.error == "Internal error"
    assert str(err) == "HTTP status server error (500) - Internal error"


def test_incomplete_v2_falls_back_to_v1():
    body = json.dumps({"status": "error", "error": "Missing key"})
    assert isinstance(classify_error_response(400, body), ProtocolErrorV1)


def test_unrecognised_body_gives_bare_status():
    for body in ["", "<html>Bad gateway</html>", "[]", json.dumps({"message": "nope"})]:
        err = classify_error_response(502, body)
        assert isinstance(err, ProtocolStatusError)
        assert err.status == 502
        assert str(err) == "HTTP status server error (502)"


def test_all_kinds_are_protocol_errors():
    assert isinstance(classify_error_response(404, ""), ProtocolError)


def test_is_success():
    assert is_success(200)
    assert is_success(204)
    assert not is_success(301)
    assert not is_success(404)
