import hashlib
import hmac
import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from bitstamp_api.channels import TradingPair
from bitstamp_api.exceptions import (
    DecodeError,
    ProtocolErrorV1,
    ProtocolErrorV2,
    ProtocolStatusError,
    TransportError,
)
from bitstamp_api.models import AccountBalance, TimeWindow
from bitstamp_api.rest_client import BitstampClient, rest_url, serialize_body
from bitstamp_api.secrets import BitstampCredentials

TICKER = {
    "high": "23500", "last": "23000", "timestamp": "1675000000", "bid": "22999",
    "vwap": "23100", "volume": "1234.5", "low": "22500", "ask": "23001", "open": "22800",
}


def _response(status, body):
    resp = MagicMock()
    resp.status_code = status
    resp.text = body if isinstance(body, str) else json.dumps(body)
    return resp


def test_rest_url_has_no_scheme():
    assert rest_url("www.bitstamp.net", "balance/") == "www.bitstamp.net/api/v2/balance/"


def test_serialize_body_is_compact_json():
    from bitstamp_api.models import Offset
    assert serialize_body(Offset(offset="1")) == '{"offset":"1"}'
    assert serialize_body({"a": 1, "b": "x"}) == '{"a":1,"b":"x"}'
    assert serialize_body(None) == ""


@patch("bitstamp_api.rest_client.requests.Session.request")
def test_get_ticker_is_unsigned(mock_request):
    mock_request.return_value = _response(200, TICKER)
    client = BitstampClient()

    ticker = client.get_ticker(TradingPair.BTCUSD)

    assert ticker.last == "23000"
    method, url = mock_request.call_args.args[:2]
    assert method == "GET"
    assert url == "https://www.bitstamp.net/api/v2/ticker/btcusd/"
    assert mock_request.call_args.kwargs["headers"] == {}
    assert mock_request.call_args.kwargs["data"] is None


@patch("bitstamp_api.rest_client.requests.Session.request")
def test_get_order_book_with_group(mock_request):
    mock_request.return_value = _response(200, {
        "timestamp": "1", "microtimestamp": "1000000", "bids": [["1", "2"]], "asks": [],
    })
    client = BitstampClient()

    book = client.get_order_book("btceur", group="1")

    assert book.bids == [["1", "2"]]
    assert mock_request.call_args.args[1] == "https://www.bitstamp.net/api/v2/order_book/btceur/?group=1"


@patch("bitstamp_api.rest_client.requests.Session.request")
def test_get_transactions_decodes_list(mock_request):
    mock_request.return_value = _response(200, [
        {"date": "1675000000", "tid": "1", "price": "23000", "type": "0", "amount": "0.1"},
        {"date": "1675000001", "tid": "2", "price": "23001", "type": "1", "amount": "0.2"},
    ])
    client = BitstampClient()

    txs = client.get_transactions(TradingPair.ETHUSD, TimeWindow.HOUR)

    assert [t.tid for t in txs] == ["1", "2"]
    assert txs[1].type_field == "1"
    assert mock_request.call_args.args[1] == "https://www.bitstamp.net/api/v2/transactions/ethusd/?time=hour"


@patch("bitstamp_api.rest_client.requests.Session.request")
def test_get_balance_is_signed(mock_request):
    mock_request.return_value = _response(200, {"usd_available": "10.5", "btc_balance": "0.1", "btcusd_fee": "0.5"})
    client = BitstampClient.from_credentials(BitstampCredentials(api_key="k", api_secret="s"))

    balance = client.get_balance()

    assert isinstance(balance, AccountBalance)
    assert str(balance.available("USD")) == "10.5"
    assert str(balance.balance("btc")) == "0.1"
    assert str(balance.fee("btcusd")) == "0.5"
    assert balance.reserved("eth") is None

    method, url = mock_request.call_args.args[:2]
    kwargs = mock_request.call_args.kwargs
    headers = kwargs["headers"]
    assert method == "POST"
    assert url == "https://www.bitstamp.net/api/v2/balance/"
    assert kwargs["data"] == b'{"offset":"1"}'
    assert headers["X-Auth"] == "BITSTAMP k"
    assert headers["X-Auth-Version"] == "v2"
    assert headers["Content-Type"] == "application/x-www-form-urlencoded"

    message = (
        "BITSTAMP kPOSTwww.bitstamp.net/api/v2/balance/application/x-www-form-urlencoded"
        + headers["X-Auth-Nonce"] + headers["X-Auth-Timestamp"] + 'v2{"offset":"1"}'
    )
    expected = hmac.new(b"s", message.encode(), hashlib.sha256).hexdigest()
    assert headers["X-Auth-Signature"] == expected


@patch("bitstamp_api.rest_client.requests.Session.request")
def test_each_private_call_gets_a_fresh_nonce(mock_request):
    mock_request.return_value = _response(200, {})
    client = BitstampClient(api_key="k", secret="s")

    client.get_balance()
    client.get_balance()

    nonces = [c.kwargs["headers"]["X-Auth-Nonce"] for c in mock_request.call_args_list]
    assert nonces[0] != nonces[1]


def test_private_call_without_credentials_raises():
    client = BitstampClient()
    with pytest.raises(ValueError):
        client.get_balance()


@patch("bitstamp_api.rest_client.requests.Session.request")
def test_v2_error_raised(mock_request):
    mock_request.return_value = _response(403, {"status": "error", "reason": "Invalid signature", "code": "API0005"})
    client = BitstampClient(api_key="k", secret="s")

    with pytest.raises(ProtocolErrorV2) as excinfo:
        client.get_balance()
    assert excinfo.value.status == 403
    assert excinfo.value.code == "API0005"


@patch("bitstamp_api.rest_client.requests.Session.request")
def test_v1_error_raised(mock_request):
    mock_request.return_value = _response(404, {"error": "Not found"})
    client = BitstampClient()

    with pytest.raises(ProtocolErrorV1, match="Not found"):
        client.get_eur_usd()


@patch("bitstamp_api.rest_client.requests.Session.request")
def test_bare_status_error_raised(mock_request):
    mock_request.return_value = _response(503, "Service Unavailable")
    client = BitstampClient()

    with pytest.raises(ProtocolStatusError, match="503"):
        client.get_ticker("btcusd")


@patch("bitstamp_api.rest_client.requests.Session.request")
def test_errors_are_not_retried(mock_request):
    mock_request.return_value = _response(500, "")
    client = BitstampClient()

    with pytest.raises(ProtocolStatusError):
        client.get_ticker("btcusd")
    assert mock_request.call_count == 1


@patch("bitstamp_api.rest_client.requests.Session.request")
def test_transport_failure_is_chained(mock_request):
    cause = requests.exceptions.ConnectionError("connection refused")
    mock_request.side_effect = cause
    client = BitstampClient()

    with pytest.raises(TransportError) as excinfo:
        client.get_ticker("btcusd")
    assert excinfo.value.__cause__ is cause


@patch("bitstamp_api.rest_client.requests.Session.request")
def test_unparseable_reply_raises_decode_error(mock_request):
    mock_request.return_value = _response(200, "<html>maintenance</html>")
    client = BitstampClient()

    with pytest.raises(DecodeError) as excinfo:
        client.get_ticker("btcusd")
    assert excinfo.value.raw == "<html>maintenance</html>"


@patch("bitstamp_api.rest_client.requests.Session.request")
def test_reply_missing_fields_raises_decode_error(mock_request):
    mock_request.return_value = _response(200, {"sell": "1.08"})
    client = BitstampClient()

    with pytest.raises(DecodeError):
        client.get_eur_usd()


def test_unknown_pair_rejected_before_request():
    client = BitstampClient()
    with pytest.raises(ValueError):
        client.get_ticker("btcdoge")
