import json
from typing import Any, List, Optional, Union

import requests
from pydantic import BaseModel

from .channels import TradingPair, as_pair
from .config import ExchangeConfig
from .errors import classify_error_response, is_success
from .exceptions import TransportError
from .logging_setup import logger
from .models import (
    AccountBalance,
    ConversionRate,
    Offset,
    OrderBook,
    PairInfo,
    Ticker,
    TimeWindow,
    Transaction,
    parse_reply,
)
from .secrets import BitstampCredentials
from .signing import API_VERSION, sign_request

DEFAULT_REST_HOST = "www.bitstamp.net"


def rest_url(host: str, resource: str) -> str:
    """Scheme-less URL of ``resource``; this is the form that gets signed."""
    return f"{host}/api/{API_VERSION}/{resource}"


def serialize_body(body: Any) -> str:
    """Serialize a request body once, as compact JSON; ``None`` becomes ``""``."""
    if body is None:
        return ""
    if isinstance(body, BaseModel):
        body = body.model_dump(by_alias=True)
    return json.dumps(body, separators=(",", ":"))


def order_book_resource(pair: Union[TradingPair, str], group: Optional[str] = None) -> str:
    query = f"?group={group}" if group is not None else ""
    return f"order_book/{as_pair(pair)}/{query}"


def transactions_resource(pair: Union[TradingPair, str], time: Optional[TimeWindow] = None) -> str:
    query = f"?time={TimeWindow(time)}" if time is not None else ""
    return f"transactions/{as_pair(pair)}/{query}"


class BitstampClient:
    """Blocking Bitstamp REST client with request signing.

    Public endpoints are plain GETs. Private endpoints are POSTs signed with
    the X-Auth-* scheme (see ``signing``). Failed calls are never retried.

    Notes:
    - Credentials are only needed for private endpoints.
    - Non-2xx replies raise ProtocolErrorV2 / ProtocolErrorV1 /
      ProtocolStatusError depending on the body; connection problems raise
      TransportError with the cause chained.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        secret: Optional[str] = None,
        *,
        host: str = DEFAULT_REST_HOST,
        scheme: str = "https",
        timeout: int = 10,
    ):
        self.api_key = api_key
        self.secret = secret
        self.host = host.rstrip("/")
        self.scheme = scheme
        self.timeout = timeout
        self.session = requests.Session()

    @classmethod
    def from_credentials(cls, credentials: BitstampCredentials, **kwargs) -> "BitstampClient":
        """Create BitstampClient from BitstampCredentials (loaded via secrets module)."""
        return cls(api_key=credentials.api_key, secret=credentials.api_secret, **kwargs)

    @classmethod
    def from_config(
        cls, config: ExchangeConfig, credentials: Optional[BitstampCredentials] = None
    ) -> "BitstampClient":
        return cls(
            api_key=credentials.api_key if credentials else None,
            secret=credentials.api_secret if credentials else None,
            host=config.rest_host,
            scheme=config.scheme,
            timeout=config.timeout,
        )

    def close(self) -> None:
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def call_raw(self, method: str, resource: str, body: Any = None) -> str:
        """Send one request and return the full reply body.

        Only POST requests are signed; GET requests carry no body.
        """
        method = method.upper()
        url = rest_url(self.host, resource)
        headers = {}
        payload = None
        if method == "POST":
            payload = serialize_body(body)
            headers = sign_request(self.api_key, self.secret, method, url, payload)

        logger.debug(f"Calling {method} {url}")
        try:
            resp = self.session.request(
                method,
                f"{self.scheme}://{url}",
                headers=headers,
                data=payload.encode("utf-8") if payload else None,
                timeout=self.timeout,
            )
            text = resp.text
        except requests.exceptions.RequestException as e:
            logger.warning(f"{method} {url} failed: {e}")
            raise TransportError(f"request failed: {e}") from e

        if not is_success(resp.status_code):
            raise classify_error_response(resp.status_code, text)
        return text

    def _get(self, resource: str, shape: Any):
        return parse_reply(self.call_raw("GET", resource), shape)

    def _post(self, resource: str, body: Any, shape: Any):
        return parse_reply(self.call_raw("POST", resource, body), shape)

    def get_ticker(self, pair: Union[TradingPair, str]) -> Ticker:
        return self._get(f"ticker/{as_pair(pair)}/", Ticker)

    def get_hourly_ticker(self, pair: Union[TradingPair, str]) -> Ticker:
        return self._get(f"ticker_hour/{as_pair(pair)}/", Ticker)

    def get_order_book(self, pair: Union[TradingPair, str], group: Optional[str] = None) -> OrderBook:
        return self._get(order_book_resource(pair, group), OrderBook)

    def get_transactions(
        self, pair: Union[TradingPair, str], time: Optional[TimeWindow] = None
    ) -> List[Transaction]:
        return self._get(transactions_resource(pair, time), List[Transaction])

    def get_trading_pairs_info(self) -> List[PairInfo]:
        return self._get("trading-pairs-info/", List[PairInfo])

    def get_eur_usd(self) -> ConversionRate:
        return self._get("eur_usd/", ConversionRate)

    def get_balance(self) -> AccountBalance:
        """Account balances (private, signed)."""
        return self._post("balance/", Offset(offset="1"), AccountBalance)
