import asyncio
from typing import Any, List, Optional, Union

import aiohttp

from .channels import TradingPair, as_pair
from .config import ClientConfig
from .errors import classify_error_response, is_success
from .event_stream import DEFAULT_WS_URL, STALE_TIMEOUT_SECONDS, BitstampEventStream
from .exceptions import BitstampError, TransportError
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
from .rest_client import (
    DEFAULT_REST_HOST,
    order_book_resource,
    rest_url,
    serialize_body,
    transactions_resource,
)
from .secrets import BitstampCredentials
from .signing import sign_request


class AsyncBitstampClient:
    """Async Bitstamp client using aiohttp.

    Features:
    - Non-blocking REST calls over a pooled aiohttp session.
    - Request signing (X-Auth-* headers) for private endpoints.
    - ``event_stream()`` opens the WebSocket feed on its own connection, so
      REST calls can run concurrently with an open stream.

    Usage:
        async with AsyncBitstampClient(...) as client:
            ticker = await client.get_ticker("btcusd")
            stream = await client.event_stream()
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        secret: Optional[str] = None,
        *,
        host: str = DEFAULT_REST_HOST,
        scheme: str = "https",
        timeout: int = 10,
        ws_url: str = DEFAULT_WS_URL,
        stale_timeout: float = STALE_TIMEOUT_SECONDS,
    ):
        self.api_key = api_key
        self.secret = secret
        self.host = host.rstrip("/")
        self.scheme = scheme
        self.timeout = timeout
        self.ws_url = ws_url
        self.stale_timeout = stale_timeout
        self.session: Optional[aiohttp.ClientSession] = None

    @classmethod
    def from_credentials(cls, credentials: BitstampCredentials, **kwargs) -> "AsyncBitstampClient":
        return cls(api_key=credentials.api_key, secret=credentials.api_secret, **kwargs)

    @classmethod
    def from_config(
        cls, config: ClientConfig, credentials: Optional[BitstampCredentials] = None
    ) -> "AsyncBitstampClient":
        """Create a client from a ClientConfig and optional credentials."""
        return cls(
            api_key=credentials.api_key if credentials else None,
            secret=credentials.api_secret if credentials else None,
            host=config.exchange.rest_host,
            scheme=config.exchange.scheme,
            timeout=config.exchange.timeout,
            ws_url=config.exchange.ws_url,
            stale_timeout=config.stream.stale_timeout_seconds,
        )

    async def __aenter__(self):
        self.session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.session:
            await self.session.close()

    async def call_raw(self, method: str, resource: str, body: Any = None) -> str:
        """Send one request and return the full reply body. Only POST is signed."""
        if not self.session:
            raise BitstampError("Session not initialized; use 'async with' context manager")

        method = method.upper()
        url = rest_url(self.host, resource)
        headers = {}
        payload = None
        if method == "POST":
            payload = serialize_body(body)
            headers = sign_request(self.api_key, self.secret, method, url, payload)

        logger.debug(f"Calling {method} {url}")
        try:
            async with self.session.request(
                method,
                f"{self.scheme}://{url}",
                headers=headers,
                data=payload.encode("utf-8") if payload else None,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as resp:
                text = await resp.text(errors="replace")
                status = resp.status
        except asyncio.TimeoutError as e:
            logger.warning(f"{method} {url} timed out")
            raise TransportError(f"request timeout: {e}") from e
        except aiohttp.ClientError as e:
            logger.warning(f"{method} {url} failed: {e}")
            raise TransportError(f"request failed: {e}") from e

        if not is_success(status):
            raise classify_error_response(status, text)
        return text

    async def _get(self, resource: str, shape: Any):
        return parse_reply(await self.call_raw("GET", resource), shape)

    async def _post(self, resource: str, body: Any, shape: Any):
        return parse_reply(await self.call_raw("POST", resource, body), shape)

    async def get_ticker(self, pair: Union[TradingPair, str]) -> Ticker:
        return await self._get(f"ticker/{as_pair(pair)}/", Ticker)

    async def get_hourly_ticker(self, pair: Union[TradingPair, str]) -> Ticker:
        return await self._get(f"ticker_hour/{as_pair(pair)}/", Ticker)

    async def get_order_book(self, pair: Union[TradingPair, str], group: Optional[str] = None) -> OrderBook:
        return await self._get(order_book_resource(pair, group), OrderBook)

    async def get_transactions(
        self, pair: Union[TradingPair, str], time: Optional[TimeWindow] = None
    ) -> List[Transaction]:
        return await self._get(transactions_resource(pair, time), List[Transaction])

    async def get_trading_pairs_info(self) -> List[PairInfo]:
        return await self._get("trading-pairs-info/", List[PairInfo])

    async def get_eur_usd(self) -> ConversionRate:
        return await self._get("eur_usd/", ConversionRate)

    async def get_balance(self) -> AccountBalance:
        """Account balances (private, signed)."""
        return await self._post("balance/", Offset(offset="1"), AccountBalance)

    async def event_stream(self) -> BitstampEventStream:
        """Open a new event stream. Raises ConnectError on handshake failure."""
        return await BitstampEventStream.connect(self.ws_url, timeout=self.stale_timeout)
