"""
Bitstamp trading API client.

Public market data, signed account calls, and the realtime event feed:
- HMAC-SHA256 request signing (X-Auth-* headers, API v2)
- Blocking (requests) and asyncio (aiohttp) REST clients
- Exchange error envelopes mapped to typed exceptions
- WebSocket event stream with subscribe/unsubscribe and a stale-feed timeout
- Trade / order / order-book event decoding (pydantic)
- Structured logging via loguru
- Configuration-driven (YAML)

Core Modules:
    signing: Canonical message construction and request signing
    rest_client: Blocking REST client
    async_rest_client: Async REST client and event-stream factory
    errors: Non-success response classification
    channels: Trading pairs and event channels
    events: Inbound event decoding
    event_stream: WebSocket event stream
    config: Configuration loading
    secrets: Credential management

Example:
    >>> from bitstamp_api.async_rest_client import AsyncBitstampClient
    >>> from bitstamp_api.channels import EventChannel, TradingPair
    >>> from bitstamp_api.secrets import load_credentials
    >>>
    >>> async with AsyncBitstampClient.from_credentials(load_credentials()) as client:
    ...     balance = await client.get_balance()
    ...     stream = await client.event_stream()
    ...     await stream.subscribe(EventChannel.live_trades(TradingPair.BTCUSD))
    ...     event = await stream.next_event()
"""

__version__ = "0.1.0"
__all__ = [
    "signing",
    "rest_client",
    "async_rest_client",
    "errors",
    "exceptions",
    "channels",
    "events",
    "event_stream",
    "models",
    "config",
    "secrets",
]
