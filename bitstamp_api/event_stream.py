"""Realtime event stream over the Bitstamp WebSocket API.

One stream owns one WebSocket connection and moves through
``CONNECTING -> OPEN -> CLOSED``. While open, callers subscribe to channels
and pull decoded events with ``next_event()``. There is no reconnection: a
timeout, transport error or close frame ends the stream, and a new one must be
opened to continue.

A stream is meant for a single owner task; it does no internal locking.

Usage:
    async with await BitstampEventStream.connect() as stream:
        await stream.subscribe(EventChannel.live_trades(TradingPair.BTCUSD))
        async for event in stream:
            ...
"""
import asyncio
from enum import Enum, auto
from typing import Optional

import aiohttp
from aiohttp import ClientSession, WSMsgType

from .channels import EventChannel
from .events import EventKind, InboundEvent, control_frame, decode_event
from .exceptions import (
    ConnectError,
    DecodeError,
    StreamClosedError,
    StreamTimeoutError,
    TransportError,
)
from .logging_setup import logger

DEFAULT_WS_URL = "wss://ws.bitstamp.net"
STALE_TIMEOUT_SECONDS = 20.0

_CLOSE_TYPES = (WSMsgType.CLOSE, WSMsgType.CLOSING, WSMsgType.CLOSED)


class StreamState(Enum):
    CONNECTING = auto()
    OPEN = auto()
    CLOSED = auto()


class BitstampEventStream:
    """A single WebSocket connection to the Bitstamp event feed.

    Args:
        ws_url: WebSocket endpoint
        timeout: Seconds of silence tolerated before ``next_event`` fails
        session: Optional aiohttp session to connect through; when omitted the
            stream creates its own and closes it with the stream
    """

    def __init__(
        self,
        ws_url: str = DEFAULT_WS_URL,
        *,
        timeout: float = STALE_TIMEOUT_SECONDS,
        session: Optional[ClientSession] = None,
    ):
        self.ws_url = ws_url
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None
        self._ws = None
        self._state = StreamState.CONNECTING

    @classmethod
    async def connect(
        cls,
        ws_url: str = DEFAULT_WS_URL,
        *,
        timeout: float = STALE_TIMEOUT_SECONDS,
        session: Optional[ClientSession] = None,
    ) -> "BitstampEventStream":
        """Open a stream. Raises ConnectError if the handshake fails."""
        stream = cls(ws_url, timeout=timeout, session=session)
        await stream.open()
        return stream

    @property
    def state(self) -> StreamState:
        return self._state

    async def open(self) -> None:
        if self._state is not StreamState.CONNECTING:
            raise RuntimeError(f"stream already {self._state.name.lower()}")
        if self._session is None:
            self._session = ClientSession()
        try:
            # pings must reach next_event so they re-arm the stale timeout
            self._ws = await self._session.ws_connect(self.ws_url, autoping=False)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            logger.warning(f"Failed to connect to {self.ws_url}: {e}")
            await self._shutdown()
            raise ConnectError(f"failed to connect to {self.ws_url}: {e}") from e
        self._state = StreamState.OPEN
        logger.info(f"Connected to {self.ws_url}")

    async def subscribe(self, channel: EventChannel) -> None:
        """Ask the server to start sending ``channel``. Does not wait for an ack."""
        await self._send_control(EventKind.BTS_SUBSCRIBE, channel)

    async def unsubscribe(self, channel: EventChannel) -> None:
        """Ask the server to stop sending ``channel``. Does not wait for an ack."""
        await self._send_control(EventKind.BTS_UNSUBSCRIBE, channel)

    async def _send_control(self, event: EventKind, channel: EventChannel) -> None:
        self._ensure_open()
        logger.debug(f"{event} {channel}")
        try:
            await self._ws.send_str(control_frame(event, channel))
        except (aiohttp.ClientError, ConnectionError) as e:
            await self._shutdown()
            raise TransportError(f"failed to send {event}: {e}") from e

    async def next_event(self) -> InboundEvent:
        """Wait for the next decodable event.

        Control frames (ping/pong) are absorbed but re-arm the timeout.

        Raises:
            StreamTimeoutError: No frame arrived within ``timeout`` seconds
            StreamClosedError: The server closed the socket, or the stream is closed
            TransportError: The socket reported an error
            DecodeError: A data frame could not be decoded; the stream stays open
        """
        while True:
            self._ensure_open()
            try:
                msg = await asyncio.wait_for(self._ws.receive(), timeout=self.timeout)
            except asyncio.TimeoutError as e:
                logger.warning(f"No activity on {self.ws_url} for {self.timeout}s")
                await self._shutdown()
                raise StreamTimeoutError(self.timeout) from e
            except aiohttp.ClientError as e:
                await self._shutdown()
                raise TransportError(f"receive failed: {e}") from e

            event = await self._handle_frame(msg)
            if event is not None:
                return event

    async def _handle_frame(self, msg) -> Optional[InboundEvent]:
        if msg.type is WSMsgType.TEXT:
            return self._decode(msg.data)
        if msg.type is WSMsgType.BINARY:
            try:
                text = msg.data.decode("utf-8")
            except UnicodeDecodeError as e:
                raise DecodeError(f"UTF-8 decode failed: {e}", raw=repr(msg.data)) from e
            return self._decode(text)
        if msg.type is WSMsgType.PING:
            logger.debug("Ping!")
            try:
                await self._ws.pong(msg.data)
            except (aiohttp.ClientError, ConnectionError) as e:
                await self._shutdown()
                raise TransportError(f"failed to answer ping: {e}") from e
            return None
        if msg.type is WSMsgType.PONG:
            logger.debug("Pong!")
            return None
        if msg.type in _CLOSE_TYPES:
            logger.debug(f"close: {msg.data}")
            await self._shutdown()
            raise StreamClosedError(f"stream closed by server (code {msg.data})")
        if msg.type is WSMsgType.ERROR:
            await self._shutdown()
            cause = msg.data if isinstance(msg.data, BaseException) else None
            raise TransportError(f"websocket error: {msg.data}") from cause
        logger.debug(f"Ignoring {msg.type} frame")
        return None

    @staticmethod
    def _decode(text: str) -> InboundEvent:
        try:
            return decode_event(text)
        except DecodeError as e:
            logger.warning(f"Couldn't deserialize: {e}.  Original JSON:\n{text}")
            raise

    def _ensure_open(self) -> None:
        if self._state is not StreamState.OPEN:
            raise StreamClosedError(f"stream is {self._state.name.lower()}")

    async def _shutdown(self) -> None:
        was_open = self._state is StreamState.OPEN
        self._state = StreamState.CLOSED
        if self._ws is not None and not self._ws.closed:
            await self._ws.close()
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        if was_open:
            logger.info(f"Disconnected from {self.ws_url}")

    async def close(self) -> None:
        await self._shutdown()

    async def __aenter__(self):
        if self._state is StreamState.CONNECTING:
            await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def __aiter__(self):
        return self

    async def __anext__(self) -> InboundEvent:
        try:
            return await self.next_event()
        except StreamClosedError:
            raise StopAsyncIteration
