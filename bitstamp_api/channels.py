"""Trading pairs and event-stream channels.

A channel is a ``(kind, pair)`` value that travels over the wire as a single
string ``"<kind>_<pair>"``, e.g. ``live_trades_btcusd`` or
``detail_order_book_ethbtc``. Kind names contain underscores themselves, so a
wire string is split from the right: the last token is the pair, everything
before it is the kind.

Examples:
    >>> ch = EventChannel.live_trades(TradingPair.BTCUSD)
    >>> ch.to_wire()
    'live_trades_btcusd'
    >>> EventChannel.from_wire("detail_order_book_ethbtc")
    EventChannel(kind=<ChannelKind.DETAIL_ORDER_BOOK: 'detail_order_book'>, pair=<TradingPair.ETHBTC: 'ethbtc'>)
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Union

from .exceptions import ChannelDecodeError


class TradingPair(str, Enum):
    """Currency pairs recognised by the exchange, by lowercase symbol."""

    BTCUSD = "btcusd"
    BTCEUR = "btceur"
    EURUSD = "eurusd"
    XRPUSD = "xrpusd"
    XRPEUR = "xrpeur"
    XRPBTC = "xrpbtc"
    LTCUSD = "ltcusd"
    LTCEUR = "ltceur"
    LTCBTC = "ltcbtc"
    ETHUSD = "ethusd"
    ETHEUR = "etheur"
    ETHBTC = "ethbtc"
    BCHUSD = "bchusd"
    BCHEUR = "bcheur"
    BCHBTC = "bchbtc"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, symbol: str) -> "TradingPair":
        """Case-insensitive lookup; raises ValueError for unknown symbols."""
        return cls(symbol.lower())


class ChannelKind(str, Enum):
    """Stream kinds a channel can carry."""

    LIVE_TRADES = "live_trades"
    LIVE_ORDERS = "live_orders"
    ORDER_BOOK = "order_book"
    DETAIL_ORDER_BOOK = "detail_order_book"
    DIFF_ORDER_BOOK = "diff_order_book"

    def __str__(self) -> str:
        return self.value


# wire prefix -> kind, wire suffix -> pair
_KINDS_BY_PREFIX: Dict[str, ChannelKind] = {k.value: k for k in ChannelKind}
_PAIRS_BY_SUFFIX: Dict[str, TradingPair] = {p.value: p for p in TradingPair}


def as_pair(pair: Union[TradingPair, str]) -> TradingPair:
    """Coerce a symbol string or TradingPair into a TradingPair."""
    if isinstance(pair, TradingPair):
        return pair
    return TradingPair.parse(pair)


@dataclass(frozen=True)
class EventChannel:
    """A subscription topic on the event stream."""

    kind: ChannelKind
    pair: TradingPair

    def to_wire(self) -> str:
        return f"{self.kind.value}_{self.pair.value}"

    def __str__(self) -> str:
        return self.to_wire()

    @classmethod
    def from_wire(cls, wire: str) -> "EventChannel":
        """Decode a wire channel string.

        Raises:
            ChannelDecodeError: If the pair suffix or the kind prefix is unknown
        """
        if not isinstance(wire, str):
            raise ChannelDecodeError(repr(wire), "channel must be a string")
        prefix, sep, suffix = wire.rpartition("_")
        if not sep:
            raise ChannelDecodeError(wire, "malformed channel")
        pair = _PAIRS_BY_SUFFIX.get(suffix.lower())
        if pair is None:
            raise ChannelDecodeError(wire, f"unknown currency pair {suffix!r}")
        kind = _KINDS_BY_PREFIX.get(prefix)
        if kind is None:
            raise ChannelDecodeError(wire, f"unknown channel kind {prefix!r}")
        return cls(kind, pair)

    @classmethod
    def live_trades(cls, pair: Union[TradingPair, str]) -> "EventChannel":
        return cls(ChannelKind.LIVE_TRADES, as_pair(pair))

    @classmethod
    def live_orders(cls, pair: Union[TradingPair, str]) -> "EventChannel":
        return cls(ChannelKind.LIVE_ORDERS, as_pair(pair))

    @classmethod
    def order_book(cls, pair: Union[TradingPair, str]) -> "EventChannel":
        return cls(ChannelKind.ORDER_BOOK, as_pair(pair))

    @classmethod
    def detail_order_book(cls, pair: Union[TradingPair, str]) -> "EventChannel":
        return cls(ChannelKind.DETAIL_ORDER_BOOK, as_pair(pair))

    @classmethod
    def diff_order_book(cls, pair: Union[TradingPair, str]) -> "EventChannel":
        return cls(ChannelKind.DIFF_ORDER_BOOK, as_pair(pair))
