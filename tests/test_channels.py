import itertools

import pytest

from bitstamp_api.channels import ChannelKind, EventChannel, TradingPair
from bitstamp_api.exceptions import ChannelDecodeError, DecodeError


def test_to_wire_joins_kind_and_pair():
    assert EventChannel.live_trades(TradingPair.BTCUSD).to_wire() == "live_trades_btcusd"
    assert EventChannel.detail_order_book("ETHBTC").to_wire() == "detail_order_book_ethbtc"
    assert str(EventChannel.diff_order_book(TradingPair.XRPEUR)) == "diff_order_book_xrpeur"


def test_round_trip_every_kind_and_pair():
    for kind, pair in itertools.product(ChannelKind, TradingPair):
        channel = EventChannel(kind, pair)
        assert EventChannel.from_wire(channel.to_wire()) == channel


def test_from_wire_splits_from_the_right():
    """Kinds with underscores still decode: the pair is only the last token."""
    channel = EventChannel.from_wire("detail_order_book_btceur")
    assert channel.kind is ChannelKind.DETAIL_ORDER_BOOK
    assert channel.pair is TradingPair.BTCEUR


def test_from_wire_pair_is_case_insensitive():
    assert EventChannel.from_wire("live_orders_LTCUSD") == EventChannel.live_orders(TradingPair.LTCUSD)


@pytest.mark.parametrize("wire", [
    "not_a_channel_xyz",
    "live_trades_dogeusd",
    "live_trade_btcusd",
    "btcusd",
    "",
    "_btcusd",
])
def test_from_wire_rejects_garbage(wire):
    with pytest.raises(ChannelDecodeError):
        EventChannel.from_wire(wire)


def test_channel_decode_error_carries_raw_text():
    with pytest.raises(DecodeError) as excinfo:
        EventChannel.from_wire("not_a_channel_xyz")
    assert excinfo.value.raw == "not_a_channel_xyz"


def test_trading_pair_parse():
    assert TradingPair.parse("BtcUsd") is TradingPair.BTCUSD
    with pytest.raises(ValueError):
        TradingPair.parse("btcdoge")


def test_channels_are_hashable_values():
    a = EventChannel.order_book(TradingPair.ETHUSD)
    b = EventChannel(ChannelKind.ORDER_BOOK, TradingPair.ETHUSD)
    assert a == b
    assert len({a, b}) == 1
