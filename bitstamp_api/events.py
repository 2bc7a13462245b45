"""Event-stream frames: inbound event decoding and outbound control frames.

Inbound frames look like ``{"event": ..., "channel": ..., "data": {...}}``.
The ``data`` object carries no variant tag, so its shape is inferred from the
fields present, checked in this order:

    buy_order_id / sell_order_id  -> TradePayload
    order_type                    -> OrderPayload
    bids / asks                   -> OrderBookPayload
    none of the above             -> EmptyPayload

The first marker found commits the decoder to that shape; if the payload then
fails validation a DecodeError is raised rather than falling through to a
later shape. Should the exchange ever send overlapping field sets, the
earlier entry in the table wins.
"""
import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Tuple, Type, Union

from pydantic import BaseModel, Field, ValidationError

from .channels import EventChannel
from .exceptions import DecodeError


class EventKind(str, Enum):
    """Event names that can appear in the ``event`` field of a frame."""

    BTS_SUBSCRIBE = "bts:subscribe"
    BTS_UNSUBSCRIBE = "bts:unsubscribe"
    SUBSCRIPTION_SUCCEEDED = "bts:subscription_succeeded"
    UNSUBSCRIPTION_SUCCEEDED = "bts:unsubscription_succeeded"
    TRADE = "trade"
    ORDER_CREATED = "order_created"
    ORDER_CHANGED = "order_changed"
    ORDER_DELETED = "order_deleted"
    DATA = "data"

    def __str__(self) -> str:
        return self.value


class TradePayload(BaseModel):
    buy_order_id: int
    amount_str: str
    timestamp: str
    microtimestamp: str
    id: int
    amount: float
    sell_order_id: int
    price_str: str
    type_field: int = Field(alias="type")
    price: float


class OrderPayload(BaseModel):
    id: int
    id_str: str
    order_type: int
    datetime: str
    microtimestamp: str
    amount: float
    amount_str: str
    price: float
    price_str: str


class OrderBookPayload(BaseModel):
    timestamp: str
    microtimestamp: str
    bids: List[List[str]]
    asks: List[List[str]]


class EmptyPayload(BaseModel):
    pass


EventPayload = Union[TradePayload, OrderPayload, OrderBookPayload, EmptyPayload]

# (marker fields, model), in priority order
_PAYLOAD_SHAPES: List[Tuple[Tuple[str, ...], Type[BaseModel]]] = [
    (("buy_order_id", "sell_order_id"), TradePayload),
    (("order_type",), OrderPayload),
    (("bids", "asks"), OrderBookPayload),
]


@dataclass(frozen=True)
class InboundEvent:
    """A decoded event-stream frame."""

    event: EventKind
    channel: EventChannel
    data: EventPayload


def decode_payload(data: Any) -> EventPayload:
    """Infer the payload shape of an event's ``data`` object and validate it.

    Raises:
        DecodeError: If ``data`` is not an object, or matches a shape's
            marker fields but not the rest of that shape
    """
    if not isinstance(data, dict):
        raise DecodeError(f"event data must be an object, got {type(data).__name__}", raw=repr(data))
    for markers, model in _PAYLOAD_SHAPES:
        if any(m in data for m in markers):
            try:
                return model.model_validate(data)
            except ValidationError as e:
                raise DecodeError(f"malformed {model.__name__}: {e}", raw=json.dumps(data)) from e
    return EmptyPayload()


def decode_event(frame: Union[str, Dict[str, Any]]) -> InboundEvent:
    """Decode an inbound frame (JSON text or already-parsed object).

    Raises:
        DecodeError: If the frame is not JSON, lacks a field, names an
            unknown event, or carries a malformed payload
        ChannelDecodeError: If the channel string is not recognised
    """
    raw = frame if isinstance(frame, str) else json.dumps(frame)
    if isinstance(frame, str):
        try:
            obj = json.loads(frame)
        except ValueError as e:
            raise DecodeError(f"invalid JSON: {e}", raw=raw) from e
    else:
        obj = frame

    if not isinstance(obj, dict):
        raise DecodeError("frame must be a JSON object", raw=raw)
    missing = [k for k in ("event", "channel", "data") if k not in obj]
    if missing:
        raise DecodeError(f"frame missing fields: {', '.join(missing)}", raw=raw)

    try:
        kind = EventKind(obj["event"])
    except ValueError as e:
        raise DecodeError(f"unknown event {obj['event']!r}", raw=raw) from e

    channel = EventChannel.from_wire(obj["channel"])
    try:
        data = decode_payload(obj["data"])
    except DecodeError as e:
        raise DecodeError(str(e), raw=raw) from e
    return InboundEvent(event=kind, channel=channel, data=data)


def control_frame(event: EventKind, channel: EventChannel) -> str:
    """Serialize an outbound subscribe/unsubscribe frame."""
    if event not in (EventKind.BTS_SUBSCRIBE, EventKind.BTS_UNSUBSCRIBE):
        raise ValueError(f"not a control event: {event}")
    return json.dumps({"event": event.value, "data": {"channel": channel.to_wire()}})
