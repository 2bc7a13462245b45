"""Pydantic models for Bitstamp REST payloads.

Only the fields the client relies on are declared; unknown fields in a reply
are ignored so that the exchange can add fields without breaking decoding.
"""
from decimal import Decimal
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from .exceptions import DecodeError


class TimeWindow(str, Enum):
    """Lookback window for the transactions endpoint."""

    MINUTE = "minute"
    HOUR = "hour"
    DAY = "day"

    def __str__(self) -> str:
        return self.value


class Ticker(BaseModel):
    high: str
    last: str
    timestamp: str
    bid: str
    vwap: str
    volume: str
    low: str
    ask: str
    open: str


class OrderBook(BaseModel):
    """Order book snapshot. Each level is ``[price, amount]`` (strings)."""

    timestamp: str
    microtimestamp: str
    bids: List[List[str]]
    asks: List[List[str]]


class Transaction(BaseModel):
    date: str
    tid: str
    price: str
    type_field: str = Field(alias="type")
    amount: str


class PairInfo(BaseModel):
    base_decimals: int
    minimum_order: str
    name: str
    counter_decimals: int
    trading: str
    url_symbol: str
    description: str


class ConversionRate(BaseModel):
    sell: str
    buy: str


class AccountBalance(BaseModel):
    """Account balance reply.

    The exchange returns one ``<currency>_available`` / ``_balance`` /
    ``_reserved`` triple per currency plus per-pair fee fields, and the set
    grows with every listed asset, so all fields are kept as extras and read
    through the accessors below.
    """

    model_config = ConfigDict(extra="allow")

    def _field(self, name: str) -> Optional[Decimal]:
        value = (self.model_extra or {}).get(name)
        if value is None:
            return None
        return Decimal(str(value))

    def available(self, currency: str) -> Optional[Decimal]:
        return self._field(f"{currency.lower()}_available")

    def balance(self, currency: str) -> Optional[Decimal]:
        return self._field(f"{currency.lower()}_balance")

    def reserved(self, currency: str) -> Optional[Decimal]:
        return self._field(f"{currency.lower()}_reserved")

    def fee(self, pair: str) -> Optional[Decimal]:
        return self._field(f"{pair.lower()}_fee")


class Offset(BaseModel):
    offset: str


class V2ErrorEnvelope(BaseModel):
    status: str
    reason: str
    code: str


class V1ErrorEnvelope(BaseModel):
    error: str


def parse_reply(text: str, shape: Any) -> Any:
    """Decode a successful reply body into ``shape`` (a model or typing form).

    Raises:
        DecodeError: If the body is not JSON or does not fit ``shape``
    """
    try:
        return TypeAdapter(shape).validate_json(text)
    except ValidationError as e:
        raise DecodeError(f"failed to parse reply: {e}", raw=text) from e
