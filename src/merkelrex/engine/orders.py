"""Order record definitions for the order book and matching engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from .errors import MalformedProductError

MARKET_OWNER = "market"


class OrderType(Enum):
    BID = auto()  # Buy
    ASK = auto()  # Sell
    UNKNOWN = auto()
    ASK_TRADE = auto()  # Trade attributed to the selling side
    BID_TRADE = auto()  # Trade attributed to the buying side

    @classmethod
    def from_string(cls, value: str) -> OrderType:
        """Map the order book file spelling ("bid"/"ask") to a member."""
        value = value.strip().lower()
        if value == "bid":
            return cls.BID
        if value == "ask":
            return cls.ASK
        return cls.UNKNOWN


@dataclass(slots=True)
class OrderRecord:
    """One resting order or one trade produced by matching.

    Once a record rests in the book only ``amount`` changes: matching
    reduces it as the record is consumed. ``amount == 0`` means exhausted.

    Attributes:
        price: Limit price (or execution price for trades).
        amount: Remaining quantity of the base currency.
        timestamp: Opaque, lexicographically sortable time key.
        product: Currency pair, "BASE/QUOTE".
        order_type: BID, ASK or one of the trade kinds.
        owner: Participant name, or "market" for anonymous interest.
    """

    price: float
    amount: float
    timestamp: str
    product: str
    order_type: OrderType
    owner: str = MARKET_OWNER

    @property
    def is_trade(self) -> bool:
        return self.order_type in (OrderType.ASK_TRADE, OrderType.BID_TRADE)

    @property
    def is_exhausted(self) -> bool:
        return self.amount == 0


def split_product(product: str) -> tuple[str, str]:
    """Split "BASE/QUOTE" into (base, quote).

    Raises MalformedProductError unless there are exactly two non-empty codes.
    """
    parts = product.split("/")
    if len(parts) != 2 or not all(parts):
        raise MalformedProductError(product)
    return parts[0], parts[1]
