"""Time-ordered order book with per-product, per-timestamp queries."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from .errors import EmptyInputError
from .orders import OrderRecord, OrderType


class OrderBook:
    """Append-only collection of resting orders, ordered by timestamp.

    Invariants:
    1. Records are sorted by timestamp; records sharing a timestamp keep
       their insertion order (stable sort after every insert).
    2. Product and order type of a record never change once inserted.
    3. Trade records are never stored here.
    """

    def __init__(self, orders: Iterable[OrderRecord] | None = None) -> None:
        self._orders: list[OrderRecord] = []
        for order in orders or ():
            self._orders.append(order)
        self._orders.sort(key=lambda o: o.timestamp)

    def __len__(self) -> int:
        return len(self._orders)

    def __iter__(self) -> Iterator[OrderRecord]:
        return iter(self._orders)

    def known_products(self) -> list[str]:
        """Distinct products in the book, sorted lexicographically."""
        return sorted({o.product for o in self._orders})

    def timestamps(self) -> list[str]:
        """Distinct timestamps in ascending order."""
        return sorted({o.timestamp for o in self._orders})

    def orders_for(
        self, order_type: OrderType, product: str, timestamp: str
    ) -> list[OrderRecord]:
        """Resting records matching all three keys, in book order.

        The returned records are the book's own objects, so a matching pass
        over them consumes the resting amounts.
        """
        return [
            o
            for o in self._orders
            if o.order_type == order_type
            and o.product == product
            and o.timestamp == timestamp
        ]

    @staticmethod
    def high_price(records: list[OrderRecord]) -> float:
        if not records:
            raise EmptyInputError("order list")
        return max(o.price for o in records)

    @staticmethod
    def low_price(records: list[OrderRecord]) -> float:
        if not records:
            raise EmptyInputError("order list")
        return min(o.price for o in records)

    def earliest_timestamp(self) -> str:
        """Timestamp of the first record in book order."""
        if not self._orders:
            raise EmptyInputError("order book")
        return self._orders[0].timestamp

    def next_timestamp(self, current: str) -> str:
        """Smallest timestamp strictly after `current`.

        Wraps around to the earliest timestamp when `current` is the last one,
        so replaying the book never terminates.
        """
        for order in self._orders:
            if order.timestamp > current:
                return order.timestamp
        return self.earliest_timestamp()

    def insert(self, order: OrderRecord) -> None:
        """Append an order and re-establish timestamp order (stable)."""
        if order.is_trade:
            raise ValueError("trade records cannot be inserted into the book")
        self._orders.append(order)
        self._orders.sort(key=lambda o: o.timestamp)
