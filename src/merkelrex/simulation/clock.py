"""Discrete simulation clock driven by the timestamps present in the book."""

from __future__ import annotations

from ..engine.orderbook import OrderBook


class SimulationClock:
    """Current time step of the simulation.

    Starts at the book's earliest timestamp and steps to the next distinct
    timestamp, wrapping back to the start after the last one.
    """

    def __init__(self, book: OrderBook, start: str | None = None) -> None:
        self.book = book
        self.current: str = start if start is not None else book.earliest_timestamp()

    def advance(self) -> str:
        self.current = self.book.next_timestamp(self.current)
        return self.current
