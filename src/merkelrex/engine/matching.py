"""Matching engine that crosses asks against bids for one product and time step."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass

from .orderbook import OrderBook
from .orders import MARKET_OWNER, OrderRecord, OrderType

logger = logging.getLogger(__name__)


def match_asks_to_bids(
    asks: list[OrderRecord],
    bids: list[OrderRecord],
    product: str,
    timestamp: str,
    participant: str,
) -> list[OrderRecord]:
    """Cross asks against bids and return the resulting trade records.

    Asks are visited lowest price first, bids highest price first (both
    stable sorts). Every trade executes at the ask price. The `amount` of
    each input record is reduced in place by whatever was consumed, so a
    second call on the same records yields no further trades.

    Attribution: a trade is an ASK_TRADE owned by the market unless the bid
    belongs to `participant` (BID_TRADE), and an ask owned by `participant`
    overrides that (ASK_TRADE), even when both sides are the participant's.

    No validation is done on prices or amounts.
    """
    asks = sorted(asks, key=lambda o: o.price)
    bids = sorted(bids, key=lambda o: o.price, reverse=True)
    trades: list[OrderRecord] = []

    for ask in asks:
        for bid in bids:
            # A bid below this ask is skipped rather than ending the scan.
            if bid.price < ask.price or ask.amount <= 0:
                continue

            trade = OrderRecord(
                price=ask.price,
                amount=0.0,
                timestamp=timestamp,
                product=product,
                order_type=OrderType.ASK_TRADE,
                owner=MARKET_OWNER,
            )
            if bid.owner == participant:
                trade.owner = participant
                trade.order_type = OrderType.BID_TRADE
            if ask.owner == participant:
                trade.owner = participant
                trade.order_type = OrderType.ASK_TRADE

            if bid.amount == ask.amount:
                trade.amount = ask.amount
                trades.append(trade)
                bid.amount = 0.0
                ask.amount = 0.0
                break
            if bid.amount > ask.amount:
                trade.amount = ask.amount
                trades.append(trade)
                bid.amount = bid.amount - ask.amount
                ask.amount = 0.0
                break
            if 0 < bid.amount < ask.amount:
                trade.amount = bid.amount
                trades.append(trade)
                ask.amount = ask.amount - bid.amount
                bid.amount = 0.0
                continue
            # Bid already exhausted earlier in this pass.

    return trades


@dataclass
class EngineStats:
    """Running statistics of the matching engine."""

    passes: int = 0
    total_trades: int = 0
    total_volume: float = 0.0


class MatchingEngine:
    """Runs matching passes over an order book and keeps a trade log.

    The log holds the most recent `log_limit` trades (all of them when None);
    `stats` always covers the whole run.
    """

    def __init__(
        self, book: OrderBook, participant: str, log_limit: int | None = None
    ) -> None:
        self.book = book
        self.participant = participant
        self.stats = EngineStats()
        self._trade_log: deque[OrderRecord] = deque(maxlen=log_limit)

    def match(self, product: str, timestamp: str) -> list[OrderRecord]:
        """Match the resting asks and bids of one product at one timestamp."""
        asks = self.book.orders_for(OrderType.ASK, product, timestamp)
        bids = self.book.orders_for(OrderType.BID, product, timestamp)
        trades = match_asks_to_bids(asks, bids, product, timestamp, self.participant)

        self._trade_log.extend(trades)
        self.stats.passes += 1
        self.stats.total_trades += len(trades)
        self.stats.total_volume += sum(t.amount for t in trades)

        for t in trades:
            logger.debug(
                "%s %s trade %s @ %s (%s)",
                timestamp, product, t.amount, t.price, t.order_type.name,
            )
        return trades

    @property
    def trades(self) -> list[OrderRecord]:
        return list(self._trade_log)
