"""Tests for matching asks against bids."""

import numpy as np

from merkelrex.engine.matching import MatchingEngine, match_asks_to_bids
from merkelrex.engine.orderbook import OrderBook
from merkelrex.engine.orders import OrderRecord, OrderType

PRODUCT = "BTC/USDT"
TIME = "2020/03/17 17:01:24"
USER = "simuser"


def _ask(price, amount, owner="market"):
    return OrderRecord(price, amount, TIME, PRODUCT, OrderType.ASK, owner)


def _bid(price, amount, owner="market"):
    return OrderRecord(price, amount, TIME, PRODUCT, OrderType.BID, owner)


def _match(asks, bids):
    return match_asks_to_bids(asks, bids, PRODUCT, TIME, USER)


class TestMatchingScenarios:
    def test_bid_larger_than_ask(self):
        """Ask(10000, 0.5) vs Bid(10100, 1.0): one trade at 10000 for 0.5."""
        ask, bid = _ask(10000, 0.5), _bid(10100, 1.0)
        trades = _match([ask], [bid])
        assert len(trades) == 1
        assert trades[0].price == 10000
        assert trades[0].amount == 0.5
        assert trades[0].order_type == OrderType.ASK_TRADE
        assert trades[0].owner == "market"
        assert trades[0].timestamp == TIME
        assert trades[0].product == PRODUCT
        assert bid.amount == 0.5
        assert ask.amount == 0

    def test_no_cross(self):
        """Ask(200, 50) vs Bid(190, 10): no trade, nothing consumed."""
        ask, bid = _ask(200, 50), _bid(190, 10)
        assert _match([ask], [bid]) == []
        assert ask.amount == 50
        assert bid.amount == 10

    def test_two_asks_one_bid(self):
        """Two asks (10000, 0.5) against one bid (10000, 1.0)."""
        a1, a2 = _ask(10000, 0.5), _ask(10000, 0.5)
        bid = _bid(10000, 1.0)
        trades = _match([a1, a2], [bid])
        assert [t.amount for t in trades] == [0.5, 0.5]
        assert bid.amount == 0
        assert a1.amount == 0 and a2.amount == 0

    def test_equal_amounts(self):
        ask, bid = _ask(100, 3), _bid(100, 3)
        trades = _match([ask], [bid])
        assert [(t.price, t.amount) for t in trades] == [(100, 3)]
        assert ask.amount == 0 and bid.amount == 0

    def test_ask_sweeps_several_bids(self):
        """A large ask takes the best bid first, then the next."""
        ask = _ask(100, 5)
        low, high = _bid(101, 2), _bid(103, 2)
        trades = _match([ask], [low, high])
        assert [t.amount for t in trades] == [2, 2]
        assert all(t.price == 100 for t in trades)
        assert ask.amount == 1
        assert low.amount == 0 and high.amount == 0

    def test_bid_below_ask_untouched(self):
        ask = _ask(100, 3)
        bids = [_bid(110, 1), _bid(90, 5), _bid(105, 1)]
        trades = _match([ask], bids)
        assert [t.amount for t in trades] == [1, 1]
        assert ask.amount == 1
        assert bids[1].amount == 5

    def test_asks_visited_lowest_first(self):
        cheap, dear = _ask(101, 1), _ask(100, 1)
        bid = _bid(101, 1)
        trades = _match([cheap, dear], [bid])
        assert len(trades) == 1
        assert trades[0].price == 100
        assert dear.amount == 0
        assert cheap.amount == 1

    def test_trade_executes_at_ask_price(self):
        trades = _match([_ask(95, 1)], [_bid(120, 1)])
        assert trades[0].price == 95

    def test_equal_bids_fill_in_listed_order(self):
        """Two bids at 100 for one unit: the first listed fills, the second waits."""
        first, second = _bid(100, 1), _bid(100, 1, owner=USER)
        trades = _match([_ask(100, 1)], [first, second])
        assert len(trades) == 1
        assert trades[0].owner == "market"
        assert trades[0].order_type == OrderType.ASK_TRADE
        assert first.amount == 0
        assert second.amount == 1

    def test_equal_bids_listed_order_reversed(self):
        first, second = _bid(100, 1, owner=USER), _bid(100, 1)
        trades = _match([_ask(100, 1)], [first, second])
        assert trades[0].owner == USER
        assert trades[0].order_type == OrderType.BID_TRADE
        assert first.amount == 0
        assert second.amount == 1

    def test_equal_asks_fill_in_listed_order(self):
        """Two asks at 100 against a one-unit bid: the first listed ask trades."""
        first, second = _ask(100, 1), _ask(100, 1, owner=USER)
        trades = _match([first, second], [_bid(100, 1)])
        assert len(trades) == 1
        assert trades[0].owner == "market"
        assert first.amount == 0
        assert second.amount == 1

    def test_equal_asks_listed_order_reversed(self):
        first, second = _ask(100, 1, owner=USER), _ask(100, 1)
        trades = _match([first, second], [_bid(100, 1)])
        assert trades[0].owner == USER
        assert trades[0].order_type == OrderType.ASK_TRADE
        assert first.amount == 0
        assert second.amount == 1


class TestAttribution:
    def test_participant_bid(self):
        trades = _match([_ask(100, 1)], [_bid(100, 1, owner=USER)])
        assert trades[0].owner == USER
        assert trades[0].order_type == OrderType.BID_TRADE

    def test_participant_ask(self):
        trades = _match([_ask(100, 1, owner=USER)], [_bid(100, 1)])
        assert trades[0].owner == USER
        assert trades[0].order_type == OrderType.ASK_TRADE

    def test_ask_attribution_wins_on_self_trade(self):
        trades = _match([_ask(100, 1, owner=USER)], [_bid(100, 1, owner=USER)])
        assert trades[0].owner == USER
        assert trades[0].order_type == OrderType.ASK_TRADE


class TestMatchingInvariants:
    def _random_book(self, seed):
        rng = np.random.default_rng(seed)
        asks = [_ask(float(p), float(a)) for p, a in zip(
            rng.integers(95, 106, 8), rng.integers(1, 6, 8))]
        bids = [_bid(float(p), float(a)) for p, a in zip(
            rng.integers(95, 106, 8), rng.integers(1, 6, 8))]
        return asks, bids

    def test_conservation_and_non_negativity(self):
        for seed in range(20):
            asks, bids = self._random_book(seed)
            ask_before = sum(a.amount for a in asks)
            bid_before = sum(b.amount for b in bids)
            trades = _match(asks, bids)
            traded = sum(t.amount for t in trades)

            assert traded <= min(ask_before, bid_before)
            assert ask_before - sum(a.amount for a in asks) == traded
            assert bid_before - sum(b.amount for b in bids) == traded
            assert all(o.amount >= 0 for o in asks + bids)

    def test_rematch_yields_nothing(self):
        for seed in range(20):
            asks, bids = self._random_book(seed)
            _match(asks, bids)
            assert _match(asks, bids) == []

    def test_input_lists_not_reordered(self):
        asks = [_ask(102, 1), _ask(100, 1)]
        _match(asks, [])
        assert [a.price for a in asks] == [102, 100]


class TestMatchingEngine:
    def test_match_consumes_book(self):
        ask, bid = _ask(10000, 0.5), _bid(10100, 1.0)
        book = OrderBook([ask, bid])
        engine = MatchingEngine(book, USER)

        trades = engine.match(PRODUCT, TIME)
        assert len(trades) == 1
        assert bid.amount == 0.5
        assert engine.match(PRODUCT, TIME) == []

        assert engine.stats.passes == 2
        assert engine.stats.total_trades == 1
        assert engine.stats.total_volume == 0.5
        assert engine.trades == trades

    def test_match_unknown_product(self):
        engine = MatchingEngine(OrderBook([_ask(1, 1)]), USER)
        assert engine.match("XRP/USDT", TIME) == []

    def test_trades_returns_copy(self):
        engine = MatchingEngine(OrderBook([_ask(100, 1), _bid(100, 1)]), USER)
        engine.match(PRODUCT, TIME)
        engine.trades.clear()
        assert len(engine.trades) == 1

    def test_log_limit_keeps_latest(self):
        asks = [_ask(100, 1), _ask(101, 1), _ask(102, 1)]
        engine = MatchingEngine(OrderBook(asks + [_bid(110, 3)]), USER, log_limit=1)
        trades = engine.match(PRODUCT, TIME)
        assert len(trades) == 3
        assert engine.trades == [trades[-1]]
        assert engine.stats.total_trades == 3
        assert engine.stats.total_volume == 3
