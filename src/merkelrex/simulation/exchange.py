"""Exchange simulation driver: owns the book, wallet and clock, and steps time."""

from __future__ import annotations

import logging
import math
from collections import deque
from dataclasses import dataclass, field

from ..engine.errors import EmptyBookError, InsufficientFundsError
from ..engine.matching import MatchingEngine
from ..engine.orderbook import OrderBook
from ..engine.orders import OrderRecord, OrderType, split_product
from ..ledger.settlement import SettlementPolicy
from ..ledger.wallet import Wallet
from .clock import SimulationClock
from .input_parser import ParseError, parse_order_line
from .seed_data import load_csv, mock_orders

logger = logging.getLogger(__name__)


@dataclass
class ExchangeConfig:
    """Simulation configuration."""

    participant: str = "simuser"
    initial_balances: dict[str, float] = field(
        default_factory=lambda: {"BTC": 10.0, "USDT": 100000.0}
    )
    seed_csv: str | None = None  # order book file; mock data when None
    history_limit: int | None = 10_000  # step reports kept; None keeps all


@dataclass
class ProductStats:
    """Read-only view of one product at the current time step."""

    product: str
    n_asks: int
    n_bids: int
    high_ask: float | None
    low_ask: float | None
    high_bid: float | None
    low_bid: float | None


@dataclass
class StepReport:
    """Outcome of one time step.

    `unsettled` holds participant trades the wallet could no longer cover.
    Matching has already consumed the book records behind them, so the
    counterparty interest is gone even though nothing was paid.
    """

    timestamp: str
    trades: dict[str, list[OrderRecord]]
    settled: list[OrderRecord]
    unsettled: list[OrderRecord]
    balances: dict[str, float]
    next_timestamp: str

    @property
    def n_trades(self) -> int:
        return sum(len(t) for t in self.trades.values())


class ExchangeSimulation:
    """Single-participant exchange advanced one discrete time step at a time.

    Each step matches every known product at the current timestamp, settles
    the participant's trades in emission order, and moves the clock on.
    """

    def __init__(
        self, config: ExchangeConfig | None = None, book: OrderBook | None = None
    ) -> None:
        self.config = config or ExchangeConfig()
        source = "the supplied book"
        if book is None:
            source = self.config.seed_csv or "mock data"
            seed = (
                load_csv(self.config.seed_csv)
                if self.config.seed_csv is not None
                else mock_orders()
            )
            book = OrderBook(seed)
        if len(book) == 0:
            raise EmptyBookError(source)
        self.book = book
        self.wallet = Wallet(self.config.initial_balances)
        self.policy = SettlementPolicy()
        self.engine = MatchingEngine(
            self.book, self.config.participant, log_limit=self.config.history_limit
        )
        self.clock = SimulationClock(self.book)
        self.history: deque[StepReport] = deque(maxlen=self.config.history_limit)

    @property
    def current_time(self) -> str:
        return self.clock.current

    @property
    def participant(self) -> str:
        return self.config.participant

    def submit_order(
        self, order_type: OrderType, product: str, price: float, amount: float
    ) -> OrderRecord:
        """Admit a participant order at the current time.

        Raises ValueError for a non-positive price or amount,
        MalformedProductError for a bad product and InsufficientFundsError
        when the wallet cannot cover it; in every case nothing is inserted.
        """
        if order_type not in (OrderType.ASK, OrderType.BID):
            raise ValueError(f"participants can only submit bids and asks, not {order_type.name}")
        for name, value in (("price", price), ("amount", amount)):
            if not (math.isfinite(value) and value > 0):
                raise ValueError(f"{name} must be positive and finite, got {value}")
        split_product(product)
        order = OrderRecord(
            price=price,
            amount=amount,
            timestamp=self.clock.current,
            product=product,
            order_type=order_type,
            owner=self.participant,
        )
        if not self.policy.can_fulfill_order(self.wallet, order):
            currency, required = self.policy.required_funds(order)
            logger.warning(
                "rejected %s %s %s @ %s: insufficient %s",
                order_type.name, product, amount, price, currency,
            )
            raise InsufficientFundsError(currency, required, self.wallet.balance(currency))
        self.book.insert(order)
        logger.info("admitted %s %s %s @ %s", order_type.name, product, amount, price)
        return order

    def submit_line(self, order_type: OrderType, line: str) -> OrderRecord | ParseError:
        """Parse a "product,price,amount" line and submit it.

        Parse failures are returned, funding failures raise as in submit_order.
        """
        parsed = parse_order_line(line)
        if isinstance(parsed, ParseError):
            logger.warning("bad order line %r: %s", line, parsed.reason)
            return parsed
        return self.submit_order(order_type, parsed.product, parsed.price, parsed.amount)

    def step(self) -> StepReport:
        """Match all products at the current time, settle, and advance."""
        timestamp = self.clock.current
        trades: dict[str, list[OrderRecord]] = {}
        settled: list[OrderRecord] = []
        unsettled: list[OrderRecord] = []

        for product in self.book.known_products():
            product_trades = self.engine.match(product, timestamp)
            trades[product] = product_trades
            for trade in product_trades:
                if trade.owner != self.participant:
                    continue
                try:
                    self.policy.settle(self.wallet, trade)
                except InsufficientFundsError as e:
                    logger.warning("could not settle %s trade: %s", product, e)
                    unsettled.append(trade)
                    continue
                settled.append(trade)

        next_timestamp = self.clock.advance()
        report = StepReport(
            timestamp=timestamp,
            trades=trades,
            settled=settled,
            unsettled=unsettled,
            balances=self.wallet.balances(),
            next_timestamp=next_timestamp,
        )
        self.history.append(report)
        logger.info(
            "step %s: %d trades, %d settled, next %s",
            timestamp, report.n_trades, len(settled), next_timestamp,
        )
        return report

    def run(self, n_steps: int) -> list[StepReport]:
        return [self.step() for _ in range(n_steps)]

    def market_stats(self) -> list[ProductStats]:
        stats = []
        for product in self.book.known_products():
            asks = self.book.orders_for(OrderType.ASK, product, self.clock.current)
            bids = self.book.orders_for(OrderType.BID, product, self.clock.current)
            stats.append(
                ProductStats(
                    product=product,
                    n_asks=len(asks),
                    n_bids=len(bids),
                    high_ask=OrderBook.high_price(asks) if asks else None,
                    low_ask=OrderBook.low_price(asks) if asks else None,
                    high_bid=OrderBook.high_price(bids) if bids else None,
                    low_bid=OrderBook.low_price(bids) if bids else None,
                )
            )
        return stats

    def wallet_snapshot(self) -> dict[str, float]:
        return self.wallet.balances()
