"""Initial resting orders: static mock data, order book CSV files and synthetic flow."""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path

import numpy as np

from ..engine.errors import MalformedProductError
from ..engine.orders import OrderRecord, OrderType, split_product

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y/%m/%d %H:%M:%S"


def mock_orders() -> list[OrderRecord]:
    """The built-in book used when no data file is given."""
    return [
        OrderRecord(10000, 0.5, "2020/03/17 17:01:24", "BTC/USDT", OrderType.BID),
        OrderRecord(10500, 0.2, "2020/03/17 17:01:24", "BTC/USDT", OrderType.ASK),
        OrderRecord(10100, 1.0, "2020/03/17 17:01:24", "BTC/USDT", OrderType.BID),
        OrderRecord(200, 50, "2020/03/17 17:01:30", "ETH/USDT", OrderType.ASK),
        OrderRecord(190, 10, "2020/03/17 17:01:30", "ETH/USDT", OrderType.BID),
    ]


def parse_csv_row(row: list[str]) -> OrderRecord:
    """Build a record from `timestamp,product,orderType,price,amount`.

    Raises ValueError (or MalformedProductError) on a bad row.
    """
    if len(row) != 5:
        raise ValueError(f"expected 5 fields, got {len(row)}")
    timestamp, product, kind, price, amount = (value.strip() for value in row)
    split_product(product)
    order_type = OrderType.from_string(kind)
    if order_type == OrderType.UNKNOWN:
        raise ValueError(f"unknown order type {kind!r}")
    record = OrderRecord(
        price=float(price),
        amount=float(amount),
        timestamp=timestamp,
        product=product,
        order_type=order_type,
    )
    if record.price <= 0 or record.amount < 0:
        raise ValueError("price must be positive and amount non-negative")
    return record


def load_csv(path: str | Path) -> list[OrderRecord]:
    """Read an order book file. Bad rows are logged and skipped."""
    path = Path(path)
    orders: list[OrderRecord] = []
    skipped = 0
    with path.open(newline="") as fh:
        for lineno, row in enumerate(csv.reader(fh), start=1):
            if not row:
                continue
            try:
                orders.append(parse_csv_row(row))
            except (ValueError, MalformedProductError) as e:
                skipped += 1
                logger.warning("%s:%d: skipping bad row: %s", path.name, lineno, e)
    logger.info("loaded %d orders from %s (%d skipped)", len(orders), path, skipped)
    return orders


@dataclass
class SeedConfig:
    """Configuration for synthetic order book generation."""

    mid_prices: dict[str, float] = field(
        default_factory=lambda: {"BTC/USDT": 10000.0, "ETH/USDT": 200.0}
    )
    n_timestamps: int = 10
    start: str = "2020/03/17 17:01:24"
    interval_seconds: int = 6
    arrival_rate: float = 4.0  # mean resting orders per side per step
    price_spread: float = 0.01  # relative std of limit prices around mid
    volatility: float = 0.005  # relative std of mid moves per step
    min_amount: float = 0.1
    max_amount: float = 2.0
    seed: int | None = None


class SeedGenerator:
    """Generates resting market interest for each product and time step.

    Mid prices follow a multiplicative random walk; limit prices scatter
    around the mid with normal noise, so some steps cross and some don't.
    """

    def __init__(self, config: SeedConfig) -> None:
        self.config = config
        self.rng = np.random.default_rng(config.seed)

    def timestamps(self) -> list[str]:
        cfg = self.config
        start = datetime.strptime(cfg.start, TIMESTAMP_FORMAT)
        return [
            (start + timedelta(seconds=i * cfg.interval_seconds)).strftime(TIMESTAMP_FORMAT)
            for i in range(cfg.n_timestamps)
        ]

    def generate(self) -> list[OrderRecord]:
        cfg = self.config
        mids = dict(cfg.mid_prices)
        orders: list[OrderRecord] = []

        for timestamp in self.timestamps():
            for product in sorted(mids):
                mid = mids[product]
                for order_type in (OrderType.BID, OrderType.ASK):
                    n_orders = self.rng.poisson(cfg.arrival_rate)
                    prices = mid * (1.0 + self.rng.normal(0.0, cfg.price_spread, n_orders))
                    amounts = self.rng.uniform(cfg.min_amount, cfg.max_amount, n_orders)
                    for price, amount in zip(prices, amounts):
                        orders.append(
                            OrderRecord(
                                price=round(float(max(price, 1e-8)), 8),
                                amount=round(float(amount), 8),
                                timestamp=timestamp,
                                product=product,
                                order_type=order_type,
                            )
                        )
                mids[product] = mid * float(np.exp(self.rng.normal(0.0, cfg.volatility)))

        return orders
