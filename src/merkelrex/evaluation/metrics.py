"""Session metrics computed from the step history of a simulation run."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from ..simulation.exchange import StepReport


@dataclass
class ProductMetrics:
    """Trading activity for one product over a session."""

    product: str
    n_trades: int
    volume: float  # base currency traded
    turnover: float  # quote currency traded
    vwap: float | None  # None when nothing traded
    high: float | None
    low: float | None


@dataclass
class SessionMetrics:
    """Complete evaluation of a simulation run."""

    n_steps: int
    total_trades: int
    participant_trades: int
    unsettled_trades: int
    products: dict[str, ProductMetrics]
    balance_change: dict[str, float]  # final - initial, per currency


def compute_session_metrics(
    history: list[StepReport], initial_balances: dict[str, float]
) -> SessionMetrics:
    """Compute session metrics from the recorded steps."""
    prices: dict[str, list[float]] = {}
    amounts: dict[str, list[float]] = {}
    for report in history:
        for product, trades in report.trades.items():
            prices.setdefault(product, []).extend(t.price for t in trades)
            amounts.setdefault(product, []).extend(t.amount for t in trades)

    products = {}
    for product in sorted(prices):
        p = np.asarray(prices[product], dtype=float)
        a = np.asarray(amounts[product], dtype=float)
        volume = float(np.sum(a))
        turnover = float(np.dot(p, a))
        products[product] = ProductMetrics(
            product=product,
            n_trades=len(p),
            volume=volume,
            turnover=turnover,
            vwap=turnover / volume if volume > 0 else None,
            high=float(np.max(p)) if len(p) else None,
            low=float(np.min(p)) if len(p) else None,
        )

    final = history[-1].balances if history else dict(initial_balances)
    currencies = sorted(set(final) | set(initial_balances))
    balance_change = {
        c: final.get(c, 0.0) - initial_balances.get(c, 0.0) for c in currencies
    }

    return SessionMetrics(
        n_steps=len(history),
        total_trades=sum(m.n_trades for m in products.values()),
        participant_trades=sum(len(r.settled) for r in history),
        unsettled_trades=sum(len(r.unsettled) for r in history),
        products=products,
        balance_change=balance_change,
    )


def balance_series(history: list[StepReport], currency: str) -> np.ndarray:
    """Balance of `currency` after each step (0 where the currency is absent)."""
    return np.array([r.balances.get(currency, 0.0) for r in history], dtype=float)
