"""Tests for session metrics and plots."""

import numpy as np
import pytest

from merkelrex.engine.orders import OrderType
from merkelrex.evaluation.metrics import balance_series, compute_session_metrics
from merkelrex.evaluation.visualization import plot_balances, plot_trade_prices
from merkelrex.simulation.exchange import ExchangeSimulation


def _run_session():
    sim = ExchangeSimulation()
    initial = sim.wallet_snapshot()
    sim.submit_order(OrderType.ASK, "BTC/USDT", 9000, 2.0)
    history = sim.run(3)
    return history, initial


class TestMetrics:
    def test_compute_session_metrics(self):
        history, initial = _run_session()
        metrics = compute_session_metrics(history, initial)

        assert metrics.n_steps == 3
        assert metrics.total_trades == 2
        assert metrics.participant_trades == 2
        assert metrics.unsettled_trades == 0

        btc = metrics.products["BTC/USDT"]
        assert btc.n_trades == 2
        assert btc.volume == pytest.approx(1.5)
        assert btc.vwap == pytest.approx(9000)
        assert btc.high == btc.low == 9000
        assert metrics.balance_change["BTC"] == pytest.approx(-1.5)
        assert metrics.balance_change["USDT"] == pytest.approx(13500)

    def test_products_without_trades(self):
        history, initial = _run_session()
        eth = compute_session_metrics(history, initial).products["ETH/USDT"]
        assert eth.n_trades == 0
        assert eth.vwap is None
        assert eth.high is None

    def test_empty_history(self):
        metrics = compute_session_metrics([], {"BTC": 1.0})
        assert metrics.n_steps == 0
        assert metrics.products == {}
        assert metrics.balance_change == {"BTC": 0.0}

    def test_balance_series(self):
        history, _ = _run_session()
        series = balance_series(history, "BTC")
        assert isinstance(series, np.ndarray)
        assert series == pytest.approx([8.5, 8.5, 8.5])
        assert np.all(balance_series(history, "XRP") == 0)


class TestVisualization:
    def test_plots_written(self, tmp_path):
        history, _ = _run_session()
        plot_trade_prices(history, tmp_path / "prices.png")
        plot_balances(history, tmp_path / "balances.png")
        assert (tmp_path / "prices.png").stat().st_size > 0
        assert (tmp_path / "balances.png").stat().st_size > 0
