"""Main simulation entry point.

Without --steps, runs the interactive trading menu. With --steps, replays
the order book for that many time steps, prints session metrics and
writes plots.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from merkelrex.engine.errors import (
    ExchangeError,
    InsufficientFundsError,
    MalformedProductError,
)
from merkelrex.engine.orderbook import OrderBook
from merkelrex.engine.orders import OrderType
from merkelrex.evaluation.metrics import compute_session_metrics
from merkelrex.evaluation.visualization import plot_balances, plot_trade_prices
from merkelrex.simulation.exchange import ExchangeConfig, ExchangeSimulation
from merkelrex.simulation.input_parser import ParseError
from merkelrex.simulation.seed_data import SeedConfig, SeedGenerator

MENU = """
========================================
MERKEL REX TRADING PLATFORM
Current Time: {time}
========================================
1: Print help
2: Print exchange stats
3: Make an offer (Sell)
4: Make a bid (Buy)
5: Print wallet
6: Continue (Next Time Step)
0: Quit
========================================"""


def print_stats(sim: ExchangeSimulation) -> None:
    for s in sim.market_stats():
        print(f"Product: {s.product}")
        if s.n_asks:
            print(f"  Asks seen: {s.n_asks}")
            print(f"  Max ask: {s.high_ask}")
            print(f"  Min ask: {s.low_ask}")
        else:
            print("  No Asks")


def enter_order(sim: ExchangeSimulation, order_type: OrderType) -> None:
    verb = "an ask" if order_type == OrderType.ASK else "a bid"
    print(f"Make {verb} - enter: product,price,amount, eg ETH/BTC,200,0.5")
    line = input("> ")
    try:
        result = sim.submit_line(order_type, line)
    except (InsufficientFundsError, MalformedProductError) as e:
        print(f"Rejected: {e}")
        return
    if isinstance(result, ParseError):
        print(f"Bad input! {result.reason}")
    else:
        print("Wallet looks good.")


def next_step(sim: ExchangeSimulation) -> None:
    print("Going to next time frame...")
    report = sim.step()
    for product, trades in report.trades.items():
        print(f"Matching {product}")
        print(f"Sales: {len(trades)}")
        for t in trades:
            print(f"Sale price: {t.price} amount {t.amount}")


def interactive(sim: ExchangeSimulation) -> None:
    while True:
        print(MENU.format(time=sim.current_time))
        choice = input("Type in 0-6: ").strip()
        if choice == "0":
            return
        elif choice == "1":
            print("Help - Your aim is to make money. Analyze the market and trade.")
        elif choice == "2":
            print_stats(sim)
        elif choice == "3":
            enter_order(sim, OrderType.ASK)
        elif choice == "4":
            enter_order(sim, OrderType.BID)
        elif choice == "5":
            print(sim.wallet)
        elif choice == "6":
            next_step(sim)
        else:
            print("Invalid choice.")


def batch(sim: ExchangeSimulation, n_steps: int, output_dir: Path) -> None:
    initial = sim.wallet_snapshot()
    history = sim.run(n_steps)
    metrics = compute_session_metrics(history, initial)

    print("\n" + "=" * 60)
    print("SESSION RESULTS")
    print("=" * 60)
    print(f"Steps: {metrics.n_steps}   Trades: {metrics.total_trades}")
    for m in metrics.products.values():
        vwap = f"{m.vwap:.4f}" if m.vwap is not None else "-"
        print(f"  {m.product:<10} trades={m.n_trades:<5} volume={m.volume:.4f} vwap={vwap}")
    print("Participant balance change:")
    for currency, delta in metrics.balance_change.items():
        print(f"  {currency:<6} {delta:+.6f}")

    output_dir.mkdir(parents=True, exist_ok=True)
    plot_trade_prices(history, output_dir / "trade_prices.png")
    plot_balances(history, output_dir / "balances.png")
    print(f"\nPlots saved to {output_dir}/")


def main():
    parser = argparse.ArgumentParser(description="Run the exchange simulator")
    parser.add_argument("--csv", type=str, default=None, help="Order book CSV file")
    parser.add_argument("--synthetic", action="store_true", help="Generate a synthetic book")
    parser.add_argument("--timestamps", type=int, default=20)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--steps", type=int, default=None)
    parser.add_argument("--output", type=str, default="results")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    config = ExchangeConfig(seed_csv=args.csv)
    book = None
    if args.synthetic:
        generator = SeedGenerator(SeedConfig(n_timestamps=args.timestamps, seed=args.seed))
        book = OrderBook(generator.generate())
    try:
        sim = ExchangeSimulation(config, book=book)
    except (ExchangeError, OSError) as e:
        print(f"Cannot start simulation: {e}", file=sys.stderr)
        sys.exit(1)

    if args.steps is None:
        interactive(sim)
    else:
        batch(sim, args.steps, Path(args.output))


if __name__ == "__main__":
    main()
