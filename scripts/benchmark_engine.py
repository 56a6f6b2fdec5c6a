"""Benchmark matching passes over a synthetic order book."""

import time

from merkelrex.engine.matching import MatchingEngine
from merkelrex.engine.orderbook import OrderBook
from merkelrex.simulation.seed_data import SeedConfig, SeedGenerator


def main():
    n_timestamps = 2_000
    config = SeedConfig(n_timestamps=n_timestamps, arrival_rate=20.0, seed=42)
    book = OrderBook(SeedGenerator(config).generate())
    engine = MatchingEngine(book, participant="bench")

    print(f"Benchmarking matching over {len(book):,} resting orders...")

    products = book.known_products()
    timestamps = book.timestamps()

    start = time.perf_counter()

    for timestamp in timestamps:
        for product in products:
            engine.match(product, timestamp)

    elapsed = time.perf_counter() - start
    throughput = engine.stats.passes / elapsed

    print(f"\nResults:")
    print(f"  Time: {elapsed:.2f}s")
    print(f"  Throughput: {throughput:,.0f} passes/sec")
    print(f"  Total trades: {engine.stats.total_trades:,}")
    print(f"  Total volume: {engine.stats.total_volume:,.4f}")


if __name__ == "__main__":
    main()
