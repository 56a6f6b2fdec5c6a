"""Plots of a simulation run."""

from __future__ import annotations

from pathlib import Path

import matplotlib

matplotlib.use("Agg")  # non-interactive backend
import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns

from ..simulation.exchange import StepReport
from .metrics import balance_series


def set_style():
    """Set publication-quality plot style."""
    sns.set_theme(style="whitegrid", font_scale=1.1)
    plt.rcParams["figure.figsize"] = (10, 6)
    plt.rcParams["figure.dpi"] = 150
    plt.rcParams["savefig.bbox"] = "tight"


def plot_trade_prices(
    history: list[StepReport],
    output_path: str | Path = "results/trade_prices.png",
) -> None:
    """Scatter of trade prices per step, one panel per product."""
    set_style()
    products = sorted({p for r in history for p in r.trades})
    fig, axes = plt.subplots(len(products) or 1, 1, squeeze=False, sharex=True)
    palette = sns.color_palette(n_colors=max(len(products), 1))

    for ax, product, color in zip(axes[:, 0], products, palette):
        steps, prices, sizes = [], [], []
        for i, report in enumerate(history):
            for trade in report.trades.get(product, []):
                steps.append(i)
                prices.append(trade.price)
                sizes.append(trade.amount)
        if sizes:
            area = 20 + 80 * np.asarray(sizes) / max(sizes)
        else:
            area = []
        ax.scatter(steps, prices, s=area, color=color, alpha=0.7, edgecolor="white")
        ax.set_ylabel(product)

    axes[-1, 0].set_xlabel("Time Step")
    fig.suptitle("Trade Prices")
    plt.savefig(output_path)
    plt.close()


def plot_balances(
    history: list[StepReport],
    output_path: str | Path = "results/balances.png",
) -> None:
    """Participant balance per currency after each step."""
    set_style()
    currencies = sorted({c for r in history for c in r.balances})
    fig, axes = plt.subplots(1, len(currencies) or 1, squeeze=False, figsize=(12, 4))

    steps = np.arange(len(history))
    for ax, currency in zip(axes[0], currencies):
        ax.step(steps, balance_series(history, currency), where="post", linewidth=1.5)
        ax.set_title(currency, fontsize=10, fontweight="bold")
        ax.set_xlabel("Time Step")

    fig.suptitle("Wallet Balances", fontsize=12, fontweight="bold")
    plt.tight_layout()
    plt.savefig(output_path)
    plt.close()
