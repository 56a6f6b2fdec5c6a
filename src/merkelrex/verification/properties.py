"""Formal verification of matching and settlement invariants using Z3.

Each check asserts the negation of a property over symbolic reals and asks
the solver for a model. `unsat` means no input can break the property.
"""

from __future__ import annotations

import time
from dataclasses import dataclass

from z3 import (
    And,
    Bool,
    If,
    Int,
    IntVal,
    Not,
    Or,
    Real,
    Solver,
    sat,
    unsat,
)

# Integer tags for trade kinds inside the solver.
ASK_TRADE = 0
BID_TRADE = 1

# Checks grouped by the part of the exchange they cover.
AREAS: dict[str, tuple[str, ...]] = {
    "matching": ("verify_match_conservation", "verify_trade_within_limits"),
    "ledger": ("verify_debit_non_negative", "verify_settlement_value_preserved"),
    "attribution": ("verify_ask_attribution_wins",),
}


@dataclass
class VerificationResult:
    """Result of a formal verification check."""

    property_name: str
    holds: bool
    counterexample: dict | None = None
    solver_time_ms: float = 0.0
    description: str = ""


def _solve(solver: Solver, name: str, proved: str) -> VerificationResult:
    start = time.time()
    result = solver.check()
    elapsed = (time.time() - start) * 1000

    if result == unsat:
        return VerificationResult(
            property_name=name,
            holds=True,
            solver_time_ms=elapsed,
            description=f"Proved: {proved}",
        )
    if result == sat:
        model = solver.model()
        return VerificationResult(
            property_name=name,
            holds=False,
            counterexample={str(d): str(model[d]) for d in model.decls()},
            solver_time_ms=elapsed,
            description=f"COUNTEREXAMPLE FOUND for {name}.",
        )
    return VerificationResult(
        property_name=name,
        holds=False,
        solver_time_ms=elapsed,
        description="Solver returned unknown.",
    )


class ExchangeVerifier:
    """Formally verify properties of the matching pass and the wallet.

    The matching arms, the guarded debit and the settlement postings are
    modelled exactly as the engine applies them to one ask/bid pair.
    """

    def verify_match_conservation(self) -> VerificationResult:
        """Prove: one ask/bid crossing never creates or destroys quantity.

        For every arm the traded amount equals what left the ask and what
        left the bid, it never exceeds either side, and both remainders
        stay non-negative.
        """
        solver = Solver()

        ask = Real("ask_amount")
        bid = Real("bid_amount")
        solver.add(ask > 0)
        solver.add(bid >= 0)

        # Arms in the order the engine tests them.
        equal = bid == ask
        bid_larger = bid > ask
        bid_smaller = And(bid > 0, bid < ask)

        traded = If(equal, ask, If(bid_larger, ask, If(bid_smaller, bid, 0)))
        new_ask = If(Or(equal, bid_larger), 0, If(bid_smaller, ask - bid, ask))
        new_bid = If(equal, 0, If(bid_larger, bid - ask, If(bid_smaller, 0, bid)))

        solver.add(
            Or(
                new_ask < 0,
                new_bid < 0,
                traded < 0,
                traded > ask,
                traded > bid,
                ask - new_ask != traded,
                bid - new_bid != traded,
            )
        )
        return _solve(
            solver,
            "match_conservation",
            "every matching arm conserves quantity and keeps amounts non-negative.",
        )

    def verify_trade_within_limits(self) -> VerificationResult:
        """Prove: a trade never executes outside either side's limit price.

        Trades execute at the ask price and only when bid >= ask, so the
        buyer never pays above its bid and the seller never gets below its ask.
        """
        solver = Solver()

        ask_price = Real("ask_price")
        bid_price = Real("bid_price")
        solver.add(ask_price > 0)
        solver.add(bid_price > 0)

        crosses = bid_price >= ask_price
        trade_price = ask_price

        solver.add(crosses)
        solver.add(Or(trade_price > bid_price, trade_price < ask_price))
        return _solve(
            solver,
            "trade_within_limits",
            "trade price always lies within [ask limit, bid limit].",
        )

    def verify_debit_non_negative(self) -> VerificationResult:
        """Prove: a guarded debit never drives a balance below zero."""
        solver = Solver()

        balance = Real("balance")
        amount = Real("amount")
        solver.add(balance >= 0)

        accepted = And(amount >= 0, balance >= amount)
        new_balance = If(accepted, balance - amount, balance)

        solver.add(Or(new_balance < 0, And(Not(accepted), new_balance != balance)))
        return _solve(
            solver,
            "debit_non_negative",
            "debits never overdraw and refused debits leave the balance unchanged.",
        )

    def verify_settlement_value_preserved(self) -> VerificationResult:
        """Prove: settling a trade preserves wallet value at the trade price.

        ASK_TRADE moves q base out and q*p quote in; BID_TRADE the reverse.
        Valued at p, base*p + quote is unchanged either way.
        """
        solver = Solver()

        base = Real("base")
        quote = Real("quote")
        price = Real("price")
        qty = Real("qty")
        is_ask = Bool("is_ask_trade")
        solver.add(base >= 0, quote >= 0, price > 0, qty > 0)

        new_base = If(is_ask, base - qty, base + qty)
        new_quote = If(is_ask, quote + qty * price, quote - qty * price)

        solver.add(new_base * price + new_quote != base * price + quote)
        return _solve(
            solver,
            "settlement_value_preserved",
            "settlement moves value between currencies without creating any.",
        )

    def verify_ask_attribution_wins(self) -> VerificationResult:
        """Prove: a trade touching the participant's ask is always an ASK_TRADE,
        and one touching only the participant's bid is a BID_TRADE."""
        solver = Solver()

        bid_is_participant = Bool("bid_is_participant")
        ask_is_participant = Bool("ask_is_participant")

        kind = Int("kind")
        after_bid = If(bid_is_participant, IntVal(BID_TRADE), IntVal(ASK_TRADE))
        solver.add(kind == If(ask_is_participant, IntVal(ASK_TRADE), after_bid))

        solver.add(
            Or(
                And(ask_is_participant, kind != ASK_TRADE),
                And(bid_is_participant, Not(ask_is_participant), kind != BID_TRADE),
            )
        )
        return _solve(
            solver,
            "ask_attribution_wins",
            "the participant's ask attribution overrides its bid attribution.",
        )

    def verify_area(self, area: str) -> list[VerificationResult]:
        """Run the checks of one area ("matching", "ledger" or "attribution")."""
        if area not in AREAS:
            raise ValueError(f"unknown verification area {area!r}")
        return [getattr(self, name)() for name in AREAS[area]]

    def verify_by_area(self) -> dict[str, list[VerificationResult]]:
        return {area: self.verify_area(area) for area in AREAS}

    def verify_all(self) -> list[VerificationResult]:
        """Run all verification checks."""
        return [r for results in self.verify_by_area().values() for r in results]
