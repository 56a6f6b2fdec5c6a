"""Multi-currency wallet with guarded debits."""

from __future__ import annotations

from ..engine.errors import NegativeAmountError


class Wallet:
    """Per-currency balances that never go negative.

    Debits are checked before the balance is touched; a refused debit leaves
    the wallet unchanged.
    """

    def __init__(self, balances: dict[str, float] | None = None) -> None:
        self._currencies: dict[str, float] = {}
        for currency, amount in (balances or {}).items():
            self.credit(currency, amount)

    def credit(self, currency: str, amount: float) -> None:
        """Add `amount` to `currency`, creating the entry at zero if absent."""
        if amount < 0:
            raise NegativeAmountError(amount)
        self._currencies[currency] = self._currencies.get(currency, 0.0) + amount

    def debit(self, currency: str, amount: float) -> bool:
        """Remove `amount` from `currency`. Returns False and changes nothing
        if the amount is negative, the currency is unknown or funds are short."""
        if amount < 0:
            return False
        if not self.has_funds(currency, amount):
            return False
        self._currencies[currency] -= amount
        return True

    def has_funds(self, currency: str, amount: float) -> bool:
        if currency not in self._currencies:
            return False
        return self._currencies[currency] >= amount

    def balance(self, currency: str) -> float:
        return self._currencies.get(currency, 0.0)

    def balances(self) -> dict[str, float]:
        """Snapshot of all balances, keyed in currency order."""
        return {c: self._currencies[c] for c in sorted(self._currencies)}

    def __str__(self) -> str:
        return "".join(f"{c} : {a:f}\n" for c, a in self.balances().items())
