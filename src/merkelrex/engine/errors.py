"""Exception taxonomy for the exchange core."""

from __future__ import annotations


class ExchangeError(Exception):
    """Base class for all exchange errors."""


class EmptyInputError(ExchangeError):
    """A statistic was requested over an empty set of records."""

    def __init__(self, what: str = "records") -> None:
        super().__init__(f"cannot compute over empty {what}")


class InsufficientFundsError(ExchangeError):
    """The wallet cannot cover an order or a settlement posting."""

    def __init__(self, currency: str, required: float, available: float) -> None:
        self.currency = currency
        self.required = required
        self.available = available
        super().__init__(
            f"insufficient {currency}: required {required}, available {available}"
        )


class NegativeAmountError(ExchangeError):
    """A credit or debit was requested with a negative magnitude."""

    def __init__(self, amount: float) -> None:
        self.amount = amount
        super().__init__(f"amount must be non-negative, got {amount}")


class MalformedProductError(ExchangeError):
    """A product string is not of the form BASE/QUOTE."""

    def __init__(self, product: str) -> None:
        self.product = product
        super().__init__(f"malformed product {product!r}, expected BASE/QUOTE")


class EmptyBookError(ExchangeError):
    """The simulation was started with no resting orders to replay."""

    def __init__(self, source: str) -> None:
        self.source = source
        super().__init__(f"no resting orders loaded from {source}")
