"""Parsing of "product,price,amount" order lines typed by the participant."""

from __future__ import annotations

import math
from dataclasses import dataclass

from ..engine.errors import MalformedProductError
from ..engine.orders import split_product


@dataclass(frozen=True, slots=True)
class ParsedOrder:
    """A validated order line."""

    product: str
    price: float
    amount: float


@dataclass(frozen=True, slots=True)
class ParseError:
    """Why an order line was rejected."""

    line: str
    reason: str


def tokenise(line: str, separator: str) -> list[str]:
    """Split `line` on a single-character `separator`.

    Leading separators are skipped and a trailing one is ignored, but an
    empty field in the middle ends the scan:

    ",a,b," -> ["a", "b"]
    "a,,b" -> ["a"]
    """
    tokens: list[str] = []
    start = 0
    while start < len(line) and line[start] == separator:
        start += 1
    while start < len(line):
        end = line.find(separator, start)
        if end == start:
            break
        if end < 0:
            tokens.append(line[start:])
            break
        tokens.append(line[start:end])
        start = end + 1
    return tokens


def parse_order_line(line: str) -> ParsedOrder | ParseError:
    """Parse "ETH/BTC,200,0.5" into a ParsedOrder.

    Returns a ParseError instead of raising, so callers can report the reason
    and re-prompt.
    """
    tokens = tokenise(line.strip(), ",")
    if len(tokens) != 3:
        return ParseError(line, f"expected 3 fields, got {len(tokens)}")

    product = tokens[0].strip()
    try:
        split_product(product)
    except MalformedProductError as e:
        return ParseError(line, str(e))

    try:
        price = float(tokens[1])
        amount = float(tokens[2])
    except ValueError:
        return ParseError(line, "price and amount must be numbers")

    if not (math.isfinite(price) and math.isfinite(amount)):
        return ParseError(line, "price and amount must be finite")
    if price <= 0 or amount <= 0:
        return ParseError(line, "price and amount must be positive")

    return ParsedOrder(product=product, price=price, amount=amount)
