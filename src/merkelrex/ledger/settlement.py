"""Funds checks and trade settlement on top of the wallet's public API."""

from __future__ import annotations

import logging

from ..engine.errors import InsufficientFundsError
from ..engine.orders import OrderRecord, OrderType, split_product
from .wallet import Wallet

logger = logging.getLogger(__name__)


class SettlementPolicy:
    """Stateless rules linking orders and trades to wallet postings.

    Uses only Wallet.credit / debit / has_funds, so any wallet honouring that
    contract can be settled against.
    """

    @staticmethod
    def required_funds(order: OrderRecord) -> tuple[str, float]:
        """Currency and amount the participant must hold to place `order`.

        An ask gives up the base currency; a bid pays in the quote currency.
        """
        base, quote = split_product(order.product)
        if order.order_type == OrderType.ASK:
            return base, order.amount
        if order.order_type == OrderType.BID:
            return quote, order.amount * order.price
        raise ValueError(f"no funding rule for {order.order_type.name}")

    def can_fulfill_order(self, wallet: Wallet, order: OrderRecord) -> bool:
        if order.order_type not in (OrderType.ASK, OrderType.BID):
            return False
        currency, amount = self.required_funds(order)
        return wallet.has_funds(currency, amount)

    def settle(self, wallet: Wallet, trade: OrderRecord) -> None:
        """Apply a participant trade to the wallet.

        ASK_TRADE: base goes out, quote proceeds come in.
        BID_TRADE: base comes in, quote is paid out.

        The outgoing leg is checked before either leg is posted, so a trade
        that the wallet can no longer cover raises InsufficientFundsError and
        leaves every balance untouched.
        """
        base, quote = split_product(trade.product)
        if trade.order_type == OrderType.ASK_TRADE:
            outgoing, out_amount = base, trade.amount
            incoming, in_amount = quote, trade.amount * trade.price
        elif trade.order_type == OrderType.BID_TRADE:
            outgoing, out_amount = quote, trade.amount * trade.price
            incoming, in_amount = base, trade.amount
        else:
            raise ValueError(f"cannot settle a {trade.order_type.name} record")

        if not wallet.debit(outgoing, out_amount):
            raise InsufficientFundsError(
                outgoing, out_amount, wallet.balance(outgoing)
            )
        wallet.credit(incoming, in_amount)
        logger.info(
            "settled %s %s: -%s %s, +%s %s",
            trade.order_type.name, trade.product,
            out_amount, outgoing, in_amount, incoming,
        )
