"""Caller-facing trading operations.

The account and quote source are always passed in explicitly.
"""

import logging

from src.market import QuoteSource
from src.models.account import Account
from src.models.trade_result import DeclineReason, TradeResult
from src.models.transaction import Transaction

logger = logging.getLogger(__name__)


def buy(account: Account, symbol: str, quantity: int, price: float) -> TradeResult:
    return account.buy(symbol, quantity, price)


def sell(account: Account, symbol: str, quantity: int, price: float) -> TradeResult:
    return account.sell(symbol, quantity, price)


def history(account: Account) -> tuple[Transaction, ...]:
    """Executed trades, oldest first."""
    return account.history()


def _quote_price(quote_source: QuoteSource, symbol: str) -> float | None:
    quote = quote_source.lookup(symbol)
    if quote is None:
        logger.warning(f"No quote for {symbol!r}, cannot trade")
        return None
    return quote.price


def buy_at_market(
    account: Account, quote_source: QuoteSource, symbol: str, quantity: int
) -> TradeResult:
    """Buy at the current quoted price.

    The quote is read once and that price is used for the whole trade.

    Returns:
        Account.buy result, or a QUOTE_NOT_FOUND decline for unknown symbols
    """
    price = _quote_price(quote_source, symbol)
    if price is None:
        return TradeResult.declined(
            DeclineReason.QUOTE_NOT_FOUND, f"Stock not found: {symbol}"
        )
    return account.buy(symbol, quantity, price)


def sell_at_market(
    account: Account, quote_source: QuoteSource, symbol: str, quantity: int
) -> TradeResult:
    """Sell at the current quoted price (see buy_at_market)."""
    price = _quote_price(quote_source, symbol)
    if price is None:
        return TradeResult.declined(
            DeclineReason.QUOTE_NOT_FOUND, f"Stock not found: {symbol}"
        )
    return account.sell(symbol, quantity, price)


def portfolio_value(account: Account, quote_source: QuoteSource) -> float:
    """Market value of all holdings at current quotes.

    Holdings without a quote (delisted or unknown) contribute 0.
    """
    total = 0.0
    for symbol, quantity in account.ledger.items():
        quote = quote_source.lookup(symbol)
        if quote is None:
            logger.debug(f"No quote for held symbol {symbol}, valued at 0")
            continue
        total += quote.price * quantity
    return total
