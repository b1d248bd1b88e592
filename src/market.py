"""Quote sources.

A quote source maps a symbol to its current Quote. The ledger core only
reads from it; prices change through an injected update function.
"""

import logging
import random
from typing import Callable, Iterable, Optional, Protocol

from src.models.quote import Quote, normalize_symbol

logger = logging.getLogger(__name__)

PriceUpdate = Callable[[Quote], float]


class QuoteSource(Protocol):
    def lookup(self, symbol: str) -> Optional[Quote]: ...


class Market:
    """In-memory quote source.

    Quotes are immutable; price changes swap in a new Quote per symbol, so a
    Quote returned by ``lookup`` is a stable snapshot.
    """

    def __init__(self, quotes: Iterable[Quote] = ()):
        self._quotes: dict[str, Quote] = {}
        for quote in quotes:
            self.add_quote(quote)

    def __len__(self):
        return len(self._quotes)

    def lookup(self, symbol: str) -> Optional[Quote]:
        """Find the current quote for a symbol (case-insensitive).

        Returns:
            Quote or None if the symbol is not listed
        """
        if not symbol or not symbol.strip():
            return None
        return self._quotes.get(normalize_symbol(symbol))

    def quotes(self) -> list[Quote]:
        return [self._quotes[symbol] for symbol in sorted(self._quotes)]

    def list_symbols(self) -> list[str]:
        return sorted(self._quotes)

    def add_quote(self, quote: Quote) -> None:
        """List a quote, replacing any existing quote for the symbol."""
        self._quotes[quote.symbol] = quote

    def set_price(self, symbol: str, price: float) -> Quote:
        """Reprice a listed symbol.

        Raises:
            KeyError: If the symbol is not listed
            ValueError: If price is negative
        """
        key = normalize_symbol(symbol)
        if key not in self._quotes:
            raise KeyError(f"Unknown symbol: {key}")
        quote = self._quotes[key].with_price(price)
        self._quotes[key] = quote
        return quote

    def remove(self, symbol: str) -> Optional[Quote]:
        """Delist a symbol. Returns the removed quote, if any."""
        return self._quotes.pop(normalize_symbol(symbol), None)

    def apply_price_update(self, update: PriceUpdate) -> None:
        """Reprice every listed quote with ``update(quote) -> new price``.

        New prices are computed for all symbols before any is swapped in, so
        a failing update leaves the market unchanged.
        """
        repriced = {
            symbol: quote.with_price(update(quote))
            for symbol, quote in self._quotes.items()
        }
        self._quotes.update(repriced)
        logger.debug(f"Repriced {len(repriced)} quotes")


def random_fluctuation(
    rng: random.Random | None = None, max_change: float = 0.05
) -> PriceUpdate:
    """Build a price update that moves each price by up to ±max_change.

    Args:
        rng: Random source (pass a seeded Random for reproducible prices)
        max_change: Largest fractional move in either direction

    Returns:
        Update function rounding new prices to cents
    """
    rng = rng or random.Random()

    def update(quote: Quote) -> float:
        change = (rng.random() - 0.5) * 2 * max_change
        return round(quote.price * (1 + change), 2)

    return update


def default_market() -> Market:
    return Market(
        [
            Quote("AAPL", "Apple Inc.", 150.00),
            Quote("GOOGL", "Alphabet Inc.", 2800.00),
            Quote("TSLA", "Tesla Inc.", 700.00),
        ]
    )
