"""Quote model

A Quote is a symbol's current tradable price, supplied by a quote source.

Attributes:
- symbol: Upper-case ticker symbol (lookups are case-insensitive)
- name: Display name of the instrument
- price: Current price, never negative
"""

import math
from dataclasses import dataclass, replace


def normalize_symbol(symbol: str) -> str:
    """Canonical form used for every symbol key (stripped, upper case)."""
    return symbol.strip().upper()


@dataclass(frozen=True)
class Quote:
    symbol: str
    name: str
    price: float

    def __post_init__(self):
        if not isinstance(self.symbol, str) or not self.symbol.strip():
            raise ValueError("symbol is required for Quote")
        if isinstance(self.price, bool) or not isinstance(self.price, (int, float)):
            raise ValueError(f"price must be a number, got {self.price!r}")
        if not math.isfinite(self.price):
            raise ValueError(f"price must be finite, got {self.price}")
        if self.price < 0:
            raise ValueError(f"price must be non-negative, got {self.price}")

        object.__setattr__(self, "symbol", normalize_symbol(self.symbol))
        object.__setattr__(self, "price", float(self.price))

    def with_price(self, price: float) -> "Quote":
        """Return a copy of this quote at a new price."""
        return replace(self, price=price)

    def __str__(self):
        return f"{self.symbol} ({self.name}) - ${self.price:.2f}"
