"""Ledger model

Mapping of symbol to held share count for a single account.

Invariant: a symbol is stored only while its count is strictly positive.
Removing a holding down to zero deletes the entry.
"""

from typing import Iterator

from src.models.quote import normalize_symbol


def _check_quantity(quantity: int) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValueError(f"quantity must be an integer, got {quantity!r}")
    if quantity <= 0:
        raise ValueError(f"quantity must be positive, got {quantity}")


class Ledger:
    def __init__(self, holdings: dict[str, int] | None = None):
        self._holdings: dict[str, int] = {}
        for symbol, quantity in (holdings or {}).items():
            self.add(symbol, quantity)

    def __repr__(self):
        return f"Ledger({dict(self.items())})"

    def __len__(self):
        return len(self._holdings)

    def __contains__(self, symbol: str):
        return normalize_symbol(symbol) in self._holdings

    def __eq__(self, other):
        if not isinstance(other, Ledger):
            return NotImplemented
        return self._holdings == other._holdings

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._holdings))

    def add(self, symbol: str, quantity: int) -> None:
        """Add shares to a holding, creating it if absent.

        Raises:
            ValueError: If quantity is not a positive integer
        """
        _check_quantity(quantity)
        key = normalize_symbol(symbol)
        self._holdings[key] = self._holdings.get(key, 0) + quantity

    def remove(self, symbol: str, quantity: int) -> bool:
        """Remove shares from a holding.

        Args:
            symbol: Symbol to reduce
            quantity: Number of shares to remove

        Returns:
            True if the shares were removed, False if fewer than
            ``quantity`` shares are held (state is left unchanged)

        Raises:
            ValueError: If quantity is not a positive integer
        """
        _check_quantity(quantity)
        key = normalize_symbol(symbol)
        owned = self._holdings.get(key, 0)

        if quantity > owned:
            return False

        if quantity == owned:
            del self._holdings[key]
        else:
            self._holdings[key] = owned - quantity
        return True

    def quantity_of(self, symbol: str) -> int:
        return self._holdings.get(normalize_symbol(symbol), 0)

    def symbols(self) -> set[str]:
        return set(self._holdings)

    def items(self) -> list[tuple[str, int]]:
        """Holdings as (symbol, quantity) pairs sorted by symbol."""
        return sorted(self._holdings.items())

    def copy(self) -> "Ledger":
        ledger = Ledger()
        ledger._holdings = dict(self._holdings)
        return ledger
