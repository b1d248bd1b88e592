"""Transaction model

An immutable record of one executed trade. Transactions are created by
Account at execution time and never changed afterwards.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class TradeSide(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


@dataclass(frozen=True)
class Transaction:
    symbol: str
    side: TradeSide
    quantity: int
    price: float
    executed_at: datetime

    @property
    def signed_quantity(self) -> int:
        """Positive for buys, negative for sells."""
        return self.quantity if self.side is TradeSide.BUY else -self.quantity

    @property
    def amount(self) -> float:
        return self.price * self.quantity

    def describe(self) -> str:
        return (
            f"{self.side.value} {self.quantity} shares of {self.symbol} "
            f"at ${self.price:.2f} on {self.executed_at.isoformat()}"
        )
