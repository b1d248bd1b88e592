"""Structured outcome of a buy or sell request.

Declines are ordinary results, not exceptions: the caller decides how to
present them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from src.models.transaction import Transaction


class DeclineReason(str, Enum):
    INSUFFICIENT_BALANCE = "insufficient balance"
    INSUFFICIENT_SHARES = "insufficient shares"
    INVALID_INPUT = "invalid input"
    QUOTE_NOT_FOUND = "quote not found"


@dataclass(frozen=True)
class TradeResult:
    success: bool
    reason: Optional[DeclineReason] = None
    message: str = ""
    transaction: Optional[Transaction] = None

    @classmethod
    def accepted(cls, transaction: Transaction) -> "TradeResult":
        return cls(success=True, message=transaction.describe(), transaction=transaction)

    @classmethod
    def declined(cls, reason: DeclineReason, message: str = "") -> "TradeResult":
        return cls(success=False, reason=reason, message=message or reason.value)

    def __bool__(self):
        return self.success
