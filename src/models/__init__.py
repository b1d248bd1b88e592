"""Domain model classes for the trade ledger.

Models are plain in-memory objects; persistence works on snapshots.
"""

from src.models.account import Account
from src.models.ledger import Ledger
from src.models.quote import Quote
from src.models.snapshot import AccountSnapshot, SnapshotError
from src.models.trade_result import DeclineReason, TradeResult
from src.models.transaction import TradeSide, Transaction

__all__ = [
    "Account",
    "AccountSnapshot",
    "DeclineReason",
    "Ledger",
    "Quote",
    "SnapshotError",
    "TradeResult",
    "TradeSide",
    "Transaction",
]
