"""Account snapshots.

Plain data structure describing an account's full state (balance,
holdings, transaction log). Persistence layers read and write snapshots
instead of live Account objects, so the storage layout is independent of
the in-memory representation.
"""

import math
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from src.models.quote import normalize_symbol
from src.models.transaction import TradeSide, Transaction


class SnapshotError(Exception):
    """Raised when a snapshot is malformed or internally inconsistent."""

    pass


def _parse_timestamp(value: str) -> datetime:
    """Parse an ISO timestamp, reading naive values as UTC."""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class AccountSnapshot:
    account_id: str
    balance: float
    holdings: tuple[tuple[str, int], ...] = field(default_factory=tuple)
    transactions: tuple[Transaction, ...] = field(default_factory=tuple)

    def validate(self) -> None:
        """Check the snapshot describes a reachable account state.

        Raises:
            SnapshotError: If any check fails (all problems are reported)
        """
        errors = []

        if not self.account_id:
            errors.append("account_id is required")

        if self.balance < 0:
            errors.append(f"balance must be non-negative, got {self.balance}")

        seen = set()
        for symbol, quantity in self.holdings:
            if symbol in seen:
                errors.append(f"duplicate holding for {symbol}")
            seen.add(symbol)
            if isinstance(quantity, bool) or not isinstance(quantity, int):
                errors.append(f"holding {symbol} has non-integer quantity {quantity!r}")
            elif quantity <= 0:
                errors.append(f"holding {symbol} has non-positive quantity {quantity}")

        # Net traded quantity per symbol must match the holdings
        net: dict[str, int] = defaultdict(int)
        previous = None
        for seq, tx in enumerate(self.transactions):
            if isinstance(tx.quantity, bool) or not isinstance(tx.quantity, int):
                errors.append(f"transaction {seq} has non-integer quantity {tx.quantity!r}")
            elif tx.quantity <= 0:
                errors.append(f"transaction {seq} has non-positive quantity {tx.quantity}")
            else:
                net[tx.symbol] += tx.signed_quantity

            if isinstance(tx.price, bool) or not isinstance(tx.price, (int, float)):
                errors.append(f"transaction {seq} has non-numeric price {tx.price!r}")
            elif not math.isfinite(tx.price) or tx.price < 0:
                errors.append(f"transaction {seq} has invalid price {tx.price}")

            if tx.executed_at.tzinfo is None:
                errors.append(f"transaction {seq} has a timestamp without timezone")
                continue
            if previous is not None and tx.executed_at < previous:
                errors.append(f"transaction log out of order at {tx.executed_at}")
            previous = tx.executed_at

        held = dict(self.holdings)
        for symbol in set(net) | set(held):
            if net.get(symbol, 0) != held.get(symbol, 0):
                errors.append(
                    f"holding {symbol}={held.get(symbol, 0)} does not match "
                    f"net traded quantity {net.get(symbol, 0)}"
                )

        if errors:
            raise SnapshotError(f"Invalid snapshot: {', '.join(errors)}")

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible primitives."""
        return {
            "account_id": self.account_id,
            "balance": self.balance,
            "holdings": [
                {"symbol": symbol, "quantity": quantity}
                for symbol, quantity in self.holdings
            ],
            "transactions": [
                {
                    "symbol": tx.symbol,
                    "side": tx.side.value,
                    "quantity": tx.quantity,
                    "price": tx.price,
                    "executed_at": tx.executed_at.isoformat(),
                }
                for tx in self.transactions
            ],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AccountSnapshot":
        """Build and validate a snapshot from ``to_dict`` output.

        Raises:
            SnapshotError: If required keys are missing, values cannot be
                parsed, or the resulting state is inconsistent
        """
        try:
            snapshot = cls(
                account_id=data["account_id"],
                balance=float(data["balance"]),
                holdings=tuple(
                    (normalize_symbol(h["symbol"]), h["quantity"])
                    for h in data.get("holdings", [])
                ),
                transactions=tuple(
                    Transaction(
                        symbol=normalize_symbol(t["symbol"]),
                        side=TradeSide(t["side"]),
                        quantity=int(t["quantity"]),
                        price=float(t["price"]),
                        executed_at=_parse_timestamp(t["executed_at"]),
                    )
                    for t in data.get("transactions", [])
                ),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise SnapshotError(f"Malformed snapshot: {e}") from e

        snapshot.validate()
        return snapshot
