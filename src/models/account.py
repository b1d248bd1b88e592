"""Account model

An Account owns a cash balance, a Ledger of share holdings, and an
append-only transaction log. ``buy`` and ``sell`` are the only operations
that change balance and holdings, and they change them together.

Attributes:
- account_id: Identifier of the account owner
- balance: Available cash, never negative
- history: Executed trades, oldest first
"""

import logging
import math
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable

from src.models.ledger import Ledger
from src.models.quote import normalize_symbol
from src.models.snapshot import AccountSnapshot
from src.models.trade_result import DeclineReason, TradeResult
from src.models.transaction import TradeSide, Transaction
from src.money import from_micros, to_micros

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Account:
    def __init__(
        self,
        account_id: str,
        balance: float = 0.0,
        clock: Callable[[], datetime] | None = None,
    ):
        """Open an account with an empty ledger and log.

        Args:
            account_id: Identifier of the account owner
            balance: Opening cash balance
            clock: Timestamp source for transactions (default: UTC now)

        Raises:
            ValueError: If account_id is empty or balance is negative
        """
        if not account_id:
            raise ValueError("account_id is required for Account")
        if balance < 0:
            raise ValueError(f"Opening balance must be non-negative, got {balance}")

        self.account_id = account_id
        self._balance_micros = to_micros(balance)
        self._ledger = Ledger()
        self._transactions: list[Transaction] = []
        self._clock = clock or _utcnow
        # One lock for balance, ledger and log together
        self._lock = threading.RLock()

    def __repr__(self):
        return f"Account(id={self.account_id}, balance={self.balance:.2f})"

    @property
    def balance(self) -> float:
        return from_micros(self._balance_micros)

    @property
    def ledger(self) -> Ledger:
        """Copy of the current holdings."""
        with self._lock:
            return self._ledger.copy()

    def quantity_of(self, symbol: str) -> int:
        return self._ledger.quantity_of(symbol)

    def symbols(self) -> set[str]:
        return self._ledger.symbols()

    def history(self) -> tuple[Transaction, ...]:
        with self._lock:
            return tuple(self._transactions)

    def _validate_order(self, symbol, quantity, price) -> list[str]:
        errors = []

        if not isinstance(symbol, str) or not symbol.strip():
            errors.append("symbol is required")

        if isinstance(quantity, bool) or not isinstance(quantity, int):
            errors.append(f"quantity must be an integer, got {quantity!r}")
        elif quantity <= 0:
            errors.append(f"quantity must be positive, got {quantity}")

        if isinstance(price, bool) or not isinstance(price, (int, float)):
            errors.append(f"price must be a number, got {price!r}")
        elif not math.isfinite(price):
            errors.append(f"price must be finite, got {price}")
        elif price < 0:
            errors.append(f"price must be non-negative, got {price}")

        return errors

    def _invalid(self, errors: list[str]) -> TradeResult:
        message = f"Order rejected: {', '.join(errors)}"
        logger.warning(f"{self.account_id}: {message}")
        return TradeResult.declined(DeclineReason.INVALID_INPUT, message)

    @contextmanager
    def _atomic(self):
        """Restore balance, ledger and log if the enclosed block raises."""
        balance = self._balance_micros
        ledger = self._ledger.copy()
        log_length = len(self._transactions)
        try:
            yield
        except BaseException:
            self._balance_micros = balance
            self._ledger = ledger
            del self._transactions[log_length:]
            logger.error(
                f"{self.account_id}: trade failed mid-operation, state restored",
                exc_info=True,
            )
            raise

    def _record(self, symbol: str, side: TradeSide, quantity: int, price_micros: int):
        executed_at = self._clock()
        if self._transactions and executed_at < self._transactions[-1].executed_at:
            # Keep the log in execution order even if the clock steps back
            executed_at = self._transactions[-1].executed_at

        transaction = Transaction(
            symbol=symbol,
            side=side,
            quantity=quantity,
            price=from_micros(price_micros),
            executed_at=executed_at,
        )
        self._transactions.append(transaction)
        return transaction

    def buy(self, symbol: str, quantity: int, price: float) -> TradeResult:
        """Buy shares at a price snapshot supplied by the caller.

        Args:
            symbol: Symbol to buy (case-insensitive)
            quantity: Positive number of shares
            price: Unit price taken from a quote lookup

        Returns:
            Accepted result carrying the BUY transaction, or a decline with
            INVALID_INPUT or INSUFFICIENT_BALANCE (no state changed)
        """
        errors = self._validate_order(symbol, quantity, price)
        if errors:
            return self._invalid(errors)

        key = normalize_symbol(symbol)
        price_micros = to_micros(price)

        with self._lock:
            cost = price_micros * quantity
            if cost > self._balance_micros:
                logger.warning(
                    f"{self.account_id}: buy {quantity} {key} declined, cost "
                    f"{from_micros(cost):.2f} exceeds balance {self.balance:.2f}"
                )
                return TradeResult.declined(
                    DeclineReason.INSUFFICIENT_BALANCE,
                    f"Insufficient balance to buy {quantity} {key}: "
                    f"cost {from_micros(cost):.2f}, available {self.balance:.2f}",
                )

            with self._atomic():
                self._balance_micros -= cost
                self._ledger.add(key, quantity)
                transaction = self._record(key, TradeSide.BUY, quantity, price_micros)

        logger.info(f"{self.account_id}: {transaction.describe()}")
        return TradeResult.accepted(transaction)

    def sell(self, symbol: str, quantity: int, price: float) -> TradeResult:
        """Sell held shares at a price snapshot supplied by the caller.

        Shares are removed before cash is credited, so a failed removal
        never credits the balance.

        Returns:
            Accepted result carrying the SELL transaction, or a decline with
            INVALID_INPUT or INSUFFICIENT_SHARES (no state changed)
        """
        errors = self._validate_order(symbol, quantity, price)
        if errors:
            return self._invalid(errors)

        key = normalize_symbol(symbol)
        price_micros = to_micros(price)

        with self._lock:
            with self._atomic():
                if not self._ledger.remove(key, quantity):
                    held = self._ledger.quantity_of(key)
                    logger.warning(
                        f"{self.account_id}: sell {quantity} {key} declined, "
                        f"only {held} held"
                    )
                    return TradeResult.declined(
                        DeclineReason.INSUFFICIENT_SHARES,
                        f"Not enough shares to sell {quantity} {key}: {held} held",
                    )

                self._balance_micros += price_micros * quantity
                transaction = self._record(key, TradeSide.SELL, quantity, price_micros)

        logger.info(f"{self.account_id}: {transaction.describe()}")
        return TradeResult.accepted(transaction)

    def snapshot(self) -> AccountSnapshot:
        with self._lock:
            return AccountSnapshot(
                account_id=self.account_id,
                balance=self.balance,
                holdings=tuple(self._ledger.items()),
                transactions=tuple(self._transactions),
            )

    @classmethod
    def from_snapshot(
        cls,
        snapshot: AccountSnapshot,
        clock: Callable[[], datetime] | None = None,
    ) -> "Account":
        """Rebuild an account from a snapshot.

        Raises:
            SnapshotError: If the snapshot is inconsistent
        """
        snapshot.validate()

        account = cls(snapshot.account_id, snapshot.balance, clock=clock)
        account._ledger = Ledger(dict(snapshot.holdings))
        account._transactions = list(snapshot.transactions)
        return account
