"""Account persistence.

Stores AccountSnapshots in SQLite. The transaction log is append-only on
disk as well: saving only inserts trades the database has not seen yet, and
refuses a snapshot whose log does not extend the stored one.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from src.database import Database, DatabaseError
from src.models.snapshot import AccountSnapshot
from src.models.transaction import TradeSide, Transaction
from src.money import from_micros, to_micros

logger = logging.getLogger(__name__)


def _transaction_row(account_id: str, seq: int, tx: Transaction) -> tuple:
    return (
        account_id,
        seq,
        tx.symbol,
        tx.side.value,
        tx.quantity,
        to_micros(tx.price),
        tx.executed_at.isoformat(),
    )


class AccountStore:
    def __init__(self, database: Database):
        self._database = database

    def exists(self, account_id: str) -> bool:
        with self._database.connection() as conn:
            row = conn.execute(
                "SELECT 1 FROM accounts WHERE id = ?", (account_id,)
            ).fetchone()
        return row is not None

    def save(self, snapshot: AccountSnapshot) -> None:
        """Write an account snapshot in one transaction.

        The stored log must be a prefix of the snapshot's log. A snapshot
        taken from a session that missed trades saved by another session
        is refused before anything is written.

        Args:
            snapshot: Full account state to store

        Raises:
            SnapshotError: If the snapshot is inconsistent
            DatabaseError: If the stored log is not a prefix of the snapshot's
            SQLiteError: If a database operation fails
        """
        snapshot.validate()
        now = datetime.now(timezone.utc).isoformat()
        rows = [
            _transaction_row(snapshot.account_id, seq, tx)
            for seq, tx in enumerate(snapshot.transactions)
        ]

        with self._database.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT account_id, seq, symbol, side, quantity, price_micros, "
                "executed_at FROM transactions WHERE account_id = ? ORDER BY seq",
                (snapshot.account_id,),
            )
            stored_rows = [tuple(row) for row in cursor.fetchall()]
            stored = len(stored_rows)
            if stored > len(rows):
                raise DatabaseError(
                    f"Stored log for {snapshot.account_id} has {stored} transactions, "
                    f"snapshot has {len(rows)}"
                )
            for stored_row, row in zip(stored_rows, rows):
                if stored_row != row:
                    raise DatabaseError(
                        f"Stored log for {snapshot.account_id} diverges from "
                        f"snapshot at transaction {row[1]}"
                    )

            cursor.execute(
                """
                INSERT INTO accounts (id, balance_micros, created_at, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    balance_micros = excluded.balance_micros,
                    updated_at = excluded.updated_at
                """,
                (snapshot.account_id, to_micros(snapshot.balance), now, now),
            )

            cursor.execute(
                "DELETE FROM holdings WHERE account_id = ?", (snapshot.account_id,)
            )
            cursor.executemany(
                "INSERT INTO holdings (account_id, symbol, quantity) VALUES (?, ?, ?)",
                [
                    (snapshot.account_id, symbol, quantity)
                    for symbol, quantity in snapshot.holdings
                ],
            )

            cursor.executemany(
                """
                INSERT INTO transactions
                    (account_id, seq, symbol, side, quantity, price_micros, executed_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                rows[stored:],
            )

        logger.info(
            f"Saved account {snapshot.account_id}: {len(snapshot.holdings)} holdings, "
            f"{len(rows) - stored} new transactions"
        )

    def load(self, account_id: str) -> Optional[AccountSnapshot]:
        """Read an account snapshot.

        Returns:
            AccountSnapshot or None if the account was never saved
        """
        with self._database.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT balance_micros FROM accounts WHERE id = ?", (account_id,)
            )
            row = cursor.fetchone()
            if row is None:
                return None
            balance_micros = row[0]

            cursor.execute(
                "SELECT symbol, quantity FROM holdings "
                "WHERE account_id = ? ORDER BY symbol",
                (account_id,),
            )
            holdings = tuple((symbol, quantity) for symbol, quantity in cursor.fetchall())

            cursor.execute(
                "SELECT symbol, side, quantity, price_micros, executed_at "
                "FROM transactions WHERE account_id = ? ORDER BY seq",
                (account_id,),
            )
            transactions = tuple(
                Transaction(
                    symbol=symbol,
                    side=TradeSide(side),
                    quantity=quantity,
                    price=from_micros(price_micros),
                    executed_at=datetime.fromisoformat(executed_at),
                )
                for symbol, side, quantity, price_micros, executed_at in cursor.fetchall()
            )

        return AccountSnapshot(
            account_id=account_id,
            balance=from_micros(balance_micros),
            holdings=holdings,
            transactions=transactions,
        )

    def delete(self, account_id: str) -> bool:
        """Remove an account with its holdings and log.

        Returns:
            True if an account was deleted
        """
        with self._database.connection() as conn:
            cursor = conn.execute("DELETE FROM accounts WHERE id = ?", (account_id,))
            deleted = cursor.rowcount > 0
        if deleted:
            logger.info(f"Deleted account {account_id}")
        return deleted
