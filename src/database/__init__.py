"""SQLite connection management for account storage.

Connections are opened per unit of work. Everything executed inside one
``connection()`` block commits together or rolls back together.
"""

import logging
import re
from contextlib import contextmanager
from pathlib import Path

try:
    from pysqlcipher3 import dbapi2 as sqlite3

    SQLCIPHER_AVAILABLE = True
except ImportError:
    import sqlite3

    SQLCIPHER_AVAILABLE = False

# Keep a handle on the driver's error class even if sqlite3 is patched in tests
SQLiteError = sqlite3.Error

logger = logging.getLogger(__name__)


class DatabaseError(Exception):
    """Base exception for database errors."""

    pass


class DatabaseConnectionError(DatabaseError):
    """Raised when a database connection cannot be opened."""

    pass


def _sanitize_encryption_key(key: str) -> str:
    """Validate an encryption key for use in ``PRAGMA key``.

    Raises:
        ValueError: If key contains characters other than letters, digits,
            underscore or hyphen
    """
    if not re.match(r"^[a-zA-Z0-9_-]+$", key):
        raise ValueError(
            "Encryption key contains invalid characters. "
            "Only alphanumeric, underscore, and hyphen allowed."
        )
    return key


class Database:
    """Opens configured connections to the ledger database file."""

    def __init__(self, db_path: str, encryption_key: str | None = None):
        """
        Args:
            db_path: Path to database file, or ":memory:"
            encryption_key: SQLCipher key (ignored when SQLCipher is missing)

        Raises:
            DatabaseConnectionError: If the parent directory cannot be created
        """
        self.db_path = db_path
        self.encryption_key = encryption_key
        self.encryption_enabled = encryption_key is not None and SQLCIPHER_AVAILABLE

        if encryption_key is not None and not SQLCIPHER_AVAILABLE:
            logger.warning("pysqlcipher3 not installed, database will not be encrypted")

        try:
            if db_path != ":memory:":
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(
                f"Failed to create database directory for {db_path}: {e}",
                exc_info=True,
            )
            raise DatabaseConnectionError(
                f"Cannot create database directory: {e}"
            ) from e

    @contextmanager
    def connection(self):
        """Yield a connection wrapped in a single transaction.

        Usage:
            with db.connection() as conn:
                conn.execute("DELETE FROM holdings WHERE account_id = ?", (id,))
                conn.execute("INSERT INTO holdings ...")

        Raises:
            DatabaseConnectionError: If the connection cannot be opened
        """
        try:
            conn = self._connect()
        except SQLiteError as e:
            logger.error(f"Failed to connect to database: {e}", exc_info=True)
            raise DatabaseConnectionError(f"Database connection failed: {e}") from e

        try:
            yield conn
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"Database transaction rolled back: {e}", exc_info=True)
            raise
        finally:
            conn.close()

    def _connect(self):
        """Open a connection with WAL, foreign keys and (optionally) the key set.

        Raises:
            sqlite3.Error: If connection or PRAGMA commands fail
            ValueError: If encryption key is invalid
        """
        key = None
        if self.encryption_enabled:
            key = _sanitize_encryption_key(self.encryption_key)

        # DEFERRED: DML opens a transaction that commit()/rollback() control
        conn = sqlite3.connect(
            self.db_path, check_same_thread=False, isolation_level="DEFERRED"
        )

        try:
            if key is not None:
                conn.execute(f"PRAGMA key = '{key}'")
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA foreign_keys=ON")
        except SQLiteError as e:
            conn.close()
            logger.error(f"Failed to configure database PRAGMAs: {e}", exc_info=True)
            raise

        return conn
