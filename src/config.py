"""Environment-driven settings.

Values come from the process environment, with a local .env file loaded
first via python-dotenv (searched from the working directory up).
"""

import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

DEFAULT_DB_PATH = "data/ledger.db"
DEFAULT_STARTING_BALANCE = 10000.0


class ConfigError(Exception):
    """Raised when an environment setting is invalid."""

    pass


@dataclass(frozen=True)
class Settings:
    db_path: str = DEFAULT_DB_PATH
    db_encryption_key: str | None = None
    starting_balance: float = DEFAULT_STARTING_BALANCE
    quote_api_url: str | None = None


def load_settings(dotenv: bool = True) -> Settings:
    """Read settings from the environment.

    Args:
        dotenv: Load a .env file before reading (default: True)

    Returns:
        Settings with defaults applied for unset variables

    Raises:
        ConfigError: If STARTING_BALANCE is not a non-negative number
    """
    if dotenv:
        load_dotenv(find_dotenv(usecwd=True))

    raw_balance = os.getenv("STARTING_BALANCE")
    starting_balance = DEFAULT_STARTING_BALANCE
    if raw_balance:
        try:
            starting_balance = float(raw_balance)
        except ValueError as e:
            raise ConfigError(
                f"STARTING_BALANCE must be a number, got {raw_balance!r}"
            ) from e
        if starting_balance < 0:
            raise ConfigError(
                f"STARTING_BALANCE must be non-negative, got {starting_balance}"
            )

    return Settings(
        db_path=os.getenv("DB_PATH", DEFAULT_DB_PATH),
        db_encryption_key=os.getenv("DB_ENCRYPTION_KEY") or None,
        starting_balance=starting_balance,
        quote_api_url=os.getenv("QUOTE_API_URL") or None,
    )
