"""Pytest configuration and shared fixtures."""

import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from alembic.config import Config

from alembic import command
from src.market import Market
from src.models.account import Account
from src.models.quote import Quote

ALEMBIC_INI = Path(__file__).resolve().parents[1] / "alembic.ini"


class StepClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start=None):
        self.current = start or datetime(2025, 1, 15, 14, 30, tzinfo=timezone.utc)

    def __call__(self):
        now = self.current
        self.current += timedelta(seconds=1)
        return now


@pytest.fixture(scope="function")
def temp_db_path():
    """Create a temporary database file for testing."""
    with tempfile.NamedTemporaryFile(delete=False, suffix=".db") as tmp:
        db_path = tmp.name
    yield db_path
    for suffix in ("", "-wal", "-shm"):
        if os.path.exists(db_path + suffix):
            os.remove(db_path + suffix)


@pytest.fixture(scope="function")
def test_db_schema(temp_db_path):
    """Create test database schema using Alembic migration."""
    alembic_config = Config(str(ALEMBIC_INI))
    alembic_config.set_main_option(
        "sqlalchemy.url", f"sqlite:///{os.path.abspath(temp_db_path)}"
    )
    command.upgrade(alembic_config, "head")
    yield temp_db_path


@pytest.fixture(scope="function")
def test_db(test_db_schema):
    """Create a Database instance for testing."""
    from src.database import Database

    return Database(db_path=test_db_schema, encryption_key=None)


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def account(clock):
    """Fresh account with the default starting balance."""
    return Account("U1234567", 10000.0, clock=clock)


@pytest.fixture
def market():
    """Market quoting the sample symbols."""
    return Market(
        [
            Quote("AAPL", "Apple Inc.", 150.00),
            Quote("GOOGL", "Alphabet Inc.", 2800.00),
            Quote("TSLA", "Tesla Inc.", 700.00),
        ]
    )
