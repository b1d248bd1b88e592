"""Unit tests for the CLI commands."""

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from src.cli import cli
from src.database import DatabaseError
from src.persistence import AccountStore


@pytest.fixture
def runner(monkeypatch, tmp_path):
    monkeypatch.setenv("DB_PATH", str(tmp_path / "ledger.db"))
    monkeypatch.setenv("STARTING_BALANCE", "10000")
    monkeypatch.setenv("QUOTE_API_URL", "")
    monkeypatch.chdir(tmp_path)
    return CliRunner()


def invoke(runner, *args):
    return runner.invoke(cli, ["--user", "alice", *args])


def test_market_lists_default_quotes(runner):
    result = invoke(runner, "market")

    assert result.exit_code == 0
    assert "Market Stocks:" in result.output
    assert "AAPL (Apple Inc.) - $150.00" in result.output
    assert "TSLA (Tesla Inc.) - $700.00" in result.output


def test_buy_persists_between_invocations(runner):
    result = invoke(runner, "buy", "aapl", "10")
    assert result.exit_code == 0, result.output
    assert "✓ BUY 10 shares of AAPL at $150.00" in result.output
    assert "Available balance: $8500.00" in result.output

    result = invoke(runner, "portfolio")
    assert result.exit_code == 0
    assert "AAPL: 10 shares @ $150.00 each (Total: $1500.00)" in result.output
    assert "Available balance: $8500.00" in result.output


def test_sell_round_trip(runner):
    invoke(runner, "buy", "TSLA", "2")
    result = invoke(runner, "sell", "TSLA", "2")

    assert result.exit_code == 0, result.output
    assert "Available balance: $10000.00" in result.output

    history = invoke(runner, "history")
    assert "Transaction History:" in history.output
    assert "BUY 2 shares of TSLA" in history.output
    assert "SELL 2 shares of TSLA" in history.output


def test_declined_buy_exits_non_zero(runner):
    result = invoke(runner, "buy", "GOOGL", "4")

    assert result.exit_code == 1
    assert "✗ Insufficient balance" in result.output

    portfolio = invoke(runner, "portfolio")
    assert "Portfolio is empty." in portfolio.output
    assert "Available balance: $10000.00" in portfolio.output


def test_unknown_symbol(runner):
    result = invoke(runner, "buy", "MSFT", "1")

    assert result.exit_code == 1
    assert "Stock not found: MSFT" in result.output


def test_sell_without_shares(runner):
    result = invoke(runner, "sell", "AAPL", "1")

    assert result.exit_code == 1
    assert "Not enough shares" in result.output


def test_history_for_new_account(runner):
    result = invoke(runner, "history")
    assert result.exit_code == 0
    assert "No transactions yet." in result.output


def test_invalid_starting_balance_reported(runner, monkeypatch):
    monkeypatch.setenv("STARTING_BALANCE", "plenty")
    result = invoke(runner, "portfolio")

    assert result.exit_code != 0
    assert "STARTING_BALANCE must be a number" in result.output


def test_failed_save_reported_without_traceback(runner):
    with patch.object(
        AccountStore, "save", side_effect=DatabaseError("Stored log diverges")
    ):
        result = invoke(runner, "buy", "AAPL", "1")

    assert result.exit_code == 1
    assert "Trade not saved: Stored log diverges" in result.output
    assert not isinstance(result.exception, DatabaseError)

    portfolio = invoke(runner, "portfolio")
    assert "Portfolio is empty." in portfolio.output
