"""Unit tests for AccountSnapshot."""

from datetime import datetime, timedelta, timezone

import pytest

from src.models.account import Account
from src.models.snapshot import AccountSnapshot, SnapshotError
from src.models.transaction import TradeSide, Transaction

T0 = datetime(2025, 1, 15, 14, 30, tzinfo=timezone.utc)


def tx(symbol, side, quantity, price=10.0, offset=0):
    return Transaction(symbol, side, quantity, price, T0 + timedelta(seconds=offset))


class TestSnapshotValidation:
    def test_consistent_snapshot_passes(self):
        snapshot = AccountSnapshot(
            "U1",
            90.0,
            holdings=(("AAPL", 2),),
            transactions=(
                tx("AAPL", TradeSide.BUY, 3, offset=0),
                tx("AAPL", TradeSide.SELL, 1, offset=1),
            ),
        )
        snapshot.validate()

    def test_fully_sold_symbol_has_no_holding(self):
        AccountSnapshot(
            "U1",
            100.0,
            transactions=(
                tx("AAPL", TradeSide.BUY, 3, offset=0),
                tx("AAPL", TradeSide.SELL, 3, offset=1),
            ),
        ).validate()

    def test_collects_all_errors(self):
        snapshot = AccountSnapshot(
            "",
            -1.0,
            holdings=(("AAPL", 0),),
        )
        with pytest.raises(SnapshotError) as exc_info:
            snapshot.validate()

        message = str(exc_info.value)
        assert "account_id is required" in message
        assert "balance must be non-negative" in message
        assert "non-positive quantity" in message

    def test_detects_holdings_mismatch(self):
        snapshot = AccountSnapshot(
            "U1",
            0.0,
            holdings=(("AAPL", 5),),
            transactions=(tx("AAPL", TradeSide.BUY, 3),),
        )
        with pytest.raises(SnapshotError, match="does not match"):
            snapshot.validate()

    def test_detects_out_of_order_log(self):
        snapshot = AccountSnapshot(
            "U1",
            0.0,
            holdings=(("AAPL", 2),),
            transactions=(
                tx("AAPL", TradeSide.BUY, 1, offset=5),
                tx("AAPL", TradeSide.BUY, 1, offset=0),
            ),
        )
        with pytest.raises(SnapshotError, match="out of order"):
            snapshot.validate()


class TestSnapshotDict:
    def test_to_dict_uses_primitives(self):
        snapshot = AccountSnapshot(
            "U1",
            8500.0,
            holdings=(("AAPL", 10),),
            transactions=(tx("AAPL", TradeSide.BUY, 10, price=150.0),),
        )

        assert snapshot.to_dict() == {
            "account_id": "U1",
            "balance": 8500.0,
            "holdings": [{"symbol": "AAPL", "quantity": 10}],
            "transactions": [
                {
                    "symbol": "AAPL",
                    "side": "BUY",
                    "quantity": 10,
                    "price": 150.0,
                    "executed_at": "2025-01-15T14:30:00+00:00",
                }
            ],
        }

    def test_from_dict_restores_snapshot(self):
        snapshot = AccountSnapshot(
            "U1",
            8500.0,
            holdings=(("AAPL", 10),),
            transactions=(tx("AAPL", TradeSide.BUY, 10, price=150.0),),
        )
        assert AccountSnapshot.from_dict(snapshot.to_dict()) == snapshot

    def test_from_dict_missing_key(self):
        with pytest.raises(SnapshotError, match="Malformed snapshot"):
            AccountSnapshot.from_dict({"account_id": "U1"})

    def test_from_dict_bad_side(self):
        data = {
            "account_id": "U1",
            "balance": 0,
            "holdings": [],
            "transactions": [
                {
                    "symbol": "AAPL",
                    "side": "SHORT",
                    "quantity": 1,
                    "price": 1.0,
                    "executed_at": T0.isoformat(),
                }
            ],
        }
        with pytest.raises(SnapshotError, match="Malformed snapshot"):
            AccountSnapshot.from_dict(data)

    def test_from_dict_inconsistent_state(self):
        data = {
            "account_id": "U1",
            "balance": 0,
            "holdings": [{"symbol": "aapl", "quantity": 1}],
        }
        with pytest.raises(SnapshotError, match="does not match"):
            AccountSnapshot.from_dict(data)


class TestSnapshotTransactionChecks:
    def test_rejects_negative_transaction_quantities(self):
        snapshot = AccountSnapshot(
            "U1",
            100.0,
            transactions=(
                tx("AAPL", TradeSide.BUY, -5, offset=0),
                tx("AAPL", TradeSide.SELL, -5, offset=1),
            ),
        )
        with pytest.raises(SnapshotError, match="non-positive quantity -5"):
            snapshot.validate()

    def test_rejects_negative_transaction_price(self):
        snapshot = AccountSnapshot(
            "U1",
            100.0,
            holdings=(("AAPL", 1),),
            transactions=(tx("AAPL", TradeSide.BUY, 1, price=-1.0),),
        )
        with pytest.raises(SnapshotError, match="invalid price"):
            snapshot.validate()

    def test_rejects_timestamp_without_timezone(self):
        snapshot = AccountSnapshot(
            "U1",
            0.0,
            holdings=(("AAPL", 2),),
            transactions=(
                tx("AAPL", TradeSide.BUY, 1, offset=0),
                Transaction("AAPL", TradeSide.BUY, 1, 10.0, datetime(2025, 1, 16)),
            ),
        )
        with pytest.raises(SnapshotError, match="without timezone"):
            snapshot.validate()


class TestSnapshotDictTimestamps:
    def _data(self, *timestamps):
        return {
            "account_id": "U1",
            "balance": 100.0,
            "holdings": [{"symbol": "AAPL", "quantity": len(timestamps)}],
            "transactions": [
                {
                    "symbol": "AAPL",
                    "side": "BUY",
                    "quantity": 1,
                    "price": 1.0,
                    "executed_at": stamp,
                }
                for stamp in timestamps
            ],
        }

    def test_naive_timestamp_read_as_utc(self):
        snapshot = AccountSnapshot.from_dict(self._data("2025-01-01T00:00:00"))

        executed_at = snapshot.transactions[0].executed_at
        assert executed_at == datetime(2025, 1, 1, tzinfo=timezone.utc)

    def test_mixed_naive_and_aware_timestamps_load(self):
        snapshot = AccountSnapshot.from_dict(
            self._data("2025-01-01T00:00:00", "2025-01-01T00:00:05+00:00")
        )
        assert len(snapshot.transactions) == 2

    def test_restored_account_can_trade_after_naive_timestamps(self):
        account = Account.from_snapshot(
            AccountSnapshot.from_dict(self._data("2025-01-01T00:00:00"))
        )
        result = account.buy("AAPL", 1, 1.0)

        assert result.success
        assert account.quantity_of("AAPL") == 2
