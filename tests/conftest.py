"""Shared fixtures: an in-memory SQLite database and raw row builders"""

import pytest

from trade_ledger.db import Database
from trade_ledger.models.db import Trade
from trade_ledger.models.trade import (
    AMOUNT_COLUMN,
    MARKET_COLUMN,
    OPERATION_COLUMN,
    PRICE_COLUMN,
    TIME_COLUMN,
)
from trade_ledger.services.storage import StorageService

CSV_HEADER = "UTC_Time,Operation,Market,Buy/Sell Amount,Price"


@pytest.fixture
def database():
    """Fresh in-memory database per test"""
    database = Database()
    database.init("sqlite://")
    yield database
    database.dispose()


@pytest.fixture
def session(database):
    session = database.get_session()
    yield session
    session.close()


@pytest.fixture
def store(session):
    return StorageService(session)


@pytest.fixture
def make_row():
    """Factory for raw CSV rows, valid unless overridden"""

    def _make_row(
        time="2024-01-15 10:30:45",
        operation="Buy",
        market="BTC/USDT",
        amount="2",
        price="100",
    ):
        return {
            TIME_COLUMN: time,
            OPERATION_COLUMN: operation,
            MARKET_COLUMN: market,
            AMOUNT_COLUMN: amount,
            PRICE_COLUMN: price,
        }

    return _make_row


@pytest.fixture
def write_csv(tmp_path):
    """Write CSV lines (header included) to a temp file and return its path"""

    def _write_csv(lines, name="trades.csv", header=CSV_HEADER):
        path = tmp_path / name
        path.write_text("\n".join([header] + list(lines)) + "\n", encoding="utf-8")
        return path

    return _write_csv


@pytest.fixture
def trade_count(session):
    """Number of rows in the trades table"""
    return lambda: session.query(Trade).count()
