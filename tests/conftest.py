"""Shared test fixtures for lotledger."""

from datetime import date, time
from decimal import Decimal

import pytest

from lotledger.db.repository import LedgerRepository
from lotledger.db.schema import create_schema
from lotledger.models.enums import AccountKind, MovementDirection, TradeSide
from lotledger.models.history import History, Movement, Trade
from lotledger.models.lot import Lot


@pytest.fixture
def db_conn(tmp_path):
    """Fresh database with the full schema."""
    conn = create_schema(tmp_path / "test.db")
    yield conn
    conn.close()


@pytest.fixture
def repo(db_conn) -> LedgerRepository:
    return LedgerRepository(db_conn)


@pytest.fixture
def sample_lot() -> Lot:
    return Lot(
        id="lot-001",
        acquired_date=date(2024, 5, 2),
        acquired_time=time(9, 15),
        unit_cost=Decimal("40"),
        original_quantity=Decimal("1000"),
        remaining_quantity=Decimal("1000"),
    )


@pytest.fixture
def sample_buy() -> Trade:
    return Trade(
        id="t-buy-001",
        side=TradeSide.BUY,
        trade_date=date(2024, 5, 2),
        trade_time=time(9, 15),
        amount=Decimal("40000"),
        rate=Decimal("40"),
        commission_pct=Decimal("0"),
    )


@pytest.fixture
def sample_sell() -> Trade:
    return Trade(
        id="t-sell-001",
        side=TradeSide.SELL,
        trade_date=date(2024, 5, 3),
        trade_time=time(10, 0),
        amount=Decimal("22500"),
        rate=Decimal("45"),
        commission_pct=Decimal("0"),
    )


@pytest.fixture
def sample_inflow() -> Movement:
    return Movement(
        id="m-in-001",
        direction=MovementDirection.INFLOW,
        account=AccountKind.ASSET,
        movement_date=date(2024, 5, 4),
        movement_time=time(18, 0),
        amount=Decimal("250"),
        reference_rate=Decimal("41.2"),
    )


@pytest.fixture
def sample_history(sample_buy: Trade, sample_sell: Trade) -> History:
    """Buy 1000 units at 40, sell 500 at 45, no commissions."""
    return History(trades=[sample_buy, sample_sell])
