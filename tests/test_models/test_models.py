"""Tests for domain models."""

from datetime import date, time
from decimal import Decimal

import pytest
from pydantic import ValidationError

from lotledger.models.enums import AccountKind, MovementDirection, TradeSide
from lotledger.models.history import History, Movement, Trade
from lotledger.models.ledger import LedgerState
from lotledger.models.lot import Lot


class TestLot:
    def test_defaults_and_properties(self):
        lot = Lot(
            id="l1",
            acquired_date=date(2024, 1, 1),
            unit_cost=Decimal("40"),
            original_quantity=Decimal("10"),
            remaining_quantity=Decimal("4"),
        )
        assert lot.acquired_time == time(0, 0)
        assert lot.is_active
        assert lot.fifo_key == (date(2024, 1, 1), time(0, 0))
        assert lot.remaining_cost == Decimal("160")

    def test_exhausted_lot_inactive(self, sample_lot):
        sample_lot.remaining_quantity = Decimal("0")
        assert not sample_lot.is_active

    def test_negative_quantity_rejected(self):
        with pytest.raises(ValidationError):
            Lot(
                id="l1",
                acquired_date=date(2024, 1, 1),
                unit_cost=Decimal("40"),
                original_quantity=Decimal("10"),
                remaining_quantity=Decimal("-1"),
            )

    def test_zero_unit_cost_rejected(self):
        with pytest.raises(ValidationError):
            Lot(
                id="l1",
                acquired_date=date(2024, 1, 1),
                unit_cost=Decimal("0"),
                original_quantity=Decimal("1"),
                remaining_quantity=Decimal("1"),
            )


class TestTrade:
    def test_parses_strings(self):
        trade = Trade(
            id="t1",
            side="buy",
            trade_date="2024-05-02",
            trade_time="09:15",
            amount="40000",
            rate="40",
        )
        assert trade.side == TradeSide.BUY
        assert trade.trade_date == date(2024, 5, 2)
        assert trade.trade_time == time(9, 15)
        assert trade.quantity == Decimal("1000")
        assert trade.commission_pct is None
        assert trade.bank_commission == Decimal("0")
        assert trade.gain is None

    @pytest.mark.parametrize("field", ["amount", "rate"])
    def test_non_positive_rejected(self, field):
        values = {"amount": Decimal("100"), "rate": Decimal("40")}
        values[field] = Decimal("0")
        with pytest.raises(ValidationError):
            Trade(id="t1", side=TradeSide.BUY, trade_date=date(2024, 1, 1), **values)


class TestMovement:
    def test_asset_movement_affects_inventory(self, sample_inflow):
        assert sample_inflow.affects_inventory

    def test_bank_movement_does_not(self):
        movement = Movement(
            id="m1",
            direction=MovementDirection.INFLOW,
            account=AccountKind.BANK,
            movement_date=date(2024, 1, 1),
            amount=Decimal("500"),
        )
        assert not movement.affects_inventory


class TestHistory:
    def test_find(self, sample_history, sample_inflow):
        sample_history.movements.append(sample_inflow)
        assert sample_history.find_trade("t-sell-001").side == TradeSide.SELL
        assert sample_history.find_trade("missing") is None
        assert sample_history.find_movement("m-in-001") is sample_inflow
        assert sample_history.find_movement("missing") is None

    def test_empty(self):
        history = History()
        assert history.trades == []
        assert history.movements == []


class TestLedgerState:
    def test_missing_rates_default_to_zero(self):
        state = LedgerState()
        assert state.last_purchase_rate() == Decimal("0")
        assert state.last_sale_rate() == Decimal("0")
