"""Tests for CLI commands."""

import json
import logging

import pytest
from typer.testing import CliRunner

from lotledger.cli import app
from lotledger.config import reset_settings

runner = CliRunner()


@pytest.fixture(autouse=True)
def _restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    reset_settings()
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    reset_settings()


@pytest.fixture
def db(tmp_path):
    return str(tmp_path / "ledger.db")


def _buy(db, amount="40000", rate="40", day="2024-05-02"):
    return runner.invoke(
        app, ["trade", "buy", amount, rate, "--commission", "0", "--date", day, "--db", db]
    )


class TestHelp:
    def test_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "FIFO lot ledger" in result.output

    @pytest.mark.parametrize(
        "command",
        [
            ["import"],
            ["trade"],
            ["move"],
            ["delete-trade"],
            ["delete-movement"],
            ["recalc"],
            ["inventory"],
            ["history"],
            ["quote"],
            ["lot", "add"],
            ["lot", "edit"],
            ["lot", "delete"],
        ],
    )
    def test_command_help(self, command):
        result = runner.invoke(app, [*command, "--help"])
        assert result.exit_code == 0


class TestTrade:
    def test_buy_then_sell(self, db):
        result = _buy(db)
        assert result.exit_code == 0, result.output
        assert "Units:  1,000.00" in result.output

        result = runner.invoke(
            app,
            ["trade", "sell", "22500", "45", "--commission", "0", "--date", "2024-05-03", "--db", db],
        )
        assert result.exit_code == 0, result.output
        assert "Gain:   2,500.00" in result.output
        assert "Held:   500.00" in result.output

    def test_insufficient_inventory_refused(self, db):
        _buy(db)
        result = runner.invoke(
            app, ["trade", "sell", "45000", "45", "--date", "2024-05-03", "--db", db]
        )
        assert result.exit_code == 1
        assert "Insufficient inventory" in result.output

    def test_force_records_short_sale(self, db):
        _buy(db)
        result = runner.invoke(
            app,
            [
                "trade", "sell", "46800", "45", "--commission", "0",
                "--date", "2024-05-03", "--force", "--db", db,
            ],
        )
        assert result.exit_code == 0, result.output
        assert "Held:   0.00" in result.output

    def test_invalid_rate(self, db):
        result = runner.invoke(app, ["trade", "buy", "40000", "40.1234", "--db", db])
        assert result.exit_code == 1
        assert "Invalid rate" in result.output

    def test_invalid_commission(self, db):
        result = runner.invoke(
            app, ["trade", "buy", "40000", "40", "--commission", "11", "--db", db]
        )
        assert result.exit_code == 1
        assert "Invalid commission" in result.output

    def test_invalid_amount(self, db):
        result = runner.invoke(app, ["trade", "buy", "0", "40", "--db", db])
        assert result.exit_code == 1
        assert "Invalid amount" in result.output

    def test_invalid_date(self, db):
        result = runner.invoke(app, ["trade", "buy", "100", "40", "--date", "2024-13-01", "--db", db])
        assert result.exit_code == 1
        assert "Invalid date" in result.output


class TestMove:
    def test_inflow_and_outflow(self, db):
        _buy(db)
        result = runner.invoke(
            app, ["move", "inflow", "250", "--rate", "41.2", "--date", "2024-05-04", "--db", db]
        )
        assert result.exit_code == 0, result.output
        assert "Held:   1,250.00" in result.output

        result = runner.invoke(app, ["move", "outflow", "100", "--date", "2024-05-05", "--db", db])
        assert result.exit_code == 0, result.output
        assert "Held:   1,150.00" in result.output

    def test_outflow_beyond_inventory_refused(self, db):
        result = runner.invoke(app, ["move", "outflow", "10", "--db", db])
        assert result.exit_code == 1
        assert "Insufficient inventory" in result.output

    def test_bank_outflow_not_checked(self, db):
        result = runner.invoke(app, ["move", "outflow", "5000", "--account", "bank", "--db", db])
        assert result.exit_code == 0, result.output
        assert "Recorded bank outflow" in result.output


class TestDeletion:
    def test_delete_unknown_trade(self, db):
        result = runner.invoke(app, ["delete-trade", "nope", "--db", db])
        assert result.exit_code == 1
        assert "Trade not found: nope" in result.output

    def test_delete_unknown_movement(self, db):
        result = runner.invoke(app, ["delete-movement", "nope", "--db", db])
        assert result.exit_code == 1
        assert "Movement not found: nope" in result.output


class TestImportAndReports:
    def test_import_then_recalc(self, db, tmp_path):
        path = tmp_path / "history.json"
        path.write_text(json.dumps({
            "trades": [
                {"id": "t1", "side": "buy", "date": "2024-05-02", "amount": "40000",
                 "rate": "40", "commission_pct": "0"},
                {"id": "t2", "side": "sell", "date": "2024-05-03", "amount": "22500",
                 "rate": "45", "commission_pct": "0"},
            ],
        }))

        result = runner.invoke(app, ["import", str(path), "--db", db])
        assert result.exit_code == 0, result.output
        assert "Trades:     2" in result.output
        assert "Held:       500.00" in result.output

        result = runner.invoke(app, ["recalc", "--db", db])
        assert result.exit_code == 0, result.output
        assert "Total gain:  2,500.00" in result.output

        result = runner.invoke(app, ["delete-trade", "t2", "--db", db])
        assert result.exit_code == 0, result.output

        result = runner.invoke(app, ["inventory", "--db", db])
        assert result.exit_code == 0, result.output
        assert "1,000.00" in result.output

    def test_import_missing_file(self, db, tmp_path):
        result = runner.invoke(app, ["import", str(tmp_path / "nope.json"), "--db", db])
        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_inventory_empty(self, db):
        result = runner.invoke(app, ["inventory", "--db", db])
        assert result.exit_code == 0
        assert "No active lots" in result.output

    def test_history(self, db):
        _buy(db)
        result = runner.invoke(app, ["history", "--db", db])
        assert result.exit_code == 0, result.output
        assert "Trades" in result.output


class TestQuote:
    def test_buy_quote(self):
        result = runner.invoke(app, ["quote", "buy", "40000", "40", "--commission", "0.14"])
        assert result.exit_code == 0, result.output
        assert "Commission:   1.40 (0.14%)" in result.output
        assert "998.60" in result.output

    def test_sell_quote(self):
        result = runner.invoke(app, ["quote", "sell", "40000", "40", "--commission", "0,14"])
        assert result.exit_code == 0, result.output
        assert "1,001.40" in result.output

    def test_usd_default_commission(self, monkeypatch):
        monkeypatch.setenv("LOTLEDGER_USD_COMMISSION_PCT", "0.5")
        result = runner.invoke(app, ["quote", "buy", "1000", "1", "--currency", "USD"])
        assert result.exit_code == 0, result.output
        assert "Commission:   5.00 (0.5%)" in result.output


class TestLotCommands:
    def test_add_edit_delete(self, db):
        result = runner.invoke(
            app, ["lot", "add", "10", "40", "--id", "manual-1", "--date", "2024-01-01", "--db", db]
        )
        assert result.exit_code == 0, result.output
        assert "Added lot manual-1: 10.00 @ 40" in result.output

        result = runner.invoke(app, ["lot", "edit", "manual-1", "--remaining", "15", "--db", db])
        assert result.exit_code == 0, result.output
        assert "15.00 of 15.00 @ 40" in result.output

        result = runner.invoke(app, ["lot", "delete", "manual-1", "--db", db])
        assert result.exit_code == 0, result.output

        result = runner.invoke(app, ["inventory", "--db", db])
        assert "No active lots" in result.output

    def test_inventory_shows_acquisition_stamp(self, db):
        runner.invoke(
            app, ["lot", "add", "10", "40", "--id", "manual-1", "--date", "2024-01-01", "--db", db]
        )
        result = runner.invoke(app, ["inventory", "--db", db])
        assert result.exit_code == 0, result.output
        assert "2024-01-01 00:00" in result.output

    def test_edit_unknown_lot(self, db):
        result = runner.invoke(app, ["lot", "edit", "missing", "--cost", "41", "--db", db])
        assert result.exit_code == 1
        assert "Lot not found: missing" in result.output
