"""Data access layer for lotledger."""

import json
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import time
from decimal import Decimal
from uuid import uuid4

from lotledger.models.enums import Currency
from lotledger.models.history import History, Movement, Trade
from lotledger.models.ledger import LedgerState
from lotledger.models.lot import Lot
from lotledger.models.reports import AuditEntry, RecomputeRun

PURCHASE = "purchase"
SALE = "sale"


def _str_or_none(value: Decimal | None) -> str | None:
    return str(value) if value is not None else None


def _time_str(value: time) -> str:
    return value.isoformat()


class LedgerRepository:
    """CRUD operations for history, lots and ledger bookkeeping."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self._in_batch = False

    def _rows(self, cursor: sqlite3.Cursor) -> list[dict]:
        columns = [desc[0] for desc in cursor.description]
        return [dict(zip(columns, row)) for row in cursor.fetchall()]

    def _commit(self) -> None:
        if not self._in_batch:
            self.conn.commit()

    @contextmanager
    def batch(self) -> Iterator[None]:
        """Group writes into one transaction, rolled back if any write fails.

        A batch opened inside another joins the outer one.
        """
        if self._in_batch:
            yield
            return
        self._in_batch = True
        try:
            with self.conn:
                yield
        finally:
            self._in_batch = False

    # --- Trades ---

    def save_trade(self, trade: Trade) -> None:
        """Insert a trade, or update it in place keeping its recording order."""
        self.conn.execute(
            """INSERT INTO trades
               (id, side, trade_date, trade_time, amount, rate, currency,
                commission_pct, bank_commission, bank, gain)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
               ON CONFLICT(id) DO UPDATE SET
                side = excluded.side,
                trade_date = excluded.trade_date,
                trade_time = excluded.trade_time,
                amount = excluded.amount,
                rate = excluded.rate,
                currency = excluded.currency,
                commission_pct = excluded.commission_pct,
                bank_commission = excluded.bank_commission,
                bank = excluded.bank,
                gain = excluded.gain""",
            (
                trade.id,
                trade.side.value,
                trade.trade_date.isoformat(),
                _time_str(trade.trade_time),
                str(trade.amount),
                str(trade.rate),
                trade.currency.value,
                _str_or_none(trade.commission_pct),
                str(trade.bank_commission),
                trade.bank,
                _str_or_none(trade.gain),
            ),
        )
        self._commit()

    def get_trades(self) -> list[Trade]:
        """All trades in recording order."""
        cursor = self.conn.execute("SELECT * FROM trades ORDER BY seq")
        return [Trade(**row) for row in self._rows(cursor)]

    def update_trade_gains(self, trades: list[Trade]) -> None:
        self.conn.executemany(
            "UPDATE trades SET gain = ? WHERE id = ?",
            [(_str_or_none(trade.gain), trade.id) for trade in trades],
        )
        self._commit()

    def delete_trade(self, trade_id: str) -> bool:
        cursor = self.conn.execute("DELETE FROM trades WHERE id = ?", (trade_id,))
        self._commit()
        return cursor.rowcount > 0

    # --- Movements ---

    def save_movement(self, movement: Movement) -> None:
        """Insert a movement, or update it in place keeping its recording order."""
        self.conn.execute(
            """INSERT INTO movements
               (id, direction, account, movement_date, movement_time, amount,
                reference_rate, bank, description)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
               ON CONFLICT(id) DO UPDATE SET
                direction = excluded.direction,
                account = excluded.account,
                movement_date = excluded.movement_date,
                movement_time = excluded.movement_time,
                amount = excluded.amount,
                reference_rate = excluded.reference_rate,
                bank = excluded.bank,
                description = excluded.description""",
            (
                movement.id,
                movement.direction.value,
                movement.account.value,
                movement.movement_date.isoformat(),
                _time_str(movement.movement_time),
                str(movement.amount),
                _str_or_none(movement.reference_rate),
                movement.bank,
                movement.description,
            ),
        )
        self._commit()

    def get_movements(self) -> list[Movement]:
        """All movements in recording order."""
        cursor = self.conn.execute("SELECT * FROM movements ORDER BY seq")
        return [Movement(**row) for row in self._rows(cursor)]

    def delete_movement(self, movement_id: str) -> bool:
        cursor = self.conn.execute("DELETE FROM movements WHERE id = ?", (movement_id,))
        self._commit()
        return cursor.rowcount > 0

    # --- History ---

    def load_history(self) -> History:
        return History(trades=self.get_trades(), movements=self.get_movements())

    # --- Ledger state ---

    def save_state(self, state: LedgerState) -> None:
        """Replace the stored lots and last rates with ``state``."""
        with self.batch():
            self.conn.execute("DELETE FROM lots")
            self.conn.executemany(
                """INSERT INTO lots
                   (position, id, acquired_date, acquired_time, unit_cost,
                    original_quantity, remaining_quantity)
                   VALUES (?, ?, ?, ?, ?, ?, ?)""",
                [
                    (
                        position,
                        lot.id,
                        lot.acquired_date.isoformat(),
                        _time_str(lot.acquired_time),
                        str(lot.unit_cost),
                        str(lot.original_quantity),
                        str(lot.remaining_quantity),
                    )
                    for position, lot in enumerate(state.lots)
                ],
            )
            self.conn.execute("DELETE FROM last_rates")
            rates = [
                (PURCHASE, currency.value, str(rate))
                for currency, rate in state.last_purchase_rates.items()
            ] + [
                (SALE, currency.value, str(rate))
                for currency, rate in state.last_sale_rates.items()
            ]
            self.conn.executemany(
                "INSERT INTO last_rates (kind, currency, rate) VALUES (?, ?, ?)",
                rates,
            )

    def get_lots(self) -> list[Lot]:
        cursor = self.conn.execute("SELECT * FROM lots ORDER BY position")
        return [Lot(**row) for row in self._rows(cursor)]

    def load_state(self) -> LedgerState:
        purchase: dict[Currency, Decimal] = {}
        sale: dict[Currency, Decimal] = {}
        cursor = self.conn.execute("SELECT kind, currency, rate FROM last_rates")
        for kind, currency, rate in cursor.fetchall():
            target = purchase if kind == PURCHASE else sale
            target[Currency(currency)] = Decimal(rate)
        return LedgerState(
            lots=self.get_lots(),
            last_purchase_rates=purchase,
            last_sale_rates=sale,
        )

    # --- Recompute runs ---

    def save_recompute_run(self, run: RecomputeRun) -> str:
        """Insert a recompute run record. Returns the run ID."""
        run_id = str(uuid4())
        self.conn.execute(
            """INSERT INTO recompute_runs
               (id, reason, trades, movements, lots, total_quantity, total_gain)
               VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (
                run_id,
                run.reason,
                run.trades,
                run.movements,
                run.lots,
                str(run.total_quantity),
                str(run.total_gain),
            ),
        )
        self._commit()
        return run_id

    def get_recompute_runs(self) -> list[dict]:
        cursor = self.conn.execute("SELECT * FROM recompute_runs ORDER BY run_at, rowid")
        return self._rows(cursor)

    # --- Audit log ---

    def save_audit_entry(self, entry: AuditEntry) -> None:
        """Insert an audit log entry."""
        self.conn.execute(
            """INSERT INTO audit_log (timestamp, engine, operation, inputs, output, notes)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (
                entry.timestamp.isoformat(),
                entry.engine,
                entry.operation,
                json.dumps(entry.inputs, default=str),
                json.dumps(entry.output, default=str),
                entry.notes,
            ),
        )
        self._commit()

    def get_audit_entries(self, operation: str | None = None) -> list[dict]:
        if operation:
            cursor = self.conn.execute(
                "SELECT * FROM audit_log WHERE operation = ? ORDER BY id", (operation,)
            )
        else:
            cursor = self.conn.execute("SELECT * FROM audit_log ORDER BY id")
        rows = self._rows(cursor)
        for record in rows:
            record["inputs"] = json.loads(record["inputs"])
            record["output"] = json.loads(record["output"])
        return rows
