"""Bookkeeping engine: records events against a persisted ledger.

Owns the single live ``Ledger`` for a database. Every mutation is applied
in memory first and written to the repository afterwards, all writes of one
operation in a single transaction. A failed write is logged and reported
through ``warnings`` but never undoes the in-memory change.
"""

import logging
import sqlite3
from collections.abc import Callable
from datetime import date, datetime, time
from decimal import Decimal

from lotledger.config import DEFAULT_COMMISSION_PCT, REFERENCE_CURRENCY
from lotledger.db.repository import LedgerRepository
from lotledger.engines.ledger import Ledger, needs_recompute
from lotledger.engines.numeric import ZERO
from lotledger.exceptions import DataValidationError, EventNotFoundError, PersistenceError
from lotledger.models.enums import Currency
from lotledger.models.history import History, Movement, Trade
from lotledger.models.lot import Lot
from lotledger.models.reports import AuditEntry, InventorySummary, RecomputeRun

logger = logging.getLogger(__name__)


class BookkeepingEngine:
    """Incremental recording with a full rebuild whenever history changes shape."""

    def __init__(
        self,
        repo: LedgerRepository,
        *,
        default_commission_pct: Decimal = DEFAULT_COMMISSION_PCT,
        commission_defaults: dict[Currency, Decimal] | None = None,
        reference_currency: Currency = REFERENCE_CURRENCY,
    ):
        self.repo = repo
        self.warnings: list[str] = []
        self.history: History = repo.load_history()
        self.ledger = Ledger(
            repo.load_state(),
            default_commission_pct=default_commission_pct,
            commission_defaults=commission_defaults,
            reference_currency=reference_currency,
        )
        if needs_recompute(self.history):
            logger.info("Trades without computed gain found; rebuilding ledger")
            self.recalculate(reason="integrity")

    # --- Recording ---

    def record_trade(self, trade: Trade) -> Decimal:
        """Apply a new trade and return its gain."""
        if self.history.find_trade(trade.id) is not None:
            raise DataValidationError("id", f"trade {trade.id} already recorded")

        backdated = not self._is_latest(trade.trade_date, trade.trade_time)
        self.history.trades.append(trade)
        if backdated:
            run = self._rebuild(f"backdated trade {trade.id}")
            self._persist("trade", lambda: self._save_with_rebuild(
                run, lambda: self.repo.save_trade(trade)
            ))
            return trade.gain

        gain = self.ledger.apply_trade(trade)
        self._persist("trade", lambda: self._save_with_state(
            lambda: self.repo.save_trade(trade)
        ))
        return gain

    def record_movement(self, movement: Movement) -> None:
        if self.history.find_movement(movement.id) is not None:
            raise DataValidationError("id", f"movement {movement.id} already recorded")

        backdated = movement.affects_inventory and not self._is_latest(
            movement.movement_date, movement.movement_time
        )
        self.history.movements.append(movement)
        if backdated:
            run = self._rebuild(f"backdated movement {movement.id}")
            self._persist("movement", lambda: self._save_with_rebuild(
                run, lambda: self.repo.save_movement(movement)
            ))
            return

        self.ledger.apply_movement(movement)
        self._persist("movement", lambda: self._save_with_state(
            lambda: self.repo.save_movement(movement)
        ))

    def import_history(self, history: History) -> dict:
        """Append events not seen before and rebuild once.

        Returns a summary dict with the number of trades and movements added
        and a message for every record skipped as a duplicate.
        """
        skipped: list[str] = []
        new_trades: list[Trade] = []
        new_movements: list[Movement] = []

        for trade in history.trades:
            if self.history.find_trade(trade.id) is not None:
                skipped.append(f"Duplicate trade skipped: {trade.id}")
                continue
            self.history.trades.append(trade)
            new_trades.append(trade)

        for movement in history.movements:
            if self.history.find_movement(movement.id) is not None:
                skipped.append(f"Duplicate movement skipped: {movement.id}")
                continue
            self.history.movements.append(movement)
            new_movements.append(movement)

        if new_trades or new_movements:
            def save_events() -> None:
                for trade in new_trades:
                    self.repo.save_trade(trade)
                for movement in new_movements:
                    self.repo.save_movement(movement)

            run = self._rebuild("import")
            self._persist("import", lambda: self._save_with_rebuild(run, save_events))

        return {
            "trades": len(new_trades),
            "movements": len(new_movements),
            "skipped": skipped,
        }

    # --- Deletion ---

    def delete_trade(self, trade_id: str) -> Trade:
        trade = self.history.find_trade(trade_id)
        if trade is None:
            raise EventNotFoundError("trade", trade_id)
        self.history.trades = [t for t in self.history.trades if t.id != trade_id]
        run = self._rebuild(f"trade {trade_id} deleted")
        self._persist("trade deletion", lambda: self._save_with_rebuild(
            run, lambda: self.repo.delete_trade(trade_id)
        ))
        return trade

    def delete_movement(self, movement_id: str) -> Movement:
        """Remove a movement; only asset movements trigger a rebuild."""
        movement = self.history.find_movement(movement_id)
        if movement is None:
            raise EventNotFoundError("movement", movement_id)
        self.history.movements = [m for m in self.history.movements if m.id != movement_id]
        if not movement.affects_inventory:
            self._persist("movement deletion", lambda: self.repo.delete_movement(movement_id))
            return movement

        run = self._rebuild(f"movement {movement_id} deleted")
        self._persist("movement deletion", lambda: self._save_with_rebuild(
            run, lambda: self.repo.delete_movement(movement_id)
        ))
        return movement

    # --- Rebuild ---

    def recalculate(self, reason: str = "manual") -> RecomputeRun:
        """Rebuild lots and every trade gain from the full history."""
        run = self._rebuild(reason)
        self._persist("recompute", lambda: self._save_with_rebuild(run))
        return run

    def _rebuild(self, reason: str) -> RecomputeRun:
        self.ledger.recompute(self.history)
        return RecomputeRun(
            reason=reason,
            trades=len(self.history.trades),
            movements=sum(1 for m in self.history.movements if m.affects_inventory),
            lots=len(self.ledger.active_lots()),
            total_quantity=self.ledger.total_quantity(),
            total_gain=sum((t.gain for t in self.history.trades if t.gain is not None), ZERO),
        )

    # --- Direct lot edits ---

    def add_lot(self, lot: Lot) -> Lot:
        added = self.ledger.add_lot(lot)
        self._persist("lot", self._save_state)
        return added

    def edit_lot(
        self,
        lot_id: str,
        *,
        unit_cost: Decimal | None = None,
        remaining_quantity: Decimal | None = None,
        acquired_date: date | None = None,
    ) -> Lot:
        lot = self.ledger.edit_lot(
            lot_id,
            unit_cost=unit_cost,
            remaining_quantity=remaining_quantity,
            acquired_date=acquired_date,
        )
        self._persist("lot", self._save_state)
        return lot

    def delete_lot(self, lot_id: str) -> Lot:
        lot = self.ledger.delete_lot(lot_id)
        self._persist("lot", self._save_state)
        return lot

    # --- Read side ---

    def available_quantity(self) -> Decimal:
        return self.ledger.total_quantity()

    def can_consume(self, quantity: Decimal) -> bool:
        """Whether the inventory covers ``quantity`` units."""
        return self.ledger.total_quantity() >= quantity

    def summary(self) -> InventorySummary:
        return self.ledger.summary()

    # --- Internals ---

    def _is_latest(self, event_date: date, event_time: time) -> bool:
        """True when the stamp is strictly after every inventory event on record."""
        stamps = [(t.trade_date, t.trade_time) for t in self.history.trades] + [
            (m.movement_date, m.movement_time)
            for m in self.history.movements
            if m.affects_inventory
        ]
        return not stamps or (event_date, event_time) > max(stamps)

    def _save_state(self) -> None:
        self.repo.save_state(self.ledger.state)

    def _save_with_state(self, save_event: Callable[[], object]) -> None:
        save_event()
        self._save_state()

    def _save_with_rebuild(
        self, run: RecomputeRun, save_event: Callable[[], object] | None = None
    ) -> None:
        """Write an event change together with the rebuild it caused."""
        if save_event is not None:
            save_event()
        self.repo.update_trade_gains(self.history.trades)
        self._save_state()
        self.repo.save_recompute_run(run)
        self.repo.save_audit_entry(AuditEntry(
            timestamp=datetime.now(),
            engine="BookkeepingEngine",
            operation="recompute",
            inputs={"reason": run.reason},
            output={
                "trades": run.trades,
                "movements": run.movements,
                "lots": run.lots,
                "total_quantity": run.total_quantity,
                "total_gain": run.total_gain,
            },
        ))

    def _persist(self, operation: str, write: Callable[[], object]) -> bool:
        """Run ``write`` as one transaction; a failure leaves the database untouched."""
        try:
            with self.repo.batch():
                write()
        except sqlite3.Error as exc:
            error = PersistenceError(operation, str(exc))
            logger.error("%s; in-memory ledger kept", error)
            self.warnings.append(str(error))
            return False
        return True
