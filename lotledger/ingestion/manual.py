"""JSON history adapter.

Reads a file of the shape::

    {
      "trades": [
        {"id": "t1", "side": "buy", "date": "2024-05-02", "time": "09:15",
         "amount": "40000", "rate": "40", "currency": "UYU",
         "commission_pct": "0.14", "bank_commission": "0"}
      ],
      "movements": [
        {"id": "m1", "direction": "inflow", "account": "asset",
         "date": "2024-05-03", "time": "18:00", "amount": "250",
         "reference_rate": "41.2"}
      ]
    }

``time`` defaults to ``00:00``, ``id`` to a fresh UUID. A ``gain`` present on
a trade is kept as-is; a missing one marks the ledger for recomputation.
"""

import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from uuid import uuid4

from lotledger.exceptions import HistoryImportError
from lotledger.ingestion.base import BaseAdapter, ImportResult
from lotledger.ingestion.parsers import MAX_COMMISSION_PCT
from lotledger.models.enums import MovementDirection, TradeSide
from lotledger.models.history import History, Movement, Trade


class ManualAdapter(BaseAdapter):
    """Imports a JSON history export into domain models."""

    def parse(self, file_path: Path) -> ImportResult:
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        try:
            raw = json.loads(file_path.read_text())
        except json.JSONDecodeError as exc:
            raise HistoryImportError(file_path.name, f"invalid JSON ({exc})") from exc

        if not isinstance(raw, dict):
            raise HistoryImportError(
                file_path.name, "expected an object with 'trades' and/or 'movements'"
            )

        try:
            trades = [self._parse_trade(record) for record in raw.get("trades") or []]
            movements = [self._parse_movement(record) for record in raw.get("movements") or []]
        except (ValueError, InvalidOperation, KeyError) as exc:
            raise HistoryImportError(file_path.name, str(exc)) from exc

        return ImportResult(
            source=file_path.name,
            history=History(trades=trades, movements=movements),
        )

    def validate(self, data: ImportResult) -> list[str]:
        """Warn about records that import fine but deserve a second look."""
        warnings: list[str] = []

        warnings.extend(self._duplicate_ids("trade", [t.id for t in data.history.trades]))
        warnings.extend(
            self._duplicate_ids("movement", [m.id for m in data.history.movements])
        )

        for trade in data.history.trades:
            if trade.commission_pct is not None and trade.commission_pct > MAX_COMMISSION_PCT:
                warnings.append(
                    f"Trade {trade.id}: commission {trade.commission_pct}% is above "
                    f"{MAX_COMMISSION_PCT}%"
                )
            if trade.side == TradeSide.SELL and trade.bank_commission > 0:
                warnings.append(
                    f"Trade {trade.id}: bank commission on a sell is ignored"
                )

        for movement in data.history.movements:
            if (
                movement.affects_inventory
                and movement.direction == MovementDirection.INFLOW
                and not movement.reference_rate
            ):
                warnings.append(
                    f"Movement {movement.id}: inflow without reference rate will be "
                    "priced at the last purchase rate"
                )

        return warnings

    # --- Parsers ---

    def _parse_trade(self, record: dict) -> Trade:
        return Trade(
            id=str(record.get("id") or uuid4()),
            side=TradeSide(record["side"]),
            trade_date=record["date"],
            trade_time=record.get("time") or "00:00",
            amount=_decimal(record["amount"]),
            rate=_decimal(record["rate"]),
            currency=record.get("currency", "UYU"),
            commission_pct=_decimal_or_none(record.get("commission_pct")),
            bank_commission=_decimal_or_none(record.get("bank_commission")) or Decimal("0"),
            bank=record.get("bank"),
            gain=_decimal_or_none(record.get("gain")),
        )

    def _parse_movement(self, record: dict) -> Movement:
        return Movement(
            id=str(record.get("id") or uuid4()),
            direction=MovementDirection(record["direction"]),
            account=record.get("account", "asset"),
            movement_date=record["date"],
            movement_time=record.get("time") or "00:00",
            amount=_decimal(record["amount"]),
            reference_rate=_decimal_or_none(record.get("reference_rate")),
            bank=record.get("bank"),
            description=record.get("description"),
        )

    @staticmethod
    def _duplicate_ids(kind: str, ids: list[str]) -> list[str]:
        seen: set[str] = set()
        warnings = []
        for event_id in ids:
            if event_id in seen:
                warnings.append(f"Duplicate {kind} id {event_id}")
            seen.add(event_id)
        return warnings


def _decimal(value) -> Decimal:
    return Decimal(str(value).replace(",", "."))


def _decimal_or_none(value) -> Decimal | None:
    if value is None or value == "":
        return None
    return _decimal(value)
