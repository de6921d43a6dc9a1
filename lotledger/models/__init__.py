"""Data models for lotledger."""

from lotledger.models.enums import (
    AccountKind,
    Currency,
    EventKind,
    MovementDirection,
    TradeSide,
)
from lotledger.models.history import History, Movement, Trade
from lotledger.models.ledger import LedgerState
from lotledger.models.lot import Lot
from lotledger.models.reports import AuditEntry, InventorySummary, RecomputeRun, TradeQuote

__all__ = [
    "AccountKind",
    "AuditEntry",
    "Currency",
    "EventKind",
    "History",
    "InventorySummary",
    "LedgerState",
    "Lot",
    "Movement",
    "MovementDirection",
    "RecomputeRun",
    "Trade",
    "TradeQuote",
    "TradeSide",
]
