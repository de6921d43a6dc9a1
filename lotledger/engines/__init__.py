"""Ledger computation engines."""

from lotledger.engines.bookkeeping import BookkeepingEngine
from lotledger.engines.ledger import Ledger, needs_recompute, quote_trade, recompute_all
from lotledger.engines.lot_store import LotStore
from lotledger.engines.timeline import TimelineEvent, build_timeline

__all__ = [
    "BookkeepingEngine",
    "Ledger",
    "LotStore",
    "TimelineEvent",
    "build_timeline",
    "needs_recompute",
    "quote_trade",
    "recompute_all",
]
