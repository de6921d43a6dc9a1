"""Report output models."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel

from lotledger.models.enums import Currency, TradeSide
from lotledger.models.lot import Lot


class InventorySummary(BaseModel):
    total_quantity: Decimal
    active_lot_count: int
    cheapest_lot: Lot | None = None
    inventory_cost: Decimal
    average_unit_cost: Decimal | None = None


class TradeQuote(BaseModel):
    """Units involved in a trade before it is recorded."""

    side: TradeSide
    currency: Currency
    amount: Decimal
    rate: Decimal
    commission_pct: Decimal
    quantity: Decimal
    commission: Decimal
    # Units received on a buy, units surrendered on a sell.
    net_quantity: Decimal


class RecomputeRun(BaseModel):
    reason: str
    trades: int
    movements: int
    lots: int
    total_quantity: Decimal
    total_gain: Decimal


class AuditEntry(BaseModel):
    timestamp: datetime
    engine: str
    operation: str
    inputs: dict
    output: dict
    notes: str | None = None
