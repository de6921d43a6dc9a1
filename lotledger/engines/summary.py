"""Inventory summary: read-only figures derived from the active lots."""

from decimal import Decimal

from lotledger.engines.numeric import ZERO, normalize
from lotledger.models.lot import Lot
from lotledger.models.reports import InventorySummary


def total_quantity(lots: list[Lot]) -> Decimal:
    return normalize(sum((lot.remaining_quantity for lot in lots), ZERO))


def cheapest_lot(lots: list[Lot]) -> Lot | None:
    """Lowest unit cost; on ties the first lot in the given order wins."""
    cheapest: Lot | None = None
    for lot in lots:
        if lot.remaining_quantity <= 0:
            continue
        if cheapest is None or lot.unit_cost < cheapest.unit_cost:
            cheapest = lot
    return cheapest


def summarize(lots: list[Lot]) -> InventorySummary:
    """Summarize active lots, expected in FIFO order."""
    active = [lot for lot in lots if lot.remaining_quantity > 0]
    held = sum((lot.remaining_quantity for lot in active), ZERO)
    cost = sum((lot.remaining_cost for lot in active), ZERO)
    return InventorySummary(
        total_quantity=normalize(held),
        active_lot_count=len(active),
        cheapest_lot=cheapest_lot(active),
        inventory_cost=normalize(cost),
        average_unit_cost=normalize(cost / held) if held > 0 else None,
    )
