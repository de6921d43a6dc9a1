"""Lot store: the ordered set of lots and the only code that changes them."""

import logging
from collections.abc import Iterable
from datetime import date, time
from decimal import Decimal

from lotledger.engines.numeric import ZERO, normalize, subtract_clamped
from lotledger.exceptions import LotNotFoundError
from lotledger.models.lot import START_OF_DAY, Lot

logger = logging.getLogger(__name__)


class LotStore:
    """Lots in insertion order, consumed first-in-first-out.

    Storage order matters twice: merges go to the first matching lot, and
    lots sharing an acquisition instant are consumed in storage order.
    Readers only ever get copies.
    """

    def __init__(self, lots: Iterable[Lot] | None = None):
        self._lots: list[Lot] = [lot.model_copy() for lot in lots or ()]

    def __len__(self) -> int:
        return len(self._lots)

    def snapshot(self) -> list[Lot]:
        """Copies of every lot, exhausted ones included, in storage order."""
        return [lot.model_copy() for lot in self._lots]

    def clear(self) -> None:
        self._lots = []

    def get(self, lot_id: str) -> Lot:
        return self._find(lot_id).model_copy()

    # --- Inventory inflow ---

    def add_or_merge(
        self,
        lot_id: str,
        acquired_date: date,
        acquired_time: time | None,
        unit_cost: Decimal,
        quantity: Decimal,
    ) -> Lot:
        """Add ``quantity`` at ``unit_cost``.

        An active lot with exactly the same unit cost absorbs the quantity
        and keeps its place in FIFO order; otherwise a new lot is appended.
        """
        for lot in self._lots:
            if lot.unit_cost == unit_cost and lot.remaining_quantity > 0:
                lot.original_quantity += quantity
                lot.remaining_quantity += quantity
                logger.debug("Merged %s units into lot %s @ %s", quantity, lot.id, unit_cost)
                return lot.model_copy()

        lot = Lot(
            id=lot_id,
            acquired_date=acquired_date,
            acquired_time=acquired_time or START_OF_DAY,
            unit_cost=unit_cost,
            original_quantity=quantity,
            remaining_quantity=quantity,
        )
        self._lots.append(lot)
        return lot.model_copy()

    # --- Inventory outflow ---

    def consume_fifo(self, quantity: Decimal, sale_rate: Decimal | None = None) -> Decimal:
        """Deplete active lots oldest first and return the realized gain.

        With ``sale_rate`` each consumed slice contributes
        ``consumed * (sale_rate - unit_cost)``; without it the gain is zero.
        Quantity beyond what the lots hold is dropped.
        """
        needed = quantity
        gain = ZERO
        for lot in self._active_lots():
            if needed <= 0:
                break
            consumed = min(lot.remaining_quantity, needed)
            if sale_rate is not None:
                gain += consumed * (sale_rate - lot.unit_cost)
            lot.remaining_quantity = subtract_clamped(lot.remaining_quantity, consumed)
            needed = normalize(needed - consumed)

        if needed > 0:
            logger.warning("FIFO consumption short by %s units; shortfall dropped", needed)
        return gain

    # --- Queries ---

    def active_lots_fifo(self) -> list[Lot]:
        """Active lots sorted by acquisition instant, ties in storage order."""
        return [lot.model_copy() for lot in self._active_lots()]

    def _active_lots(self) -> list[Lot]:
        return sorted(
            (lot for lot in self._lots if lot.remaining_quantity > 0),
            key=lambda lot: lot.fifo_key,
        )

    # --- Direct edits ---

    def insert(self, lot: Lot) -> Lot:
        """Append a lot as-is, without merging."""
        self._lots.append(lot.model_copy())
        return lot.model_copy()

    def edit(
        self,
        lot_id: str,
        *,
        unit_cost: Decimal | None = None,
        remaining_quantity: Decimal | None = None,
        acquired_date: date | None = None,
    ) -> Lot:
        """Overwrite a lot's cost, remaining quantity or date.

        The original quantity is raised to the new remaining quantity when
        the edit would otherwise leave ``remaining > original``; a negative
        remaining quantity is clamped to zero.
        """
        lot = self._find(lot_id)
        if unit_cost is not None:
            lot.unit_cost = unit_cost
        if remaining_quantity is not None:
            lot.remaining_quantity = subtract_clamped(remaining_quantity, ZERO)
            lot.original_quantity = max(lot.original_quantity, lot.remaining_quantity)
        if acquired_date is not None:
            lot.acquired_date = acquired_date
        return lot.model_copy()

    def delete(self, lot_id: str) -> Lot:
        return self._lots.pop(self._index(lot_id))

    def _find(self, lot_id: str) -> Lot:
        return self._lots[self._index(lot_id)]

    def _index(self, lot_id: str) -> int:
        for index, lot in enumerate(self._lots):
            if lot.id == lot_id:
                return index
        raise LotNotFoundError(lot_id)
