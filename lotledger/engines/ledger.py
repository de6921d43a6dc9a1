"""Live FIFO ledger and full-history recomputation.

``Ledger`` owns a ``LotStore`` plus the last trade rates and applies events
one at a time (the incremental path). ``recompute_all`` replays a complete
history through the very same methods on an empty ledger (the authoritative
path), so both paths agree for any history replayed in timeline order.
"""

import logging
from datetime import date, time
from decimal import Decimal

from lotledger.config import DEFAULT_COMMISSION_PCT, REFERENCE_CURRENCY
from lotledger.engines import summary as inventory_summary
from lotledger.engines.lot_store import LotStore
from lotledger.engines.numeric import ZERO, truncate
from lotledger.engines.timeline import build_timeline
from lotledger.models.enums import Currency, EventKind, MovementDirection, TradeSide
from lotledger.models.history import History, Movement, Trade
from lotledger.models.ledger import LedgerState
from lotledger.models.lot import Lot
from lotledger.models.reports import InventorySummary, TradeQuote

logger = logging.getLogger(__name__)

FALLBACK_UNIT_COST = Decimal("1")


def quote_trade(
    side: TradeSide,
    amount: Decimal,
    rate: Decimal,
    commission_pct: Decimal,
    currency: Currency = Currency.UYU,
) -> TradeQuote:
    """Split a trade into gross units, platform commission and net units.

    The commission is truncated at two decimals. A buyer receives
    ``quantity - commission``; a seller surrenders ``quantity + commission``.
    """
    quantity = amount / rate
    commission = truncate(quantity * commission_pct / 100, 2)
    net = quantity - commission if side == TradeSide.BUY else quantity + commission
    return TradeQuote(
        side=side,
        currency=currency,
        amount=amount,
        rate=rate,
        commission_pct=commission_pct,
        quantity=quantity,
        commission=commission,
        net_quantity=net,
    )


class Ledger:
    """FIFO lot ledger for one asset."""

    def __init__(
        self,
        state: LedgerState | None = None,
        *,
        default_commission_pct: Decimal = DEFAULT_COMMISSION_PCT,
        commission_defaults: dict[Currency, Decimal] | None = None,
        reference_currency: Currency = REFERENCE_CURRENCY,
    ):
        state = state or LedgerState()
        self.default_commission_pct = default_commission_pct
        self.commission_defaults = dict(commission_defaults or {})
        self.reference_currency = reference_currency
        self._store = LotStore(state.lots)
        self._last_purchase_rates: dict[Currency, Decimal] = dict(state.last_purchase_rates)
        self._last_sale_rates: dict[Currency, Decimal] = dict(state.last_sale_rates)

    @property
    def state(self) -> LedgerState:
        return LedgerState(
            lots=self._store.snapshot(),
            last_purchase_rates=dict(self._last_purchase_rates),
            last_sale_rates=dict(self._last_sale_rates),
        )

    def last_purchase_rate(self, currency: Currency = Currency.UYU) -> Decimal:
        return self._last_purchase_rates.get(currency, ZERO)

    def last_sale_rate(self, currency: Currency = Currency.UYU) -> Decimal:
        return self._last_sale_rates.get(currency, ZERO)

    def default_commission(self, currency: Currency = Currency.UYU) -> Decimal:
        """Commission for a trade in ``currency`` that carries none."""
        return self.commission_defaults.get(currency, self.default_commission_pct)

    # --- Incremental mutators ---

    def apply_purchase(
        self,
        lot_id: str,
        acquired_date: date,
        acquired_time: time | None,
        unit_cost: Decimal,
        quantity: Decimal,
        currency: Currency = Currency.UYU,
    ) -> Lot:
        lot = self._store.add_or_merge(lot_id, acquired_date, acquired_time, unit_cost, quantity)
        self._last_purchase_rates[currency] = unit_cost
        return lot

    def apply_sale(
        self, quantity: Decimal, rate: Decimal, currency: Currency = Currency.UYU
    ) -> Decimal:
        """Consume ``quantity`` FIFO at ``rate``; returns the realized gain."""
        gain = self._store.consume_fifo(quantity, rate)
        self._last_sale_rates[currency] = rate
        return gain

    def apply_inflow(
        self,
        lot_id: str,
        acquired_date: date,
        acquired_time: time | None,
        quantity: Decimal,
        reference_rate: Decimal | None = None,
    ) -> Lot:
        """Deposit units priced at ``reference_rate``.

        Without a usable rate the last purchase rate of the reference
        currency is used, and 1 when there has been no purchase yet.
        """
        unit_cost = (
            reference_rate
            or self.last_purchase_rate(self.reference_currency)
            or FALLBACK_UNIT_COST
        )
        return self._store.add_or_merge(lot_id, acquired_date, acquired_time, unit_cost, quantity)

    def apply_outflow(self, quantity: Decimal) -> None:
        self._store.consume_fifo(quantity)

    def quote(
        self,
        side: TradeSide,
        amount: Decimal,
        rate: Decimal,
        currency: Currency = Currency.UYU,
        commission_pct: Decimal | None = None,
    ) -> TradeQuote:
        if commission_pct is None:
            commission_pct = self.default_commission(currency)
        return quote_trade(side, amount, rate, commission_pct, currency)

    def apply_trade(self, trade: Trade) -> Decimal:
        """Apply a buy or sell and store its gain on ``trade``."""
        quote = self.quote(trade.side, trade.amount, trade.rate, trade.currency, trade.commission_pct)
        if trade.side == TradeSide.BUY:
            self.apply_purchase(
                trade.id,
                trade.trade_date,
                trade.trade_time,
                trade.rate,
                quote.net_quantity,
                trade.currency,
            )
            trade.gain = ZERO - trade.bank_commission
        else:
            trade.gain = self.apply_sale(quote.net_quantity, trade.rate, trade.currency)
        return trade.gain

    def apply_movement(self, movement: Movement) -> None:
        if not movement.affects_inventory:
            return
        if movement.direction == MovementDirection.INFLOW:
            self.apply_inflow(
                movement.id,
                movement.movement_date,
                movement.movement_time,
                movement.amount,
                movement.reference_rate,
            )
        else:
            self.apply_outflow(movement.amount)

    # --- Authoritative rebuild ---

    def recompute(self, history: History) -> LedgerState:
        """Discard every lot and rate, then replay ``history`` in timeline order."""
        self._store.clear()
        self._last_purchase_rates = {}
        self._last_sale_rates = {}

        timeline = build_timeline(history)
        for event in timeline:
            if event.kind == EventKind.TRADE:
                self.apply_trade(event.record)
            else:
                self.apply_movement(event.record)

        logger.info(
            "Recomputed ledger from %d events: %d lots, %s units held",
            len(timeline),
            len(self._store),
            self.total_quantity(),
        )
        return self.state

    # --- Direct lot edits ---

    def add_lot(self, lot: Lot) -> Lot:
        return self._store.insert(lot)

    def edit_lot(
        self,
        lot_id: str,
        *,
        unit_cost: Decimal | None = None,
        remaining_quantity: Decimal | None = None,
        acquired_date: date | None = None,
    ) -> Lot:
        return self._store.edit(
            lot_id,
            unit_cost=unit_cost,
            remaining_quantity=remaining_quantity,
            acquired_date=acquired_date,
        )

    def delete_lot(self, lot_id: str) -> Lot:
        return self._store.delete(lot_id)

    def get_lot(self, lot_id: str) -> Lot:
        return self._store.get(lot_id)

    # --- Read side ---

    def active_lots(self) -> list[Lot]:
        return self._store.active_lots_fifo()

    def total_quantity(self) -> Decimal:
        return inventory_summary.total_quantity(self._store.active_lots_fifo())

    def cheapest_lot(self) -> Lot | None:
        return inventory_summary.cheapest_lot(self._store.active_lots_fifo())

    def summary(self) -> InventorySummary:
        return inventory_summary.summarize(self._store.active_lots_fifo())


def recompute_all(
    history: History,
    *,
    default_commission_pct: Decimal = DEFAULT_COMMISSION_PCT,
    commission_defaults: dict[Currency, Decimal] | None = None,
    reference_currency: Currency = REFERENCE_CURRENCY,
) -> LedgerState:
    """Rebuild the ledger state from ``history`` alone.

    Every trade in ``history`` gets its ``gain`` (re)written.
    """
    ledger = Ledger(
        default_commission_pct=default_commission_pct,
        commission_defaults=commission_defaults,
        reference_currency=reference_currency,
    )
    return ledger.recompute(history)


def needs_recompute(history: History) -> bool:
    """True when any trade is missing its computed gain."""
    return any(trade.gain is None for trade in history.trades)
