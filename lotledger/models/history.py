"""Historical events: trades and inventory movements."""

from datetime import date, time
from decimal import Decimal

from pydantic import BaseModel, Field

from lotledger.models.enums import AccountKind, Currency, MovementDirection, TradeSide
from lotledger.models.lot import START_OF_DAY


class Trade(BaseModel):
    """A purchase or sale of the asset against a bank currency.

    ``amount`` is the money paid (buy) or received (sell); the asset quantity
    is ``amount / rate``. ``gain`` is filled in by the ledger: realized gain
    for a sale, the negated bank commission for a purchase. ``None`` means the
    gain was never computed and the ledger needs a rebuild.
    """

    id: str
    side: TradeSide
    trade_date: date
    trade_time: time = START_OF_DAY
    amount: Decimal = Field(gt=0)
    rate: Decimal = Field(gt=0)
    currency: Currency = Currency.UYU
    commission_pct: Decimal | None = Field(default=None, ge=0)
    bank_commission: Decimal = Field(default=Decimal("0"), ge=0)
    bank: str | None = None
    gain: Decimal | None = None

    @property
    def quantity(self) -> Decimal:
        return self.amount / self.rate


class Movement(BaseModel):
    """External deposit into or withdrawal from an account.

    Only ``AccountKind.ASSET`` movements touch the lots; bank movements
    belong to the bank balance bookkeeping and are carried along untouched.
    """

    id: str
    direction: MovementDirection
    account: AccountKind = AccountKind.ASSET
    movement_date: date
    movement_time: time = START_OF_DAY
    amount: Decimal = Field(gt=0)
    reference_rate: Decimal | None = Field(default=None, ge=0)
    bank: str | None = None
    description: str | None = None

    @property
    def affects_inventory(self) -> bool:
        return self.account == AccountKind.ASSET


class History(BaseModel):
    """Complete event history, each list in recording order."""

    trades: list[Trade] = Field(default_factory=list)
    movements: list[Movement] = Field(default_factory=list)

    def find_trade(self, trade_id: str) -> Trade | None:
        for trade in self.trades:
            if trade.id == trade_id:
                return trade
        return None

    def find_movement(self, movement_id: str) -> Movement | None:
        for movement in self.movements:
            if movement.id == movement_id:
                return movement
        return None
