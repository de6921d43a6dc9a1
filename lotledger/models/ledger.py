"""Ledger state snapshot."""

from decimal import Decimal

from pydantic import BaseModel, Field

from lotledger.models.enums import Currency
from lotledger.models.lot import Lot


class LedgerState(BaseModel):
    """Lots in stored order plus the last trade rate seen per currency."""

    lots: list[Lot] = Field(default_factory=list)
    last_purchase_rates: dict[Currency, Decimal] = Field(default_factory=dict)
    last_sale_rates: dict[Currency, Decimal] = Field(default_factory=dict)

    def last_purchase_rate(self, currency: Currency = Currency.UYU) -> Decimal:
        return self.last_purchase_rates.get(currency, Decimal("0"))

    def last_sale_rate(self, currency: Currency = Currency.UYU) -> Decimal:
        return self.last_sale_rates.get(currency, Decimal("0"))
