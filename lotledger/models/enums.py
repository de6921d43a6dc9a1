"""Enumerations for the lot ledger."""

from enum import StrEnum


class TradeSide(StrEnum):
    BUY = "buy"
    SELL = "sell"


class Currency(StrEnum):
    UYU = "UYU"
    USD = "USD"


class MovementDirection(StrEnum):
    INFLOW = "inflow"
    OUTFLOW = "outflow"


class AccountKind(StrEnum):
    ASSET = "asset"
    BANK = "bank"


class EventKind(StrEnum):
    TRADE = "trade"
    INFLOW = "inflow"
    OUTFLOW = "outflow"
