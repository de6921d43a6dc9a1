"""Parsing of user-entered rates and commissions.

Both accept a comma as the decimal separator and return ``None`` for
anything unusable, leaving it to the caller to report the problem.
"""

import re
from decimal import Decimal, InvalidOperation

_RATE_RE = re.compile(r"^\d+(\.\d{1,3})?$")
_COMMISSION_RE = re.compile(r"^\d*\.?\d*$")

MAX_COMMISSION_PCT = Decimal("10")


def _clean(value: str | Decimal | int | float) -> str:
    return str(value).replace(",", ".").strip()


def parse_rate(value: str | Decimal | int | float | None) -> Decimal | None:
    """Positive rate with at most three decimals, e.g. ``"39,50"`` or ``"1.025"``."""
    if value is None or value == "":
        return None
    cleaned = _clean(value)
    if not _RATE_RE.match(cleaned):
        return None
    rate = Decimal(cleaned)
    return rate if rate > 0 else None


def parse_commission(value: str | Decimal | int | float | None) -> Decimal | None:
    """Commission percentage between 0 and 10 inclusive."""
    if value is None:
        return None
    cleaned = _clean(value)
    if not cleaned or cleaned == "." or not _COMMISSION_RE.match(cleaned):
        return None
    try:
        pct = Decimal(cleaned)
    except InvalidOperation:
        return None
    if pct < 0 or pct > MAX_COMMISSION_PCT:
        return None
    return pct
