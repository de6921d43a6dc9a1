"""Rounding primitives for quantities and money.

``truncate`` and ``normalize`` are not interchangeable. ``truncate`` floors,
so a commission derived from a gross quantity is never overstated in the
trader's favour; ``normalize`` is the two-decimal cleanup applied to every
stored quantity and total.
"""

from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal

ZERO = Decimal("0")
CENT = Decimal("0.01")


def truncate(value: Decimal, decimals: int = 2) -> Decimal:
    """Floor ``value`` at ``decimals`` places (toward negative infinity)."""
    return value.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_FLOOR)


def normalize(value: Decimal) -> Decimal:
    """Round half-up to two places and turn ``-0.00`` into ``0.00``."""
    rounded = value.quantize(CENT, rounding=ROUND_HALF_UP)
    if rounded.is_zero():
        return rounded.copy_abs()
    return rounded


def subtract_clamped(value: Decimal, amount: Decimal) -> Decimal:
    """``normalize(value - amount)``, never below zero.

    Over-consumption is absorbed here instead of being reported.
    """
    return max(normalize(value - amount), Decimal("0.00"))
