"""Decimal helpers shared by the ledger services."""

from decimal import Decimal

# Matches the Numeric(19, 4) columns
AMOUNT_SCALE = 4
AMOUNT_QUANTUM = Decimal("0.0001")
ZERO = Decimal("0")


def to_amount(value) -> Decimal:
    """
    Normalise a database or caller value to a 4-place Decimal.

    Some drivers hand back floats for aggregated Numeric columns,
    so the value goes through str() first.
    """
    if value is None:
        return ZERO.quantize(AMOUNT_QUANTUM)
    return Decimal(str(value)).quantize(AMOUNT_QUANTUM)


def decimal_places(value: Decimal) -> int:
    """Significant digits after the point; trailing zeros don't count."""
    exponent = value.normalize().as_tuple().exponent
    return max(0, -exponent)
