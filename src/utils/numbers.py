"""Decimal helpers for scores and percentages."""

from decimal import ROUND_HALF_UP, Decimal


def to_decimal(value: float | int | Decimal) -> Decimal:
    """Convert through ``str`` so 0.3 stays 0.3 instead of its binary expansion."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_half_up(value: Decimal) -> int:
    """Round to the nearest integer, halves away from zero (57.5 -> 58)."""
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))
