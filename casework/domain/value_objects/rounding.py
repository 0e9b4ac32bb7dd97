"""Half-up rounding for percentages and averages shown to staff."""

from decimal import ROUND_HALF_UP, Decimal


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round like a dashboard does (2.5 → 3), not like ``round()`` (2.5 → 2)."""
    quantum = Decimal(1).scaleb(-ndigits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))
