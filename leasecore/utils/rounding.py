"""Decimal rounding helpers for reported scores and money amounts."""
from decimal import ROUND_HALF_UP, Decimal


def round_half_up(value: float, places: int = 0) -> float:
    """
    Round ``value`` half away from zero to ``places`` decimals.

    Goes through ``repr`` so that 1.005 rounds the way it reads.
    """
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def round_score(value: float) -> int:
    """Round a confidence score to the nearest integer, halves up."""
    return int(round_half_up(value, 0))


def round_cents(value: float) -> float:
    return round_half_up(value, 2)
