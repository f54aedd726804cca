"""Decimal rounding helpers shared by enrichment and scoring."""

from decimal import Decimal, ROUND_HALF_UP


def round_half_up(value: float, ndigits: int = 0) -> float:
    """
    Round halves away from zero (2.5 -> 3, 0.125 -> 0.13).

    Goes through str() so binary float noise does not flip a tie.
    """
    quantum = Decimal(1).scaleb(-ndigits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def round_points(value: float) -> int:
    """Round a partial point award to a whole number of points."""
    return int(round_half_up(value))
