"""
Rounding for reported figures.

Every rounded value in the journal rounds halves away from zero
(12.5 -> 13, 0.125 -> 0.13), not to the nearest even digit.
"""

from decimal import ROUND_HALF_UP, Decimal


def round_half_up(value: float, decimals: int = 0) -> float:
    """
    Round a number to a fixed count of decimals, halves away from zero.

    The float is read through its shortest repr, so 1.005 rounds to 1.01.

    Examples:
        >>> round_half_up(12.5)
        13.0
        >>> round_half_up(0.125, 2)
        0.13
        >>> round_half_up(-2.5)
        -3.0
    """
    quantum = Decimal(1).scaleb(-decimals)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))
