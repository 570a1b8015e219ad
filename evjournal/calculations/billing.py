"""
Trip Billing Calculations

Business trips flagged as billed are invoiced by distance tier:
- under 11 km: flat local rate
- 11 to 30 km: flat medium rate
- over 30 km: per-km rate picked by the vehicle's fiscal power
"""

from typing import Optional

from .constants import (
    BILLING_LOCAL_MAX_KM,
    BILLING_MEDIUM_MAX_KM,
    DEFAULT_FISCAL_POWER,
    MONEY_DECIMALS,
    RATE_PER_KM_4CV,
    RATE_PER_KM_5CV_AND_MORE,
    RATE_PER_KM_UP_TO_3CV,
)
from .rounding import round_half_up


def get_rate_per_km(fiscal_power: Optional[int]) -> float:
    """
    Per-km billing rate for long trips.

    Args:
        fiscal_power: Vehicle fiscal power (CV); None or 0 uses the default (4)

    Returns:
        Rate per km

    Examples:
        >>> get_rate_per_km(3)
        0.529
        >>> get_rate_per_km(4)
        0.606
        >>> get_rate_per_km(7)
        0.636
        >>> get_rate_per_km(None)
        0.606
    """
    power = fiscal_power or DEFAULT_FISCAL_POWER
    if power <= 3:
        return RATE_PER_KM_UP_TO_3CV
    if power == 4:
        return RATE_PER_KM_4CV
    return RATE_PER_KM_5CV_AND_MORE


def calculate_billing_amount(
    distance_km: float,
    is_billed: bool,
    settings,
    fiscal_power: Optional[int] = None
) -> Optional[float]:
    """
    Calculate the amount invoiced for a trip.

    Args:
        distance_km: Trip distance (must be positive to bill)
        is_billed: Whether the trip is billed to a client
        settings: Settings with the flat local/medium rates
        fiscal_power: Vehicle fiscal power for the per-km tier

    Returns:
        Billing amount rounded to 2 decimals, or None when the trip is not
        billed or has no positive distance

    Examples:
        >>> from evjournal.models import Settings
        >>> s = Settings(billing_rate_local=8.0, billing_rate_medium=15.0)
        >>> calculate_billing_amount(10, True, s)
        8.0
        >>> calculate_billing_amount(30, True, s)
        15.0
        >>> calculate_billing_amount(31, True, s, fiscal_power=4)
        18.79
        >>> calculate_billing_amount(31, False, s) is None
        True
    """
    if not is_billed or distance_km is None or distance_km <= 0:
        return None

    if distance_km < BILLING_LOCAL_MAX_KM:
        amount = settings.billing_rate_local or 0.0
    elif distance_km <= BILLING_MEDIUM_MAX_KM:
        amount = settings.billing_rate_medium or 0.0
    else:
        amount = distance_km * get_rate_per_km(fiscal_power)

    return round_half_up(amount, MONEY_DECIMALS)
