"""
Financial Calculations

Handles cost calculations for charging and driving:
- Price-per-kWh resolution by tariff
- Charging costs
- Cost per 100 km
- Gasoline comparison (equivalent distance, cost, savings, CO2)
"""

from typing import Optional

from .constants import CO2_DECIMALS, CO2_KG_PER_LITER, DISTANCE_DECIMALS, MONEY_DECIMALS
from .tariffs import (
    FREE_TARIFFS,
    RECORD_PRICED_TARIFFS,
    TARIFF_PRICE_FIELDS,
    TariffType,
)
from .rounding import round_half_up


def resolve_price_per_kwh(
    tariff: TariffType,
    settings,
    custom_price: Optional[float] = None,
    snapshot_price: Optional[float] = None
) -> float:
    """
    Resolve the price per kWh of a charging session.

    Priority:
    1. The price snapshotted on the record when it was created
    2. Free charging is always 0
    3. Quick charging uses the record's custom price (0 if missing)
    4. Every other tariff reads its current price from settings

    Args:
        tariff: Tariff the session was charged under
        settings: Settings with per-tariff prices
        custom_price: Per-record price (quick charge)
        snapshot_price: Price stored on the record at creation time

    Returns:
        Price per kWh; 0 when no price is known

    Examples:
        >>> from evjournal.models import Settings
        >>> resolve_price_per_kwh(TariffType.PEAK, Settings(price_peak=0.2))
        0.2
        >>> resolve_price_per_kwh(TariffType.PEAK, Settings(price_peak=0.2), snapshot_price=0.18)
        0.18
        >>> resolve_price_per_kwh(TariffType.QUICK_CHARGE, Settings())
        0.0
    """
    if snapshot_price is not None:
        return float(snapshot_price)

    if tariff in FREE_TARIFFS:
        return 0.0

    if tariff in RECORD_PRICED_TARIFFS:
        return float(custom_price or 0.0)

    field = TARIFF_PRICE_FIELDS.get(tariff)
    if field is None or settings is None:
        return 0.0
    return float(getattr(settings, field, 0.0) or 0.0)


def calculate_charge_cost(kwh_drawn_from_grid: float, price_per_kwh: float) -> float:
    """
    Calculate cost of a charging session (unrounded).

    Examples:
        >>> round(calculate_charge_cost(11.2, 0.15), 2)
        1.68
        >>> calculate_charge_cost(28.0, 0.0)
        0.0
    """
    return kwh_drawn_from_grid * price_per_kwh


def calculate_cost_per_100km(cost: float, distance_km: float) -> Optional[float]:
    """
    Calculate cost per 100 km driven.

    Returns:
        Cost per 100 km rounded to 2 decimals, or None if distance is not positive

    Examples:
        >>> calculate_cost_per_100km(1.68, 300)
        0.56
        >>> calculate_cost_per_100km(1.68, 0) is None
        True
    """
    if distance_km is None or distance_km <= 0:
        return None
    return round_half_up((cost / distance_km) * 100, MONEY_DECIMALS)


def has_gasoline_reference(settings) -> bool:
    """Return True if settings define a usable gasoline car for comparisons."""
    if settings is None:
        return False
    return (
        (settings.gasoline_consumption_l_100km or 0) > 0
        and (settings.gasoline_price_per_liter or 0) > 0
    )


def calculate_gasoline_equivalent_km(cost: float, settings) -> Optional[float]:
    """
    Calculate how far a gasoline car would go for the same money.

    Args:
        cost: Money spent on charging
        settings: Settings with the gasoline reference car

    Returns:
        Equivalent km rounded to 0 decimals, or None if no reference is
        configured or the cost is not positive

    Examples:
        >>> from evjournal.models import Settings
        >>> s = Settings(gasoline_consumption_l_100km=6.0, gasoline_price_per_liter=1.8)
        >>> calculate_gasoline_equivalent_km(10.8, s)
        100.0
    """
    if not has_gasoline_reference(settings) or cost <= 0:
        return None
    equivalent_liters = cost / settings.gasoline_price_per_liter
    equivalent_km = (equivalent_liters / settings.gasoline_consumption_l_100km) * 100
    return round_half_up(equivalent_km, DISTANCE_DECIMALS)


def calculate_gasoline_liters(distance_km: float, settings) -> float:
    """
    Liters a gasoline car would burn over a distance; 0 without a reference.

    Examples:
        >>> from evjournal.models import Settings
        >>> s = Settings(gasoline_consumption_l_100km=6.0, gasoline_price_per_liter=1.8)
        >>> calculate_gasoline_liters(200, s)
        12.0
    """
    if not has_gasoline_reference(settings) or distance_km <= 0:
        return 0.0
    return (distance_km / 100) * settings.gasoline_consumption_l_100km


def calculate_gasoline_cost(distance_km: float, settings) -> float:
    """
    Cost of driving a distance with the gasoline reference car (unrounded).

    Examples:
        >>> from evjournal.models import Settings
        >>> s = Settings(gasoline_consumption_l_100km=6.0, gasoline_price_per_liter=1.8)
        >>> round(calculate_gasoline_cost(200, s), 2)
        21.6
    """
    return calculate_gasoline_liters(distance_km, settings) * (
        settings.gasoline_price_per_liter if settings is not None else 0.0
    )


def calculate_co2_saved_kg(liters_avoided: float) -> float:
    """
    CO2 not emitted by avoiding burning gasoline.

    Examples:
        >>> calculate_co2_saved_kg(12.0)
        27.72
    """
    return round_half_up(liters_avoided * CO2_KG_PER_LITER, CO2_DECIMALS)
