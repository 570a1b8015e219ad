"""
Energy Conversion Calculations

Handles conversions between different energy representations:
- Battery percentage <-> kWh
- Battery kWh -> grid kWh (AC charging loss)
- Energy per distance (kWh/100km)
"""

from typing import Optional

from .constants import CHARGING_LOSS_FACTOR, ENERGY_DECIMALS
from .rounding import round_half_up
from .tariffs import TariffType, is_ac_tariff


def percent_to_kwh(percent: float, battery_capacity_kwh: float) -> float:
    """
    Convert a battery percentage delta to kWh.

    Args:
        percent: Battery percentage points (may be negative)
        battery_capacity_kwh: Total battery capacity in kWh

    Returns:
        Energy in kWh (unrounded)

    Examples:
        >>> percent_to_kwh(20.0, 50.0)
        10.0
        >>> percent_to_kwh(50.0, 50.0)
        25.0
    """
    return (percent / 100.0) * battery_capacity_kwh


def kwh_to_percent(kwh: float, battery_capacity_kwh: float) -> float:
    """
    Convert kWh to battery percentage points.

    Examples:
        >>> kwh_to_percent(10.0, 50.0)
        20.0
        >>> kwh_to_percent(10.0, 0)
        0.0
    """
    if battery_capacity_kwh == 0:
        return 0.0
    return (kwh / battery_capacity_kwh) * 100.0


def calculate_grid_kwh(
    kwh_added_to_battery: float,
    tariff: TariffType,
    loss_factor: float = CHARGING_LOSS_FACTOR
) -> float:
    """
    Calculate the energy drawn from the grid for a charging session.

    AC tariffs lose energy between the outlet and the battery; DC quick
    charging is billed on the energy delivered to the battery.

    Args:
        kwh_added_to_battery: Energy stored in the battery (kWh)
        tariff: Tariff the session was charged under
        loss_factor: Grid kWh per battery kWh on AC

    Returns:
        Grid energy in kWh (unrounded)

    Examples:
        >>> round(calculate_grid_kwh(10.0, TariffType.OFF_PEAK), 2)
        11.2
        >>> calculate_grid_kwh(10.0, TariffType.QUICK_CHARGE)
        10.0
    """
    if is_ac_tariff(tariff):
        return kwh_added_to_battery * loss_factor
    return kwh_added_to_battery


def calculate_consumption_per_100km(
    kwh: float,
    distance_km: float
) -> Optional[float]:
    """
    Calculate energy consumption in kWh per 100 km.

    Args:
        kwh: Energy used over the distance
        distance_km: Distance driven

    Returns:
        kWh/100km rounded to 2 decimals, or None if distance is not positive

    Examples:
        >>> calculate_consumption_per_100km(10.0, 300)
        3.33
        >>> calculate_consumption_per_100km(10.0, 0) is None
        True
    """
    if distance_km is None or distance_km <= 0:
        return None
    return round_half_up((kwh / distance_km) * 100, ENERGY_DECIMALS)
