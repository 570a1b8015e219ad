"""
Charge processing service for EV Journal.

Turns raw charging sessions into processed charges carrying energy, cost
and the consumption of the segment driven since the previous charge.
"""

import logging
from typing import Iterable, List, Optional

from evjournal.calculations.constants import ENERGY_DECIMALS, MONEY_DECIMALS, PRICE_DECIMALS
from evjournal.calculations.energy import (
    calculate_consumption_per_100km,
    calculate_grid_kwh,
    percent_to_kwh,
)
from evjournal.calculations.financial import (
    calculate_charge_cost,
    calculate_cost_per_100km,
    calculate_gasoline_equivalent_km,
    resolve_price_per_kwh,
)
from evjournal.calculations.rounding import round_half_up
from evjournal.models import Charge, ProcessedCharge, Settings, Vehicle, raw_fields

logger = logging.getLogger(__name__)


def sort_by_odometer(charges: Iterable) -> list:
    """Return charges in ascending odometer order (stable for equal readings)."""
    return sorted(charges, key=lambda c: c.odometer)


def process_charge(
    charge: Charge,
    settings: Settings,
    vehicle: Vehicle,
    previous: Optional[ProcessedCharge] = None
) -> ProcessedCharge:
    """
    Derive the figures of a single completed charge.

    Args:
        charge: Completed charge with end percentage and tariff
        settings: Current prices and gasoline reference
        vehicle: Vehicle the charge belongs to (battery capacity)
        previous: The processed charge just before this one in odometer
                  order, or None for the first charge

    Returns:
        The processed charge
    """
    percent_added = charge.end_percentage - charge.start_percentage
    kwh_added_to_battery = percent_to_kwh(percent_added, vehicle.battery_capacity_kwh)
    kwh_drawn_from_grid = calculate_grid_kwh(kwh_added_to_battery, charge.tariff)

    price_per_kwh = resolve_price_per_kwh(
        charge.tariff,
        settings,
        custom_price=charge.custom_price,
        snapshot_price=charge.price_per_kwh,
    )
    cost = calculate_charge_cost(kwh_drawn_from_grid, price_per_kwh)

    # Segment figures come from the energy and money of the previous charge,
    # which is what was spent driving up to this odometer reading
    distance_driven = None
    consumption_kwh_100km = None
    cost_per_100km = None
    if previous is not None:
        distance_driven = charge.odometer - previous.odometer
        if distance_driven > 0:
            previous_battery_kwh = percent_to_kwh(
                previous.end_percentage - previous.start_percentage,
                vehicle.battery_capacity_kwh,
            )
            consumption_kwh_100km = calculate_consumption_per_100km(
                previous_battery_kwh, distance_driven
            )
            cost_per_100km = calculate_cost_per_100km(previous.cost, distance_driven)
        else:
            logger.debug(
                f"Charge {charge.id}: non-positive distance {distance_driven} "
                f"since charge {previous.id}"
            )

    fields_ = raw_fields(charge, Charge)
    fields_['price_per_kwh'] = round_half_up(price_per_kwh, PRICE_DECIMALS)

    return ProcessedCharge(
        **fields_,
        kwh_added_to_battery=round_half_up(kwh_added_to_battery, ENERGY_DECIMALS),
        kwh_drawn_from_grid=round_half_up(kwh_drawn_from_grid, ENERGY_DECIMALS),
        cost=round_half_up(cost, MONEY_DECIMALS),
        distance_driven=distance_driven,
        consumption_kwh_100km=consumption_kwh_100km,
        cost_per_100km=cost_per_100km,
        gasoline_equivalent_km=calculate_gasoline_equivalent_km(cost, settings),
    )


def process_charges(
    charges: Iterable[Charge],
    settings: Settings,
    vehicle: Optional[Vehicle]
) -> List[ProcessedCharge]:
    """
    Process every completed charge, in ascending odometer order.

    Pending charges and charges missing their end percentage or tariff are
    left out. Each charge is linked to the one just before it by odometer
    (never by date) to derive the segment consumption.

    Args:
        charges: Raw charges in any order
        settings: Current prices and gasoline reference
        vehicle: Vehicle the charges belong to; None yields no result

    Returns:
        Processed charges sorted by ascending odometer
    """
    if vehicle is None:
        return []

    charges = list(charges)
    completed = [c for c in charges if c.is_processable]
    if len(completed) < len(charges):
        logger.debug(f"Skipping {len(charges) - len(completed)} incomplete charge(s)")

    processed: List[ProcessedCharge] = []
    previous = None
    for charge in sort_by_odometer(completed):
        previous = process_charge(charge, settings, vehicle, previous)
        processed.append(previous)

    return processed
