"""
Trip processing service for EV Journal.

Turns raw business trips into processed trips: energy consumed, cost
priced from the most recent charge, gasoline savings and billing.
"""

import logging
from bisect import bisect_right
from typing import Iterable, List, Optional, Sequence

from evjournal.calculations.billing import calculate_billing_amount
from evjournal.calculations.constants import DISTANCE_DECIMALS, ENERGY_DECIMALS, MONEY_DECIMALS
from evjournal.calculations.energy import calculate_consumption_per_100km, percent_to_kwh
from evjournal.calculations.financial import calculate_gasoline_cost, has_gasoline_reference
from evjournal.calculations.rounding import round_half_up
from evjournal.models import ProcessedCharge, ProcessedTrip, Settings, Trip, Vehicle, raw_fields
from evjournal.services.charge_service import sort_by_odometer
from evjournal.utils.time_utils import parse_date

logger = logging.getLogger(__name__)


class ChargePriceIndex:
    """
    Odometer-sorted charge prices, built once per processing pass.

    Answers "what did energy cost at this odometer reading" with the price
    of the last charge at or before it.
    """

    def __init__(self, charges: Iterable[ProcessedCharge]):
        ordered = sort_by_odometer(charges)
        self.odometers = [c.odometer for c in ordered]
        self.prices = [c.price_per_kwh for c in ordered]

    def price_at(self, odometer: float) -> float:
        """Price of the latest charge with odometer <= the given reading, else 0."""
        position = bisect_right(self.odometers, odometer) - 1
        if position < 0:
            return 0.0
        return self.prices[position] or 0.0


def _trip_sort_key(trip: Trip):
    return (parse_date(trip.date), trip.end_odometer)


def process_trip(
    trip: Trip,
    settings: Settings,
    vehicle: Vehicle,
    price_per_kwh: float
) -> ProcessedTrip:
    """
    Derive the figures of a single completed trip.

    Args:
        trip: Completed trip with end odometer and percentage
        settings: Gasoline reference and billing rates
        vehicle: Vehicle used (battery capacity, fiscal power)
        price_per_kwh: Energy price in effect at the trip start

    Returns:
        The processed trip. A trip with no positive distance has every
        figure at 0 and no billing amount.
    """
    fields_ = raw_fields(trip, Trip)
    distance = trip.end_odometer - trip.start_odometer

    if distance <= 0:
        logger.debug(f"Trip {trip.id}: non-positive distance {distance}, figures zeroed")
        return ProcessedTrip(
            **fields_,
            distance=0.0,
            kwh_consumed=0.0,
            cost=0.0,
            consumption_kwh_100km=0.0,
            price_per_kwh=price_per_kwh,
            gasoline_equivalent_cost=0.0,
            savings=0.0,
            billing_amount=None,
        )

    percent_consumed = trip.start_percentage - trip.end_percentage
    kwh_consumed = percent_to_kwh(percent_consumed, vehicle.battery_capacity_kwh)
    cost = kwh_consumed * price_per_kwh

    gasoline_equivalent_cost = 0.0
    savings = 0.0
    if has_gasoline_reference(settings):
        gasoline_equivalent_cost = calculate_gasoline_cost(distance, settings)
        savings = gasoline_equivalent_cost - cost

    return ProcessedTrip(
        **fields_,
        distance=round_half_up(distance, DISTANCE_DECIMALS),
        kwh_consumed=round_half_up(kwh_consumed, ENERGY_DECIMALS),
        cost=round_half_up(cost, MONEY_DECIMALS),
        consumption_kwh_100km=calculate_consumption_per_100km(kwh_consumed, distance),
        price_per_kwh=price_per_kwh,
        gasoline_equivalent_cost=round_half_up(gasoline_equivalent_cost, MONEY_DECIMALS),
        savings=round_half_up(savings, MONEY_DECIMALS),
        billing_amount=calculate_billing_amount(
            distance, trip.is_billed, settings, vehicle.fiscal_power
        ),
    )


def process_trips(
    trips: Iterable[Trip],
    settings: Settings,
    vehicle: Optional[Vehicle],
    charges: Sequence[ProcessedCharge]
) -> List[ProcessedTrip]:
    """
    Process every completed trip.

    Each trip is priced with the latest processed charge whose odometer is
    at or before the trip's start odometer (never a later charge); 0 when
    there is none.

    Args:
        trips: Raw trips in any order
        settings: Gasoline reference and billing rates
        vehicle: Vehicle used; None yields no result
        charges: Processed charges supplying the energy prices

    Returns:
        Processed trips, most recent first (date, then end odometer)
    """
    if vehicle is None:
        return []

    trips = list(trips)
    completed = [t for t in trips if t.is_processable]
    if len(completed) < len(trips):
        logger.debug(f"Skipping {len(trips) - len(completed)} incomplete trip(s)")

    prices = ChargePriceIndex(charges)
    ordered = sorted(completed, key=_trip_sort_key, reverse=True)

    return [
        process_trip(trip, settings, vehicle, prices.price_at(trip.start_odometer))
        for trip in ordered
    ]
