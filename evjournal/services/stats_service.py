"""
Periodic statistics service for EV Journal.

Groups processed charges and trips into weekly, monthly or yearly buckets
and computes per-bucket totals.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Union

from evjournal.calculations.constants import (
    DISTANCE_DECIMALS,
    ENERGY_DECIMALS,
    MONEY_DECIMALS,
)
from evjournal.calculations.financial import (
    calculate_co2_saved_kg,
    calculate_gasoline_cost,
    calculate_gasoline_liters,
    has_gasoline_reference,
)
from evjournal.calculations.periods import Period, get_period_key
from evjournal.calculations.rounding import round_half_up
from evjournal.calculations.tariffs import TariffType
from evjournal.models import ProcessedCharge, ProcessedTrip, Settings, StatsData, TripStatsData
from evjournal.services.charge_service import sort_by_odometer

logger = logging.getLogger(__name__)


class OdometerIndex:
    """
    Position of every charge in global odometer order.

    Built once per aggregation call from the full charge list, independent
    of any tariff filter, and discarded afterwards.
    """

    def __init__(self, charges: Iterable[ProcessedCharge]):
        self.ordered = sort_by_odometer(charges)
        self.positions = {c.id: i for i, c in enumerate(self.ordered)}

    def next_charge(self, charge: ProcessedCharge) -> Optional[ProcessedCharge]:
        """The charge right after this one by odometer, or None if it is the last."""
        position = self.positions.get(charge.id)
        if position is None or position + 1 >= len(self.ordered):
            return None
        return self.ordered[position + 1]


def group_by_period(records: Iterable, period: Union[Period, str]) -> Dict[str, list]:
    """Group records by the period key of their date, keeping input order in each bucket."""
    groups = defaultdict(list)
    for record in records:
        groups[get_period_key(record.date, period)].append(record)
    return groups


def _round_values(values: Dict[TariffType, float]) -> Dict[TariffType, float]:
    return {key: round_half_up(value, MONEY_DECIMALS) for key, value in values.items()}


def _bucket_charge_stats(
    name: str,
    charges: Sequence[ProcessedCharge],
    index: OdometerIndex,
    settings: Settings
) -> StatsData:
    total_kwh = 0.0
    total_battery_kwh = 0.0
    total_cost = 0.0
    kwh_per_tariff = defaultdict(float)
    cost_per_tariff = defaultdict(float)

    # Driving fueled by the energy of this bucket's charges
    fueled_distance = 0.0
    fueled_kwh = 0.0
    fueled_cost = 0.0

    slow_kwh = fast_kwh = slow_cost = fast_cost = 0.0
    slow_count = fast_count = 0

    for charge in charges:
        total_kwh += charge.kwh_drawn_from_grid
        total_battery_kwh += charge.kwh_added_to_battery
        total_cost += charge.cost
        kwh_per_tariff[charge.tariff] += charge.kwh_drawn_from_grid
        cost_per_tariff[charge.tariff] += charge.cost

        if charge.tariff == TariffType.QUICK_CHARGE:
            fast_kwh += charge.kwh_drawn_from_grid
            fast_cost += charge.cost
            fast_count += 1
        else:
            slow_kwh += charge.kwh_drawn_from_grid
            slow_cost += charge.cost
            slow_count += 1

        following = index.next_charge(charge)
        if following is not None and (following.distance_driven or 0) > 0:
            fueled_distance += following.distance_driven
            fueled_kwh += charge.kwh_added_to_battery
            fueled_cost += charge.cost

    avg_consumption = 0.0
    avg_cost_per_100km = 0.0
    if fueled_distance > 0:
        avg_consumption = (fueled_kwh / fueled_distance) * 100
        avg_cost_per_100km = (fueled_cost / fueled_distance) * 100

    gasoline_cost = 0.0
    savings = 0.0
    co2_saved_kg = 0.0
    if fueled_distance > 0 and has_gasoline_reference(settings):
        gasoline_cost = calculate_gasoline_cost(fueled_distance, settings)
        savings = gasoline_cost - fueled_cost
        co2_saved_kg = calculate_co2_saved_kg(calculate_gasoline_liters(fueled_distance, settings))

    return StatsData(
        name=name,
        charge_count=len(charges),
        total_kwh=round_half_up(total_kwh, ENERGY_DECIMALS),
        total_battery_kwh=round_half_up(total_battery_kwh, ENERGY_DECIMALS),
        total_cost=round_half_up(total_cost, MONEY_DECIMALS),
        kwh_per_tariff=_round_values(kwh_per_tariff),
        cost_per_tariff=_round_values(cost_per_tariff),
        total_distance=round_half_up(fueled_distance, DISTANCE_DECIMALS),
        avg_consumption=round_half_up(avg_consumption, ENERGY_DECIMALS),
        avg_cost_per_100km=round_half_up(avg_cost_per_100km, MONEY_DECIMALS),
        total_gasoline_cost=round_half_up(gasoline_cost, MONEY_DECIMALS),
        total_savings=round_half_up(savings, MONEY_DECIMALS),
        co2_saved_kg=co2_saved_kg,
        slow_charge_kwh=round_half_up(slow_kwh, ENERGY_DECIMALS),
        fast_charge_kwh=round_half_up(fast_kwh, ENERGY_DECIMALS),
        slow_charge_cost=round_half_up(slow_cost, MONEY_DECIMALS),
        fast_charge_cost=round_half_up(fast_cost, MONEY_DECIMALS),
        slow_charge_count=slow_count,
        fast_charge_count=fast_count,
    )


def generate_charge_stats(
    charges: Sequence[ProcessedCharge],
    period: Union[Period, str],
    settings: Settings,
    tariff_filter: Optional[Iterable[TariffType]] = None
) -> List[StatsData]:
    """
    Compute charging statistics per period bucket.

    Each charge is credited with the distance driven until the next charge
    (by odometer over all charges, even when a tariff filter is active), so
    a bucket reports the driving its charged energy produced.

    Args:
        charges: Processed charges
        period: Bucket granularity
        settings: Gasoline reference for savings and CO2
        tariff_filter: Only bucket charges with one of these tariffs; None
                       or empty keeps every charge

    Returns:
        One row per bucket, sorted by key
    """
    charges = list(charges)
    index = OdometerIndex(charges)

    allowed = set(tariff_filter) if tariff_filter else None
    if allowed is not None:
        charges = [c for c in charges if c.tariff in allowed]

    groups = group_by_period(charges, period)
    logger.debug(f"Charge stats: {len(charges)} charge(s) in {len(groups)} {Period(period).value} bucket(s)")

    return [
        _bucket_charge_stats(name, groups[name], index, settings)
        for name in sorted(groups)
    ]


def generate_trip_stats(
    trips: Sequence[ProcessedTrip],
    period: Union[Period, str]
) -> List[TripStatsData]:
    """
    Compute trip statistics per period bucket.

    Args:
        trips: Processed trips
        period: Bucket granularity

    Returns:
        One row per bucket with summed distance, cost, savings and billing,
        sorted by key
    """
    groups = group_by_period(trips, period)

    stats = []
    for name in sorted(groups):
        bucket = groups[name]
        stats.append(TripStatsData(
            name=name,
            trip_count=len(bucket),
            total_distance=round_half_up(sum(t.distance for t in bucket), DISTANCE_DECIMALS),
            total_cost=round_half_up(sum(t.cost for t in bucket), MONEY_DECIMALS),
            total_savings=round_half_up(sum(t.savings for t in bucket), MONEY_DECIMALS),
            total_billing_amount=round_half_up(
                sum(t.billing_amount or 0.0 for t in bucket), MONEY_DECIMALS
            ),
        ))
    return stats
