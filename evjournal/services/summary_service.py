"""
Vehicle and fleet summary service for EV Journal.

Lifetime totals for the dashboard of one vehicle and for the overview of a
fleet of vehicles.
"""

import logging
from typing import Iterable, List, Sequence

from evjournal.calculations.constants import DISTANCE_DECIMALS, ENERGY_DECIMALS, MONEY_DECIMALS
from evjournal.calculations.financial import calculate_gasoline_cost, has_gasoline_reference
from evjournal.calculations.rounding import round_half_up
from evjournal.models import (
    Charge,
    FleetVehicleStats,
    MaintenanceEntry,
    MaintenanceType,
    ProcessedCharge,
    Settings,
    Vehicle,
    VehicleSummary,
)
from evjournal.services.charge_service import process_charges

logger = logging.getLogger(__name__)

# Maintenance types left out of cost-per-100km figures
EXCLUDED_FROM_RUNNING_COST = frozenset({MaintenanceType.WASH})


def _segment_energy(charge: ProcessedCharge) -> float:
    return (charge.consumption_kwh_100km or 0.0) * (charge.distance_driven or 0.0) / 100


def _segment_cost(charge: ProcessedCharge) -> float:
    return (charge.cost_per_100km or 0.0) * (charge.distance_driven or 0.0) / 100


def generate_vehicle_summary(
    charges: Sequence[ProcessedCharge],
    settings: Settings,
    maintenance_entries: Iterable[MaintenanceEntry] = ()
) -> VehicleSummary:
    """
    Lifetime dashboard totals of one vehicle.

    Args:
        charges: Processed charges of the vehicle (odometer order)
        settings: Gasoline reference for savings
        maintenance_entries: Maintenance expenses of the vehicle

    Returns:
        The summary; savings and gasoline cost per 100 km are None when no
        gasoline reference is configured or nothing was driven
    """
    maintenance_entries = list(maintenance_entries)
    total_maintenance_cost = sum(e.cost or 0.0 for e in maintenance_entries)

    if not charges:
        return VehicleSummary(total_maintenance_cost=round_half_up(total_maintenance_cost, MONEY_DECIMALS))

    total_cost = sum(c.cost for c in charges)
    total_distance = sum(c.distance_driven or 0.0 for c in charges if (c.distance_driven or 0) > 0)
    total_kwh = sum(c.kwh_drawn_from_grid for c in charges)
    segment_energy = sum(_segment_energy(c) for c in charges)
    segment_cost = sum(_segment_cost(c) for c in charges)

    avg_consumption = 0.0
    avg_cost_per_100km = 0.0
    avg_with_maintenance = 0.0
    if total_distance > 0:
        running_maintenance = sum(
            e.cost or 0.0 for e in maintenance_entries
            if e.type not in EXCLUDED_FROM_RUNNING_COST
        )
        avg_consumption = (segment_energy / total_distance) * 100
        avg_cost_per_100km = (segment_cost / total_distance) * 100
        avg_with_maintenance = ((segment_cost + running_maintenance) / total_distance) * 100

    savings = None
    gas_cost_per_100km = None
    if total_distance > 0 and has_gasoline_reference(settings):
        savings = round_half_up(calculate_gasoline_cost(total_distance, settings) - total_cost, MONEY_DECIMALS)
        gas_cost_per_100km = round_half_up(calculate_gasoline_cost(100, settings), MONEY_DECIMALS)

    return VehicleSummary(
        total_cost=round_half_up(total_cost, MONEY_DECIMALS),
        total_distance=round_half_up(total_distance, DISTANCE_DECIMALS),
        total_kwh=round_half_up(total_kwh, ENERGY_DECIMALS),
        avg_consumption=round_half_up(avg_consumption, ENERGY_DECIMALS),
        avg_cost_per_100km=round_half_up(avg_cost_per_100km, MONEY_DECIMALS),
        last_charge=charges[-1],
        savings=savings,
        gas_cost_per_100km=gas_cost_per_100km,
        total_maintenance_cost=round_half_up(total_maintenance_cost, MONEY_DECIMALS),
        avg_cost_per_100km_with_maintenance=round_half_up(avg_with_maintenance, MONEY_DECIMALS),
    )


def generate_fleet_overview(
    vehicles: Iterable[Vehicle],
    charges: Iterable[Charge],
    maintenance_entries: Iterable[MaintenanceEntry],
    settings: Settings
) -> List[FleetVehicleStats]:
    """
    Lifetime totals of every vehicle in a fleet.

    Raw charges and maintenance entries are matched to vehicles by
    vehicle_id; each vehicle's charges are processed on their own. A
    vehicle with fewer than two charges has no driven segment and gets
    zeroed driving figures.

    Returns:
        One row per vehicle, in input order
    """
    charges = list(charges)
    maintenance_entries = list(maintenance_entries)

    overview = []
    for vehicle in vehicles:
        vehicle_charges = [c for c in charges if c.vehicle_id == vehicle.id]
        maintenance_cost = sum(
            e.cost or 0.0 for e in maintenance_entries if e.vehicle_id == vehicle.id
        )

        if len(vehicle_charges) < 2:
            logger.debug(f"Vehicle {vehicle.id}: {len(vehicle_charges)} charge(s), no segment to report")
            overview.append(FleetVehicleStats(vehicle_id=vehicle.id, vehicle_name=vehicle.name))
            continue

        processed = process_charges(vehicle_charges, settings, vehicle)
        total_distance = sum(c.distance_driven or 0.0 for c in processed if (c.distance_driven or 0) > 0)
        charge_cost = sum(c.cost for c in processed)
        battery_kwh = sum(c.kwh_added_to_battery for c in processed)

        avg_consumption = 0.0
        avg_cost_per_100km = 0.0
        savings = 0.0
        if total_distance > 0:
            avg_consumption = (battery_kwh / total_distance) * 100
            avg_cost_per_100km = (charge_cost / total_distance) * 100
            if has_gasoline_reference(settings):
                savings = calculate_gasoline_cost(total_distance, settings) - charge_cost

        overview.append(FleetVehicleStats(
            vehicle_id=vehicle.id,
            vehicle_name=vehicle.name,
            total_distance=round_half_up(total_distance, DISTANCE_DECIMALS),
            total_charge_cost=round_half_up(charge_cost, MONEY_DECIMALS),
            total_maintenance_cost=round_half_up(maintenance_cost, MONEY_DECIMALS),
            total_cost=round_half_up(charge_cost + maintenance_cost, MONEY_DECIMALS),
            avg_consumption=round_half_up(avg_consumption, ENERGY_DECIMALS),
            avg_cost_per_100km=round_half_up(avg_cost_per_100km, MONEY_DECIMALS),
            total_savings=round_half_up(savings, MONEY_DECIMALS),
        ))
    return overview
