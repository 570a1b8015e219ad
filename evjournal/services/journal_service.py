"""
Journal service for EV Journal.

Runs the whole derivation for one vehicle: charges first, then trips priced
from those charges, then maintenance ordering. Every call recomputes from
the raw records; nothing is cached between calls.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

from evjournal.calculations.periods import Period
from evjournal.calculations.tariffs import TariffType
from evjournal.models import (
    Charge,
    MaintenanceEntry,
    ProcessedCharge,
    ProcessedTrip,
    Settings,
    Trip,
    Vehicle,
)
from evjournal.services.charge_service import process_charges
from evjournal.services.client_stats_service import generate_client_stats, generate_destination_stats
from evjournal.services.maintenance_service import (
    process_maintenance_entries,
    summarize_maintenance_by_year,
)
from evjournal.services.stats_service import generate_charge_stats, generate_trip_stats
from evjournal.services.summary_service import generate_vehicle_summary
from evjournal.services.trip_service import process_trips
from evjournal.utils.wide_events import track_operation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Journal:
    """Processed records of one vehicle, as derived by build_journal."""

    vehicle: Optional[Vehicle]
    settings: Settings
    charges: List[ProcessedCharge] = field(default_factory=list)
    trips: List[ProcessedTrip] = field(default_factory=list)
    maintenance: List[MaintenanceEntry] = field(default_factory=list)


def build_journal(
    charges: Iterable[Charge],
    trips: Iterable[Trip],
    settings: Settings,
    vehicle: Optional[Vehicle],
    maintenance: Iterable[MaintenanceEntry] = ()
) -> Journal:
    """
    Derive every processed record of a vehicle from its raw records.

    Args:
        charges: Raw charges in any order
        trips: Raw trips in any order
        settings: Current prices, gasoline reference and billing rates
        vehicle: Vehicle the records belong to; None yields empty lists
        maintenance: Maintenance entries of the vehicle

    Returns:
        Journal with charges by ascending odometer, trips most recent first
        and maintenance by descending odometer
    """
    charges = list(charges)
    trips = list(trips)
    maintenance = list(maintenance)

    with track_operation(
        "journal_build",
        vehicle_id=vehicle.id if vehicle else None,
        raw_charges=len(charges),
        raw_trips=len(trips),
    ) as event:
        with event.timer("process_charges"):
            processed_charges = process_charges(charges, settings, vehicle)

        with event.timer("process_trips"):
            processed_trips = process_trips(trips, settings, vehicle, processed_charges)

        ordered_maintenance = process_maintenance_entries(maintenance)

        event.add_business_metric("charges_processed", len(processed_charges))
        event.add_business_metric("trips_processed", len(processed_trips))
        event.add_business_metric("maintenance_entries", len(ordered_maintenance))

    if vehicle is None:
        logger.info("No vehicle selected, journal is empty")

    return Journal(
        vehicle=vehicle,
        settings=settings,
        charges=processed_charges,
        trips=processed_trips,
        maintenance=ordered_maintenance,
    )


def journal_reports(
    journal: Journal,
    period: Union[Period, str],
    tariff_filter: Optional[Iterable[TariffType]] = None
) -> Dict[str, Any]:
    """
    Run every aggregation over a built journal.

    Args:
        journal: Result of build_journal
        period: Bucket granularity for the periodic statistics
        tariff_filter: Tariffs kept in the charge statistics

    Returns:
        Dict with charge_stats, trip_stats, client_stats,
        destination_stats, maintenance_by_year and summary
    """
    period = Period(period)
    with track_operation("journal_reports", period=period.value) as event:
        reports = {
            'charge_stats': generate_charge_stats(
                journal.charges, period, journal.settings, tariff_filter
            ),
            'trip_stats': generate_trip_stats(journal.trips, period),
            'client_stats': generate_client_stats(journal.trips),
            'destination_stats': generate_destination_stats(journal.trips),
            'maintenance_by_year': summarize_maintenance_by_year(journal.maintenance),
            'summary': generate_vehicle_summary(
                journal.charges, journal.settings, journal.maintenance
            ),
        }
        event.add_business_metric("charge_buckets", len(reports['charge_stats']))
        event.add_business_metric("trip_buckets", len(reports['trip_stats']))
    return reports
