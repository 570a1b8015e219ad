"""
Services module for EV Journal.

Each service derives processed records or report rows from raw records.
Every call recomputes from its inputs.
"""

from evjournal.services.charge_service import (
    process_charge,
    process_charges,
)
from evjournal.services.trip_service import (
    process_trip,
    process_trips,
)
from evjournal.services.stats_service import (
    generate_charge_stats,
    generate_trip_stats,
)
from evjournal.services.client_stats_service import (
    generate_client_stats,
    generate_destination_stats,
)
from evjournal.services.maintenance_service import (
    process_maintenance_entries,
    summarize_maintenance_by_year,
)
from evjournal.services.summary_service import (
    generate_fleet_overview,
    generate_vehicle_summary,
)
from evjournal.services.journal_service import (
    Journal,
    build_journal,
    journal_reports,
)

__all__ = [
    # Charge service
    'process_charge',
    'process_charges',
    # Trip service
    'process_trip',
    'process_trips',
    # Stats service
    'generate_charge_stats',
    'generate_trip_stats',
    # Client stats service
    'generate_client_stats',
    'generate_destination_stats',
    # Maintenance service
    'process_maintenance_entries',
    'summarize_maintenance_by_year',
    # Summary service
    'generate_vehicle_summary',
    'generate_fleet_overview',
    # Journal service
    'Journal',
    'build_journal',
    'journal_reports',
]
