#!/usr/bin/env python3
"""
Journal Report

Imports a charge spreadsheet (and optionally a trip spreadsheet) and prints
the processed journal with its reports as JSON.

Usage:
    python scripts/journal_report.py --charges charges.xlsx --battery-kwh 52 \
        --settings settings.json --period monthly

    python scripts/journal_report.py --charges charges.csv --trips trips.csv \
        --battery-kwh 52 --fiscal-power 4 --tariff "Heures Creuses" --tariff tempo

settings.json holds Settings fields, e.g. {"price_peak": 0.2516, "price_off_peak": 0.1828}.
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path

# Add parent directory to path for imports when running from scripts/
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from evjournal.calculations.periods import Period  # noqa: E402
from evjournal.calculations.tariffs import TARIFF_GROUPS, parse_tariff_filter  # noqa: E402
from evjournal.config import Config  # noqa: E402
from evjournal.exceptions import EVJournalError, ImportValidationError  # noqa: E402
from evjournal.models import Settings, Vehicle  # noqa: E402
from evjournal.services.journal_service import build_journal, journal_reports  # noqa: E402
from evjournal.utils.spreadsheet_importer import parse_charges_file, parse_trips_file  # noqa: E402

logging.basicConfig(
    level=getattr(logging, Config.LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def load_settings(path: str = None) -> Settings:
    """Read Settings fields from a JSON file; missing file means all-zero prices."""
    if not path:
        return Settings()
    with open(path, encoding='utf-8') as f:
        return Settings(**json.load(f))


def build_report(args) -> dict:
    """Import the spreadsheets and run every report."""
    vehicle = Vehicle(
        id=args.vehicle_id,
        name=args.vehicle_name,
        battery_capacity_kwh=args.battery_kwh,
        fiscal_power=args.fiscal_power,
    )
    settings = load_settings(args.settings)

    charges_path = Path(args.charges)
    charges, charge_stats = parse_charges_file(
        charges_path.read_bytes(), charges_path.name, vehicle_id=vehicle.id
    )
    print(f"Imported {charge_stats['parsed_rows']} charge(s) from {charges_path.name}", file=sys.stderr)

    trips = []
    if args.trips:
        trips_path = Path(args.trips)
        trips, trip_stats = parse_trips_file(
            trips_path.read_bytes(), trips_path.name, vehicle_id=vehicle.id
        )
        print(f"Imported {trip_stats['parsed_rows']} trip(s) from {trips_path.name}", file=sys.stderr)

    tariff_filter = None
    if args.tariff:
        tariff_filter = parse_tariff_filter(args.tariff)

    journal = build_journal(charges, trips, settings, vehicle)
    reports = journal_reports(journal, args.period, tariff_filter)

    return {
        'charges': [c.to_dict() for c in journal.charges],
        'trips': [t.to_dict() for t in journal.trips],
        'charge_stats': [s.to_dict() for s in reports['charge_stats']],
        'trip_stats': [s.to_dict() for s in reports['trip_stats']],
        'client_stats': [s.to_dict() for s in reports['client_stats']],
        'destination_stats': [s.to_dict() for s in reports['destination_stats']],
        'summary': reports['summary'].to_dict(),
    }


def main():
    parser = argparse.ArgumentParser(description='Print an EV journal report from spreadsheets')
    parser.add_argument('--charges', required=True, help='Charge spreadsheet (.csv or .xlsx)')
    parser.add_argument('--trips', help='Trip spreadsheet (.csv or .xlsx)')
    parser.add_argument('--settings', help='JSON file with prices and references')
    parser.add_argument('--battery-kwh', type=float, required=True, help='Usable battery capacity (kWh)')
    parser.add_argument('--fiscal-power', type=int, default=None, help='Fiscal power (CV)')
    parser.add_argument('--vehicle-id', default='default')
    parser.add_argument('--vehicle-name', default='')
    parser.add_argument('--period', choices=[p.value for p in Period], default=Period.MONTHLY.value)
    parser.add_argument('--tariff', action='append', help='Keep only this tariff in charge stats (repeatable). '
                        f'Also accepts a group: {", ".join(sorted(TARIFF_GROUPS))}')

    args = parser.parse_args()

    try:
        report = build_report(args)
    except ImportValidationError as e:
        print(f"Import rejected: {e.message}", file=sys.stderr)
        for error in e.errors:
            print(f"  - {error}", file=sys.stderr)
        sys.exit(1)
    except EVJournalError as e:
        logger.error(f"Report failed: {e}")
        sys.exit(1)

    print(json.dumps(report, indent=2, ensure_ascii=False))


if __name__ == '__main__':
    main()
