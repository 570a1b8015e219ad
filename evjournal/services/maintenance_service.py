"""
Maintenance service for EV Journal.

Orders maintenance expenses and summarizes them per year.
"""

from collections import defaultdict
from typing import Iterable, List

from evjournal.calculations.constants import MONEY_DECIMALS
from evjournal.calculations.rounding import round_half_up
from evjournal.models import MaintenanceEntry, MaintenanceYearSummary
from evjournal.utils.time_utils import parse_date


def process_maintenance_entries(entries: Iterable[MaintenanceEntry]) -> List[MaintenanceEntry]:
    """Return maintenance entries, highest odometer first."""
    return sorted(entries, key=lambda e: e.odometer, reverse=True)


def summarize_maintenance_by_year(entries: Iterable[MaintenanceEntry]) -> List[MaintenanceYearSummary]:
    """
    Maintenance spending per calendar year.

    Args:
        entries: Maintenance entries in any order

    Returns:
        One summary per year with its subtotal and cost per maintenance
        type, most recent year first
    """
    by_year = defaultdict(list)
    for entry in entries:
        by_year[str(parse_date(entry.date).year)].append(entry)

    summaries = []
    for year in sorted(by_year, reverse=True):
        year_entries = by_year[year]
        cost_per_type = defaultdict(float)
        for entry in year_entries:
            cost_per_type[entry.type] += entry.cost or 0.0

        summaries.append(MaintenanceYearSummary(
            year=year,
            entry_count=len(year_entries),
            subtotal=round_half_up(sum(e.cost or 0.0 for e in year_entries), MONEY_DECIMALS),
            cost_per_type={t: round_half_up(v, MONEY_DECIMALS) for t, v in cost_per_type.items()},
        ))
    return summaries
