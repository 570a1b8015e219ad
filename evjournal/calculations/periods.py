"""
Reporting Period Calculations

Derives the bucket key of a record date for weekly, monthly and yearly
reports. Keys sort lexicographically in chronological order.
"""

from datetime import date
from enum import Enum
from typing import Any, Union

from evjournal.utils.time_utils import parse_date


class Period(str, Enum):
    """Report granularity."""

    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


def iso_week(value: date) -> tuple:
    """
    Return the ISO-8601 (week-year, week number) of a date.

    The week belongs to the year of its Thursday, so the first days of
    January may fall in the last week of the previous year.

    Examples:
        >>> iso_week(date(2024, 12, 30))
        (2025, 1)
        >>> iso_week(date(2021, 1, 3))
        (2020, 53)
    """
    week_year, week, _ = value.isocalendar()
    return week_year, week


def get_period_key(value: Any, period: Union[Period, str]) -> str:
    """
    Compute the bucket key of a date for the given period.

    Args:
        value: Record date (date, datetime or parseable string)
        period: Period or its string value

    Returns:
        "YYYY-MM" (monthly), "YYYY" (yearly) or "YYYY-W##" (weekly)

    Raises:
        ValueError: If the period is unknown or the date cannot be parsed

    Examples:
        >>> get_period_key(date(2024, 3, 5), Period.MONTHLY)
        '2024-03'
        >>> get_period_key("2024-03-05", "yearly")
        '2024'
        >>> get_period_key(date(2024, 1, 1), Period.WEEKLY)
        '2024-W01'
    """
    period = Period(period)
    record_date = parse_date(value)
    if record_date is None:
        raise ValueError(f"Cannot derive period key from date {value!r}")

    if period == Period.MONTHLY:
        return f"{record_date.year}-{record_date.month:02d}"
    if period == Period.YEARLY:
        return f"{record_date.year}"

    week_year, week = iso_week(record_date)
    return f"{week_year}-W{week:02d}"
