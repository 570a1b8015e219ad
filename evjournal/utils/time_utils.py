"""
Date parsing and manipulation utilities for EV Journal.

Provides consistent date handling for records and imports with:
- Multiple format support (ISO, day-first European dates, datetime objects)
- Spreadsheet serial day numbers (Excel 1900 date system)
- ISO formatting for serialized records
"""

import logging
from datetime import date, datetime, timedelta
from typing import Any, Optional

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)


# Spreadsheet serial numbers count days from 1899-12-30
EXCEL_EPOCH = date(1899, 12, 30)
# Serial of 1970-01-01; smaller numbers are not treated as dates
EXCEL_SERIAL_MIN = 25569


def excel_serial_to_date(serial: float) -> date:
    """
    Convert a spreadsheet serial day number to a date.

    Args:
        serial: Days since 1899-12-30 (fractional part is the time of day)

    Returns:
        The calendar date

    Example:
        >>> excel_serial_to_date(45292)
        datetime.date(2024, 1, 1)
    """
    return EXCEL_EPOCH + timedelta(days=int(serial))


def parse_date(value: Any, default: Optional[date] = None) -> Optional[date]:
    """
    Parse a record date from the forms found in records and spreadsheets.

    Supports:
    - date / datetime objects (datetime is truncated to its date)
    - spreadsheet serial numbers greater than EXCEL_SERIAL_MIN
    - ISO strings: "2024-01-15", "2024-01-15T14:30:00Z"
    - day-first strings: "15/01/2024"

    Args:
        value: The value to parse
        default: Value to return if parsing fails (default: None)

    Returns:
        date object or default value if parsing fails

    Example:
        >>> parse_date("2024-01-15")
        datetime.date(2024, 1, 15)
        >>> parse_date("15/01/2024")
        datetime.date(2024, 1, 15)
        >>> parse_date("invalid") is None
        True
    """
    if value is None:
        return default

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    if isinstance(value, bool):
        return default

    if isinstance(value, (int, float)):
        if value > EXCEL_SERIAL_MIN:
            return excel_serial_to_date(value)
        return default

    date_string = str(value).strip()
    if not date_string:
        return default

    # ISO dates are year-first; everything else is read day-first
    dayfirst = not (len(date_string) >= 4 and date_string[:4].isdigit())
    try:
        return date_parser.parse(date_string, dayfirst=dayfirst).date()
    except (ValueError, OverflowError, TypeError):
        pass

    logger.debug(f"Failed to parse date string: {date_string}")
    return default


def format_date_iso(value: Optional[date]) -> Optional[str]:
    """
    Format a date as an ISO 8601 string.

    Example:
        >>> format_date_iso(date(2024, 1, 15))
        '2024-01-15'
    """
    if value is None:
        return None
    return value.isoformat()
