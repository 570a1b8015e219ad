"""
Tests for date, text and import utilities.
"""

import re
from datetime import date, datetime

import pytest

from evjournal.utils.import_utils import format_reportable, generate_import_code, get_file_hash
from evjournal.utils.text_utils import normalize_label, strip_accents
from evjournal.utils.time_utils import excel_serial_to_date, format_date_iso, parse_date


class TestParseDate:
    """Tests for parse_date."""

    def test_iso_string(self):
        assert parse_date("2024-01-15") == date(2024, 1, 15)

    def test_iso_datetime_string(self):
        assert parse_date("2024-01-15T14:30:00Z") == date(2024, 1, 15)

    def test_day_first_string(self):
        assert parse_date("05/03/2024") == date(2024, 3, 5)

    def test_datetime_truncated(self):
        assert parse_date(datetime(2024, 1, 15, 23, 59)) == date(2024, 1, 15)

    def test_excel_serial(self):
        assert parse_date(45292) == date(2024, 1, 1)
        assert excel_serial_to_date(45292.75) == date(2024, 1, 1)

    def test_small_number_is_not_a_date(self):
        assert parse_date(1200) is None

    @pytest.mark.parametrize("value", [None, "", "   ", "not a date", True])
    def test_invalid_returns_default(self, value):
        assert parse_date(value) is None
        assert parse_date(value, default=date(2000, 1, 1)) == date(2000, 1, 1)

    def test_format_iso(self):
        assert format_date_iso(date(2024, 1, 5)) == "2024-01-05"
        assert format_date_iso(None) is None


class TestTextUtils:
    """Tests for label normalization."""

    def test_strip_accents(self):
        assert strip_accents("Kilométrage après") == "Kilometrage apres"

    def test_normalize_label(self):
        assert normalize_label("  Batterie   Départ (%) ") == "batterie depart (%)"

    def test_normalize_none(self):
        assert normalize_label(None) == ""


class TestImportUtils:
    """Tests for import codes and reportable strings."""

    def test_import_code_format(self):
        assert re.fullmatch(r"IMP-\d{8}-[A-Z2-9]{6}", generate_import_code())

    def test_file_hash_same_for_text_and_bytes(self):
        assert get_file_hash("abc") == get_file_hash(b"abc")
        assert len(get_file_hash(b"abc")) == 64

    def test_format_reportable_success(self):
        line = format_reportable("IMP-20240101-AAAAAA", "success", "charges",
                                 parsed_rows=42, total_rows=45, duplicates=3)

        assert line == "IMP-20240101-AAAAAA | SUCCESS | charges | 42/45 rows | 3 duplicate(s)"

    def test_format_reportable_failure(self):
        line = format_reportable("IMP-20240101-AAAAAA", "failed", "trips",
                                 total_rows=12, error_count=2)

        assert line == "IMP-20240101-AAAAAA | FAILED | trips | 0/12 rows | 2 error(s)"
