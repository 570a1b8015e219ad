"""
Tests for report periods and tariff parsing
"""

from datetime import date, datetime

import pytest

from evjournal.calculations.periods import Period, get_period_key, iso_week
from evjournal.calculations.tariffs import (
    AC_TARIFFS,
    TARIFF_GROUPS,
    TARIFF_PRICE_FIELDS,
    TEMPO_TARIFFS,
    TariffType,
    is_ac_tariff,
    parse_tariff,
    parse_tariff_filter,
)
from evjournal.models import Settings


class TestPeriodKeys:
    """Test bucket keys"""

    def test_monthly(self):
        assert get_period_key(date(2024, 3, 5), Period.MONTHLY) == "2024-03"

    def test_yearly(self):
        assert get_period_key(date(2024, 3, 5), Period.YEARLY) == "2024"

    def test_weekly(self):
        assert get_period_key(date(2024, 3, 5), Period.WEEKLY) == "2024-W10"

    def test_weekly_iso_year_at_year_end(self):
        """30 Dec 2024 is in week 1 of 2025"""
        assert get_period_key(date(2024, 12, 30), Period.WEEKLY) == "2025-W01"

    def test_weekly_iso_year_at_year_start(self):
        """3 Jan 2021 is in week 53 of 2020"""
        assert get_period_key(date(2021, 1, 3), Period.WEEKLY) == "2020-W53"
        assert iso_week(date(2021, 1, 3)) == (2020, 53)

    def test_string_period_and_date(self):
        assert get_period_key("2024-11-02", "monthly") == "2024-11"

    def test_datetime(self):
        assert get_period_key(datetime(2024, 11, 2, 23, 59), Period.MONTHLY) == "2024-11"

    def test_unknown_period(self):
        with pytest.raises(ValueError):
            get_period_key(date(2024, 1, 1), "quarterly")

    def test_unparseable_date(self):
        with pytest.raises(ValueError):
            get_period_key("not a date", Period.MONTHLY)


class TestTariffs:
    """Test tariff table"""

    def test_quick_charge_is_not_ac(self):
        assert not is_ac_tariff(TariffType.QUICK_CHARGE)
        assert TariffType.QUICK_CHARGE not in AC_TARIFFS

    def test_every_other_tariff_is_ac(self):
        assert set(AC_TARIFFS) == set(TariffType) - {TariffType.QUICK_CHARGE}

    def test_price_fields_exist_on_settings(self):
        settings = Settings()
        for field in TARIFF_PRICE_FIELDS.values():
            assert hasattr(settings, field)

    @pytest.mark.parametrize("value,expected", [
        ("Heures Creuses", TariffType.OFF_PEAK),
        ("  heures   creuses ", TariffType.OFF_PEAK),
        ("Tempo Bleu - Heures Pleines", TariffType.TEMPO_BLUE_PEAK),
        ("recharge borne rapide", TariffType.QUICK_CHARGE),
        ("FREE_CHARGE", TariffType.FREE_CHARGE),
        (TariffType.PEAK, TariffType.PEAK),
    ])
    def test_parse_tariff(self, value, expected):
        assert parse_tariff(value) is expected

    def test_parse_unknown_tariff(self):
        assert parse_tariff("Super Heures") is None
        assert parse_tariff(None) is None


class TestTariffFilterParsing:
    """Tariff labels and group names expanded into a filter"""

    def test_groups_cover_every_paid_tariff_once(self):
        grouped = [t for group in TARIFF_GROUPS.values() for t in group]

        assert len(grouped) == len(set(grouped))
        assert set(grouped) == set(TariffType) - {TariffType.FREE_CHARGE}

    def test_group_name(self):
        assert parse_tariff_filter(["Tempo"]) == list(TEMPO_TARIFFS)

    def test_labels_and_groups_mixed(self):
        tariffs = parse_tariff_filter(["quick", "heures creuses", "peak_offpeak"])

        assert tariffs == [TariffType.QUICK_CHARGE, TariffType.OFF_PEAK, TariffType.PEAK]

    def test_unknown_values_skipped(self):
        assert parse_tariff_filter(["Super Heures", None]) == []
