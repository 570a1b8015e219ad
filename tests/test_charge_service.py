"""
Tests for charge processing.

Covers:
- Energy, grid energy and cost of each charge
- Segment consumption linked by odometer
- Filtering of pending and incomplete charges
- Price snapshots and quick charge prices
"""

from dataclasses import replace
from datetime import date

import pytest

from evjournal.calculations.tariffs import TariffType
from evjournal.models import Charge, RecordStatus
from evjournal.services.charge_service import process_charges
from tests.factories import make_charge


class TestChargeScenario:
    """Two charges, 300 km apart"""

    def test_first_charge(self, scenario_charges, settings, vehicle):
        first, _ = process_charges(scenario_charges, settings, vehicle)

        assert first.id == "c1"
        assert first.kwh_added_to_battery == 10.0
        assert first.kwh_drawn_from_grid == 11.2
        assert first.price_per_kwh == 0.15
        assert first.cost == 1.68

    def test_first_charge_has_no_segment(self, scenario_charges, settings, vehicle):
        first, _ = process_charges(scenario_charges, settings, vehicle)

        assert first.distance_driven is None
        assert first.consumption_kwh_100km is None
        assert first.cost_per_100km is None

    def test_second_charge(self, scenario_charges, settings, vehicle):
        _, second = process_charges(scenario_charges, settings, vehicle)

        assert second.id == "c2"
        assert second.kwh_added_to_battery == 25.0
        assert second.kwh_drawn_from_grid == 28.0
        assert second.cost == 5.6

    def test_second_charge_segment_uses_previous_charge(self, scenario_charges, settings, vehicle):
        """10 kWh and 1.68 from the first charge over 300 km"""
        _, second = process_charges(scenario_charges, settings, vehicle)

        assert second.distance_driven == 300
        assert second.consumption_kwh_100km == 3.33
        assert second.cost_per_100km == 0.56

    def test_segment_uses_unrounded_previous_energy(self, settings, vehicle):
        """1% of 52.3 kWh is 0.523 kWh over 1 km, not the stored 0.52"""
        small_battery = replace(vehicle, battery_capacity_kwh=52.3)
        charges = [
            make_charge("c1", 10000, 20, 21),
            make_charge("c2", 10001, 21, 60),
        ]

        first, second = process_charges(charges, settings, small_battery)

        assert first.kwh_added_to_battery == 0.52
        assert second.consumption_kwh_100km == 52.3

    def test_raw_fields_are_kept(self, scenario_charges, settings, vehicle):
        first, _ = process_charges(scenario_charges, settings, vehicle)

        assert first.date == date(2024, 1, 15)
        assert first.start_percentage == 80
        assert first.end_percentage == 100
        assert first.tariff == TariffType.OFF_PEAK


class TestChargeOrdering:
    """Charges are linked by odometer, never by date"""

    def test_sorted_by_odometer(self, settings, vehicle):
        charges = [
            make_charge("c3", 12000, 20, 80, day=date(2024, 1, 1)),
            make_charge("c1", 10000, 20, 80, day=date(2024, 3, 1)),
            make_charge("c2", 11000, 20, 80, day=date(2024, 2, 1)),
        ]

        processed = process_charges(charges, settings, vehicle)

        assert [c.id for c in processed] == ["c1", "c2", "c3"]
        assert [c.distance_driven for c in processed] == [None, 1000, 1000]

    def test_same_odometer_gives_no_consumption(self, settings, vehicle):
        charges = [
            make_charge("c1", 10000, 20, 50),
            make_charge("c2", 10000, 50, 80),
        ]

        _, second = process_charges(charges, settings, vehicle)

        assert second.distance_driven == 0
        assert second.consumption_kwh_100km is None
        assert second.cost_per_100km is None


class TestChargeFiltering:
    """Only completed charges are processed"""

    def test_no_vehicle(self, scenario_charges, settings):
        assert process_charges(scenario_charges, settings, None) == []

    def test_empty_input(self, settings, vehicle):
        assert process_charges([], settings, vehicle) == []

    def test_pending_charge_excluded(self, settings, vehicle):
        charges = [
            make_charge("c1", 10000, 20, 80),
            Charge(id="c2", date=date(2024, 1, 16), odometer=10100, start_percentage=30,
                   status=RecordStatus.PENDING),
        ]

        processed = process_charges(charges, settings, vehicle)

        assert [c.id for c in processed] == ["c1"]

    def test_completed_charge_without_tariff_excluded(self, settings, vehicle):
        charges = [
            make_charge("c1", 10000, 20, 80),
            make_charge("c2", 10100, 20, 80, tariff=None),
        ]

        processed = process_charges(charges, settings, vehicle)

        assert [c.id for c in processed] == ["c1"]


class TestChargePricing:
    """Price snapshots and per-record prices"""

    def test_snapshot_price_used(self, settings, vehicle):
        charges = [make_charge("c1", 10000, 80, 100, TariffType.OFF_PEAK, price_per_kwh=0.1)]

        (charge,) = process_charges(charges, settings, vehicle)

        assert charge.price_per_kwh == 0.1
        assert charge.cost == 1.12

    def test_quick_charge(self, settings, vehicle):
        """DC: no loss, custom price"""
        charges = [make_charge("c1", 10000, 20, 80, TariffType.QUICK_CHARGE, custom_price=0.5)]

        (charge,) = process_charges(charges, settings, vehicle)

        assert charge.kwh_added_to_battery == 30.0
        assert charge.kwh_drawn_from_grid == 30.0
        assert charge.cost == 15.0

    def test_free_charge(self, settings, vehicle):
        charges = [make_charge("c1", 10000, 20, 80, TariffType.FREE_CHARGE)]

        (charge,) = process_charges(charges, settings, vehicle)

        assert charge.kwh_drawn_from_grid == pytest.approx(33.6)
        assert charge.cost == 0.0
        assert charge.gasoline_equivalent_km is None

    def test_gasoline_equivalent(self, gas_settings, vehicle):
        """5.60 buys 3.11 L = 52 km"""
        charges = [make_charge("c1", 10000, 40, 90, TariffType.PEAK)]

        (charge,) = process_charges(charges, gas_settings, vehicle)

        assert charge.gasoline_equivalent_km == 52.0

    def test_gasoline_equivalent_from_unrounded_cost(self, gas_settings, vehicle):
        """5.4546 buys 50.51 km; the stored 5.45 would only buy 50.46"""
        charges = [make_charge("c1", 10000, 20, 80, TariffType.QUICK_CHARGE, custom_price=0.18182)]

        (charge,) = process_charges(charges, gas_settings, vehicle)

        assert charge.cost == 5.45
        assert charge.gasoline_equivalent_km == 51.0

    def test_cost_rounds_half_up(self, settings, vehicle):
        """25 kWh at 0.245 = 6.125, reported as 6.13"""
        charges = [make_charge("c1", 10000, 20, 70, TariffType.QUICK_CHARGE, custom_price=0.245)]

        (charge,) = process_charges(charges, settings, vehicle)

        assert charge.cost == 6.13

    def test_recomputation_is_idempotent(self, scenario_charges, settings, vehicle):
        assert process_charges(scenario_charges, settings, vehicle) == \
            process_charges(scenario_charges, settings, vehicle)
