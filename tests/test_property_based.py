"""
Property-based tests using Hypothesis.

These tests generate charge and trip journals and check invariants that
must hold for any input: bucket totals, recomputation, odometer linkage
and trip pricing.
"""

from datetime import date, timedelta

import pytest
from hypothesis import HealthCheck, given, settings, strategies as st

from evjournal.calculations.constants import CHARGING_LOSS_FACTOR
from evjournal.calculations.periods import Period, get_period_key
from evjournal.calculations.tariffs import TariffType, is_ac_tariff
from evjournal.models import Charge, Settings, Trip, Vehicle
from evjournal.services.charge_service import process_charges
from evjournal.services.stats_service import generate_charge_stats, generate_trip_stats
from evjournal.services.trip_service import process_trips

VEHICLE = Vehicle(id="v1", name="Test", battery_capacity_kwh=52.0, fiscal_power=4)
SETTINGS = Settings(
    price_peak=0.2516,
    price_off_peak=0.1828,
    price_tempo_blue_peak=0.1798,
    price_tempo_blue_offpeak=0.1296,
    price_tempo_white_peak=0.3022,
    price_tempo_white_offpeak=0.1486,
    price_tempo_red_peak=0.7562,
    price_tempo_red_offpeak=0.1568,
    gasoline_consumption_l_100km=6.5,
    gasoline_price_per_liter=1.85,
    billing_rate_local=8.0,
    billing_rate_medium=15.0,
)

dates = st.dates(min_value=date(2022, 12, 20), max_value=date(2025, 1, 10))


@st.composite
def charge_lists(draw, max_size=25):
    """Completed charges with distinct ids."""
    size = draw(st.integers(min_value=0, max_value=max_size))
    charges = []
    for i in range(size):
        start = draw(st.integers(min_value=0, max_value=99))
        end = draw(st.integers(min_value=start, max_value=100))
        tariff = draw(st.sampled_from(list(TariffType)))
        custom_price = None
        if tariff == TariffType.QUICK_CHARGE:
            custom_price = draw(st.floats(min_value=0.1, max_value=0.9))
        charges.append(Charge(
            id=f"c{i}",
            date=draw(dates),
            odometer=draw(st.integers(min_value=0, max_value=100000)),
            start_percentage=start,
            end_percentage=end,
            tariff=tariff,
            custom_price=custom_price,
        ))
    return charges


@st.composite
def trip_lists(draw, max_size=25):
    size = draw(st.integers(min_value=0, max_value=max_size))
    trips = []
    for i in range(size):
        start_odometer = draw(st.integers(min_value=0, max_value=100000))
        start = draw(st.integers(min_value=1, max_value=100))
        trips.append(Trip(
            id=f"t{i}",
            date=draw(dates),
            destination=draw(st.sampled_from(["Lyon", "Bron", "Paris"])),
            start_odometer=start_odometer,
            end_odometer=start_odometer + draw(st.integers(min_value=-5, max_value=400)),
            start_percentage=start,
            end_percentage=draw(st.integers(min_value=0, max_value=start)),
            is_billed=draw(st.booleans()),
        ))
    return trips


class TestChargeProperties:
    """Invariants of charge processing."""

    @given(charge_lists())
    def test_recomputation_is_idempotent(self, charges):
        assert process_charges(charges, SETTINGS, VEHICLE) == process_charges(charges, SETTINGS, VEHICLE)

    @given(charge_lists())
    def test_output_sorted_by_odometer(self, charges):
        processed = process_charges(charges, SETTINGS, VEHICLE)

        odometers = [c.odometer for c in processed]
        assert odometers == sorted(odometers)

    @given(charge_lists())
    def test_first_charge_has_no_segment(self, charges):
        processed = process_charges(charges, SETTINGS, VEHICLE)

        if processed:
            assert processed[0].distance_driven is None
            assert processed[0].consumption_kwh_100km is None
            assert processed[0].cost_per_100km is None

    @given(charge_lists())
    def test_segment_distance_is_odometer_delta(self, charges):
        processed = process_charges(charges, SETTINGS, VEHICLE)

        for previous, current in zip(processed, processed[1:]):
            assert current.distance_driven == current.odometer - previous.odometer
            if current.distance_driven <= 0:
                assert current.consumption_kwh_100km is None

    @given(charge_lists())
    def test_ac_loss(self, charges):
        for charge in process_charges(charges, SETTINGS, VEHICLE):
            if is_ac_tariff(charge.tariff):
                expected = charge.kwh_added_to_battery * CHARGING_LOSS_FACTOR
            else:
                expected = charge.kwh_added_to_battery
            assert charge.kwh_drawn_from_grid == pytest.approx(expected, abs=0.02)

    @given(charge_lists())
    def test_free_charge_costs_nothing(self, charges):
        for charge in process_charges(charges, SETTINGS, VEHICLE):
            if charge.tariff == TariffType.FREE_CHARGE:
                assert charge.cost == 0.0


class TestAggregationProperties:
    """Bucket totals match the records they group."""

    @given(charge_lists(), st.sampled_from(list(Period)))
    @settings(suppress_health_check=[HealthCheck.too_slow])
    def test_charge_bucket_sums(self, charges, period):
        processed = process_charges(charges, SETTINGS, VEHICLE)
        stats = generate_charge_stats(processed, period, SETTINGS)

        assert sum(s.charge_count for s in stats) == len(processed)
        assert sum(s.total_kwh for s in stats) == pytest.approx(
            sum(c.kwh_drawn_from_grid for c in processed), abs=0.01 * (len(stats) + 1)
        )
        assert sum(s.total_cost for s in stats) == pytest.approx(
            sum(c.cost for c in processed), abs=0.01 * (len(stats) + 1)
        )
        assert sum(s.total_distance for s in stats) == sum(
            c.distance_driven for c in processed if (c.distance_driven or 0) > 0
        )
        assert [s.name for s in stats] == sorted(s.name for s in stats)

    @given(charge_lists())
    def test_slow_and_fast_partition_charges(self, charges):
        processed = process_charges(charges, SETTINGS, VEHICLE)

        for bucket in generate_charge_stats(processed, Period.YEARLY, SETTINGS):
            assert bucket.slow_charge_count + bucket.fast_charge_count == bucket.charge_count

    @given(charge_lists(), trip_lists(), st.sampled_from(list(Period)))
    @settings(suppress_health_check=[HealthCheck.too_slow])
    def test_trip_bucket_sums(self, charges, trips, period):
        processed_charges = process_charges(charges, SETTINGS, VEHICLE)
        processed = process_trips(trips, SETTINGS, VEHICLE, processed_charges)
        stats = generate_trip_stats(processed, period)

        assert sum(s.trip_count for s in stats) == len(processed)
        assert sum(s.total_distance for s in stats) == sum(t.distance for t in processed)
        assert sum(s.total_cost for s in stats) == pytest.approx(
            sum(t.cost for t in processed), abs=0.01 * (len(stats) + 1)
        )
        assert sum(s.total_billing_amount for s in stats) == pytest.approx(
            sum(t.billing_amount or 0.0 for t in processed), abs=0.01 * (len(stats) + 1)
        )


class TestRoundingProperties:
    """Reported figures carry 2 decimals for money and energy, 0 for distance."""

    @given(charge_lists())
    def test_charge_figures(self, charges):
        for charge in process_charges(charges, SETTINGS, VEHICLE):
            for value in (charge.kwh_added_to_battery, charge.kwh_drawn_from_grid, charge.cost,
                          charge.consumption_kwh_100km, charge.cost_per_100km):
                if value is not None:
                    assert round(value, 2) == value
            if charge.gasoline_equivalent_km is not None:
                assert round(charge.gasoline_equivalent_km) == charge.gasoline_equivalent_km

    @given(charge_lists(), trip_lists())
    @settings(suppress_health_check=[HealthCheck.too_slow])
    def test_trip_figures(self, charges, trips):
        processed_charges = process_charges(charges, SETTINGS, VEHICLE)

        for trip in process_trips(trips, SETTINGS, VEHICLE, processed_charges):
            assert round(trip.distance) == trip.distance
            for value in (trip.kwh_consumed, trip.cost, trip.consumption_kwh_100km,
                          trip.gasoline_equivalent_cost, trip.savings, trip.billing_amount):
                if value is not None:
                    assert round(value, 2) == value


class TestTripPricingProperties:
    """Trips are priced from the latest charge at or before their start."""

    @given(charge_lists(), trip_lists())
    @settings(suppress_health_check=[HealthCheck.too_slow])
    def test_price_never_from_later_charge(self, charges, trips):
        processed_charges = process_charges(charges, SETTINGS, VEHICLE)

        for trip in process_trips(trips, SETTINGS, VEHICLE, processed_charges):
            earlier = [c for c in processed_charges if c.odometer <= trip.start_odometer]
            expected = earlier[-1].price_per_kwh if earlier else 0.0
            assert trip.price_per_kwh == expected

    @given(charge_lists(), trip_lists())
    def test_unbilled_trips_have_no_billing(self, charges, trips):
        processed_charges = process_charges(charges, SETTINGS, VEHICLE)

        for trip in process_trips(trips, SETTINGS, VEHICLE, processed_charges):
            if not trip.is_billed or trip.distance <= 0:
                assert trip.billing_amount is None

    @given(st.dates(min_value=date(2000, 1, 1), max_value=date(2099, 12, 31)))
    def test_weekly_key_matches_iso_calendar(self, day):
        week_year, week, _ = day.isocalendar()
        assert get_period_key(day, Period.WEEKLY) == f"{week_year}-W{week:02d}"
        # Every day of the same ISO week shares the key
        monday = day - timedelta(days=day.weekday())
        assert get_period_key(monday, Period.WEEKLY) == get_period_key(day, Period.WEEKLY)
