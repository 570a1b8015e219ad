"""
Pytest fixtures for EV Journal tests.
"""

from dataclasses import replace
from datetime import date

import pytest

from evjournal.calculations.tariffs import TariffType
from evjournal.models import MaintenanceEntry, MaintenanceType, Settings, Vehicle
from tests.factories import make_charge


@pytest.fixture
def vehicle():
    """50 kWh vehicle, 4 CV."""
    return Vehicle(id="v1", name="Zoe", battery_capacity_kwh=50.0, fiscal_power=4)


@pytest.fixture
def settings():
    """Prices without gasoline reference."""
    return Settings(
        price_peak=0.20,
        price_off_peak=0.15,
        price_tempo_blue_peak=0.18,
        price_tempo_blue_offpeak=0.13,
        billing_rate_local=8.0,
        billing_rate_medium=15.0,
    )


@pytest.fixture
def gas_settings(settings):
    """Same prices with a 6 L/100km gasoline car at 1.80 per liter."""
    return replace(settings, gasoline_consumption_l_100km=6.0, gasoline_price_per_liter=1.8)


@pytest.fixture
def scenario_charges():
    """Off-peak charge at 10000 km then peak charge at 10300 km."""
    return [
        make_charge("c2", 10300, 40, 90, TariffType.PEAK, day=date(2024, 2, 3)),
        make_charge("c1", 10000, 80, 100, TariffType.OFF_PEAK, day=date(2024, 1, 15)),
    ]


@pytest.fixture
def maintenance_entries():
    return [
        MaintenanceEntry(id="m1", date=date(2023, 6, 1), odometer=8000, type=MaintenanceType.TYRES,
                         cost=400.0, vehicle_id="v1"),
        MaintenanceEntry(id="m2", date=date(2024, 3, 1), odometer=10500, type=MaintenanceType.WASH,
                         cost=20.0, vehicle_id="v1"),
        MaintenanceEntry(id="m3", date=date(2024, 5, 1), odometer=11000,
                         type=MaintenanceType.PERIODIC_SERVICE, cost=150.0, vehicle_id="v1"),
    ]
