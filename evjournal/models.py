"""
Record types for EV Journal.

Raw records (Charge, Trip, MaintenanceEntry) come from the input providers;
processed records and stat rows are derived from them on every computation
pass and never stored. All records are immutable.
"""

from dataclasses import dataclass, field, fields
from datetime import date
from enum import Enum
from typing import Any, Dict, Optional

from evjournal.calculations.tariffs import TariffType


class RecordStatus(str, Enum):
    """Lifecycle of a charge or trip entry."""

    PENDING = "pending"
    COMPLETED = "completed"


class MaintenanceType(str, Enum):
    """Kinds of maintenance expenses."""

    WASH = "Lavage"
    PERIODIC_SERVICE = "Entretien périodique"
    REPAIR = "Réparation"
    TYRES = "Pneus"
    WINDSCREEN = "Pare-brise"
    BODYWORK = "Carrosserie"


def _serialize(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {_serialize(k): _serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_serialize(v) for v in value]
    if hasattr(value, 'to_dict'):
        return value.to_dict()
    return value


class _Record:
    """Mixin giving dataclass records a JSON-friendly to_dict()."""

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: _serialize(getattr(self, f.name)) for f in fields(self)}


# =============================================================================
# Configuration inputs
# =============================================================================

@dataclass(frozen=True, kw_only=True)
class Vehicle(_Record):
    """A vehicle whose charges and trips are tracked."""

    id: Optional[str] = None
    name: str = ""
    battery_capacity_kwh: float = 0.0
    fiscal_power: Optional[int] = None  # CV, drives the long-trip billing rate
    registration_number: Optional[str] = None


@dataclass(frozen=True, kw_only=True)
class Settings(_Record):
    """User prices and references. Prices are per kWh, gasoline per liter."""

    price_peak: float = 0.0
    price_off_peak: float = 0.0
    price_tempo_blue_peak: float = 0.0
    price_tempo_blue_offpeak: float = 0.0
    price_tempo_white_peak: float = 0.0
    price_tempo_white_offpeak: float = 0.0
    price_tempo_red_peak: float = 0.0
    price_tempo_red_offpeak: float = 0.0

    # Gasoline comparison
    gasoline_consumption_l_100km: float = 0.0
    gasoline_price_per_liter: float = 0.0

    # Billing
    billing_rate_local: float = 0.0
    billing_rate_medium: float = 0.0


# =============================================================================
# Raw records
# =============================================================================

@dataclass(frozen=True, kw_only=True)
class Charge(_Record):
    """A charging session as logged by the user."""

    id: str
    date: date
    odometer: float  # km
    start_percentage: float
    end_percentage: Optional[float] = None
    tariff: Optional[TariffType] = None
    custom_price: Optional[float] = None  # price per kWh for quick charge
    price_per_kwh: Optional[float] = None  # price snapshot taken at creation
    status: RecordStatus = RecordStatus.COMPLETED
    vehicle_id: Optional[str] = None

    @property
    def is_processable(self) -> bool:
        return (
            self.status == RecordStatus.COMPLETED
            and self.end_percentage is not None
            and self.tariff is not None
        )


@dataclass(frozen=True, kw_only=True)
class Trip(_Record):
    """A business trip as logged by the user."""

    id: str
    date: date
    destination: str
    start_odometer: float
    start_percentage: float
    end_odometer: Optional[float] = None
    end_percentage: Optional[float] = None
    is_billed: bool = False
    client: Optional[str] = None
    status: RecordStatus = RecordStatus.COMPLETED
    vehicle_id: Optional[str] = None

    @property
    def is_processable(self) -> bool:
        return (
            self.status == RecordStatus.COMPLETED
            and self.end_odometer is not None
            and self.end_percentage is not None
        )


@dataclass(frozen=True, kw_only=True)
class MaintenanceEntry(_Record):
    """A maintenance expense."""

    id: str
    date: date
    odometer: float
    type: MaintenanceType
    cost: float
    details: Optional[str] = None
    vehicle_id: Optional[str] = None


# =============================================================================
# Processed records
# =============================================================================

def raw_fields(record, record_type) -> Dict[str, Any]:
    """Field values of a raw record, to build its processed counterpart."""
    return {f.name: getattr(record, f.name) for f in fields(record_type)}


@dataclass(frozen=True, kw_only=True)
class ProcessedCharge(Charge):
    """A completed charge with its derived energy and cost figures."""

    end_percentage: float
    tariff: TariffType
    kwh_added_to_battery: float
    kwh_drawn_from_grid: float
    cost: float
    price_per_kwh: float
    # Segment driven since the previous charge (odometer order); None for the first
    distance_driven: Optional[float] = None
    consumption_kwh_100km: Optional[float] = None
    cost_per_100km: Optional[float] = None
    gasoline_equivalent_km: Optional[float] = None


@dataclass(frozen=True, kw_only=True)
class ProcessedTrip(Trip):
    """A completed trip with its derived energy, cost and billing figures."""

    end_odometer: float
    end_percentage: float
    distance: float
    kwh_consumed: float
    cost: float
    consumption_kwh_100km: float
    price_per_kwh: float
    gasoline_equivalent_cost: float
    savings: float
    billing_amount: Optional[float] = None  # None = not billed, distinct from 0


# =============================================================================
# Statistics rows
# =============================================================================

@dataclass(frozen=True, kw_only=True)
class StatsData(_Record):
    """Charging figures of one period bucket."""

    name: str
    charge_count: int
    total_kwh: float  # drawn from the grid
    total_battery_kwh: float
    total_cost: float
    kwh_per_tariff: Dict[TariffType, float] = field(default_factory=dict)
    cost_per_tariff: Dict[TariffType, float] = field(default_factory=dict)
    # Driving fueled by this bucket's charges
    total_distance: float = 0.0
    avg_consumption: float = 0.0
    avg_cost_per_100km: float = 0.0
    total_gasoline_cost: float = 0.0
    total_savings: float = 0.0
    co2_saved_kg: float = 0.0
    # Slow (AC) vs fast (quick charge) split
    slow_charge_kwh: float = 0.0
    fast_charge_kwh: float = 0.0
    slow_charge_cost: float = 0.0
    fast_charge_cost: float = 0.0
    slow_charge_count: int = 0
    fast_charge_count: int = 0


@dataclass(frozen=True, kw_only=True)
class TripStatsData(_Record):
    """Trip figures of one period bucket."""

    name: str
    trip_count: int
    total_distance: float
    total_cost: float
    total_savings: float
    total_billing_amount: float


@dataclass(frozen=True, kw_only=True)
class ClientStats(_Record):
    name: str
    trip_count: int
    total_distance: float
    total_billing_amount: float


@dataclass(frozen=True, kw_only=True)
class DestinationStats(_Record):
    name: str
    trip_count: int
    total_distance: float
    avg_distance: float


@dataclass(frozen=True, kw_only=True)
class VehicleSummary(_Record):
    """Lifetime dashboard figures of one vehicle."""

    total_cost: float = 0.0
    total_distance: float = 0.0
    total_kwh: float = 0.0
    avg_consumption: float = 0.0
    avg_cost_per_100km: float = 0.0
    last_charge: Optional[ProcessedCharge] = None
    savings: Optional[float] = None
    gas_cost_per_100km: Optional[float] = None
    total_maintenance_cost: float = 0.0
    avg_cost_per_100km_with_maintenance: float = 0.0


@dataclass(frozen=True, kw_only=True)
class FleetVehicleStats(_Record):
    """Lifetime figures of one vehicle in a fleet overview."""

    vehicle_id: Optional[str]
    vehicle_name: str
    total_distance: float = 0.0
    total_charge_cost: float = 0.0
    total_maintenance_cost: float = 0.0
    total_cost: float = 0.0
    avg_consumption: float = 0.0
    avg_cost_per_100km: float = 0.0
    total_savings: float = 0.0


@dataclass(frozen=True, kw_only=True)
class MaintenanceYearSummary(_Record):
    year: str
    entry_count: int
    subtotal: float
    cost_per_type: Dict[MaintenanceType, float] = field(default_factory=dict)
