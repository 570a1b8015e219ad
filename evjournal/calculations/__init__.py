"""
EV Journal Calculation Module

Pure calculation helpers for energy, tariffs, prices, billing and
report periods. No function here touches records in bulk; the services
build on them.

Usage:
    from evjournal.calculations import percent_to_kwh, calculate_billing_amount
    from evjournal.calculations.constants import CHARGING_LOSS_FACTOR
"""

# Tariffs
from .tariffs import (
    AC_TARIFFS,
    FREE_TARIFFS,
    RECORD_PRICED_TARIFFS,
    TARIFF_GROUPS,
    TARIFF_PRICE_FIELDS,
    TariffType,
    is_ac_tariff,
    parse_tariff,
    parse_tariff_filter,
)

# Report periods
from .periods import (
    Period,
    get_period_key,
    iso_week,
)

# Energy conversions
from .energy import (
    calculate_consumption_per_100km,
    calculate_grid_kwh,
    kwh_to_percent,
    percent_to_kwh,
)

# Financial calculations
from .financial import (
    calculate_charge_cost,
    calculate_co2_saved_kg,
    calculate_cost_per_100km,
    calculate_gasoline_cost,
    calculate_gasoline_equivalent_km,
    calculate_gasoline_liters,
    has_gasoline_reference,
    resolve_price_per_kwh,
)

# Billing
from .billing import (
    calculate_billing_amount,
    get_rate_per_km,
)

# Rounding
from .rounding import round_half_up

# Constants (re-export for convenience)
from .constants import (
    CHARGING_LOSS_FACTOR,
    CO2_KG_PER_LITER,
    DEFAULT_FISCAL_POWER,
    UNSPECIFIED_CLIENT,
)

__all__ = [
    # Tariffs
    "TariffType",
    "AC_TARIFFS",
    "FREE_TARIFFS",
    "RECORD_PRICED_TARIFFS",
    "TARIFF_GROUPS",
    "TARIFF_PRICE_FIELDS",
    "is_ac_tariff",
    "parse_tariff",
    "parse_tariff_filter",
    # Periods
    "Period",
    "get_period_key",
    "iso_week",
    # Energy
    "percent_to_kwh",
    "kwh_to_percent",
    "calculate_grid_kwh",
    "calculate_consumption_per_100km",
    # Financial
    "resolve_price_per_kwh",
    "calculate_charge_cost",
    "calculate_cost_per_100km",
    "has_gasoline_reference",
    "calculate_gasoline_equivalent_km",
    "calculate_gasoline_liters",
    "calculate_gasoline_cost",
    "calculate_co2_saved_kg",
    # Billing
    "get_rate_per_km",
    "calculate_billing_amount",
    # Rounding
    "round_half_up",
    # Constants
    "CHARGING_LOSS_FACTOR",
    "CO2_KG_PER_LITER",
    "DEFAULT_FISCAL_POWER",
    "UNSPECIFIED_CLIENT",
]
