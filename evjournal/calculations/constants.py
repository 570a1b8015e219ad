"""
Calculation Constants for EV Journal

Centralized location for all mathematical and physical constants used in calculations.
All values should be imported from Config where possible to maintain single source of truth.
"""

from evjournal.config import Config
from evjournal.exceptions import ConfigurationError

# Charging Constants
CHARGING_LOSS_FACTOR = Config.CHARGING_LOSS_FACTOR  # Grid kWh per battery kWh on AC

if CHARGING_LOSS_FACTOR < 1.0:
    raise ConfigurationError(
        f"Charging loss factor must be >= 1.0, got {CHARGING_LOSS_FACTOR}",
        config_key="CHARGING_LOSS_FACTOR"
    )

# Gasoline Constants
CO2_KG_PER_LITER = Config.CO2_KG_PER_LITER  # CO2 emitted per liter of gasoline burned

# Billing Constants
BILLING_LOCAL_MAX_KM = Config.BILLING_LOCAL_MAX_KM  # Below this = flat local rate
BILLING_MEDIUM_MAX_KM = Config.BILLING_MEDIUM_MAX_KM  # Up to this = flat medium rate
DEFAULT_FISCAL_POWER = Config.DEFAULT_FISCAL_POWER  # Used when the vehicle has none

# Per-km rates for long trips, by fiscal power (CV)
RATE_PER_KM_UP_TO_3CV = 0.529
RATE_PER_KM_4CV = 0.606
RATE_PER_KM_5CV_AND_MORE = 0.636

# Rounding
MONEY_DECIMALS = 2  # Currency values
ENERGY_DECIMALS = 2  # kWh and kWh/100km values
DISTANCE_DECIMALS = 0  # km values
PRICE_DECIMALS = 4  # Price per kWh keeps sub-cent precision
CO2_DECIMALS = 2  # kg of CO2

# Labels
UNSPECIFIED_CLIENT = "unspecified"
