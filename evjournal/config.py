import os


class Config:
    """Application configuration from environment variables."""

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    WIDE_EVENT_SAMPLE_RATE = float(os.environ.get('WIDE_EVENT_SAMPLE_RATE', 0.05))

    # Charging
    CHARGING_LOSS_FACTOR = float(os.environ.get('CHARGING_LOSS_FACTOR', 1.12))  # 12% AC loss

    # Gasoline comparison
    CO2_KG_PER_LITER = float(os.environ.get('CO2_KG_PER_LITER', 2.31))

    # Billing tiers (km)
    BILLING_LOCAL_MAX_KM = int(os.environ.get('BILLING_LOCAL_MAX_KM', 11))  # distance < this = local
    BILLING_MEDIUM_MAX_KM = int(os.environ.get('BILLING_MEDIUM_MAX_KM', 30))  # distance <= this = medium
    DEFAULT_FISCAL_POWER = int(os.environ.get('DEFAULT_FISCAL_POWER', 4))

    # Spreadsheet import
    IMPORT_MAX_ERRORS = int(os.environ.get('IMPORT_MAX_ERRORS', 50))
