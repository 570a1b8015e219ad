"""EV Journal: charge, trip and cost derivation for electric vehicle logbooks."""

__version__ = "1.0.0"
