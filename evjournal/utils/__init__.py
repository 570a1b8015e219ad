"""Utility modules for EV Journal."""
