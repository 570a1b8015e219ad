"""
Client and destination statistics for EV Journal.
"""

from typing import Dict, List, Sequence

from evjournal.calculations.constants import DISTANCE_DECIMALS, MONEY_DECIMALS, UNSPECIFIED_CLIENT
from evjournal.calculations.rounding import round_half_up
from evjournal.models import ClientStats, DestinationStats, ProcessedTrip


def client_name(trip: ProcessedTrip) -> str:
    """Client label of a trip; trips without a client share the unspecified label."""
    if trip.client and trip.client.strip():
        return trip.client
    return UNSPECIFIED_CLIENT


def generate_client_stats(trips: Sequence[ProcessedTrip]) -> List[ClientStats]:
    """
    Trip count, distance and billing per client.

    Returns:
        One row per client, highest total billing first
    """
    totals: Dict[str, dict] = {}
    for trip in trips:
        entry = totals.setdefault(
            client_name(trip),
            {"trip_count": 0, "total_distance": 0.0, "total_billing_amount": 0.0}
        )
        entry["trip_count"] += 1
        entry["total_distance"] += trip.distance
        entry["total_billing_amount"] += trip.billing_amount or 0.0

    stats = [
        ClientStats(
            name=name,
            trip_count=entry["trip_count"],
            total_distance=round_half_up(entry["total_distance"], DISTANCE_DECIMALS),
            total_billing_amount=round_half_up(entry["total_billing_amount"], MONEY_DECIMALS),
        )
        for name, entry in totals.items()
    ]
    return sorted(stats, key=lambda s: s.total_billing_amount, reverse=True)


def generate_destination_stats(trips: Sequence[ProcessedTrip]) -> List[DestinationStats]:
    """
    Trip count, total and average distance per destination.

    Returns:
        One row per destination, most visited first
    """
    totals: Dict[str, dict] = {}
    for trip in trips:
        entry = totals.setdefault(trip.destination, {"trip_count": 0, "total_distance": 0.0})
        entry["trip_count"] += 1
        entry["total_distance"] += trip.distance

    stats = [
        DestinationStats(
            name=name,
            trip_count=entry["trip_count"],
            total_distance=round_half_up(entry["total_distance"], DISTANCE_DECIMALS),
            avg_distance=round_half_up(entry["total_distance"] / entry["trip_count"], DISTANCE_DECIMALS),
        )
        for name, entry in totals.items()
    ]
    return sorted(stats, key=lambda s: s.trip_count, reverse=True)
