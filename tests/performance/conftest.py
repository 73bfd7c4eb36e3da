"""
Fixtures for search benchmarks.

Synthetic networks are generated with a seeded numpy RNG so runs are
comparable. All synthetic airports sit in UTC, half in each of two
countries.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Tuple

import numpy as np
import pytest

from src.itinerary_search.adapters.directories.in_memory_directory import (
    DirectorySnapshot,
)
from src.itinerary_search.schemas.airport import Airport
from src.itinerary_search.schemas.flight import Flight

BASE_DAY = datetime(2024, 3, 15)


def _airport_code(i: int) -> str:
    return f"{chr(65 + i // 676)}{chr(65 + i // 26 % 26)}{chr(65 + i % 26)}"


def generate_synthetic_network(
    num_flights: int,
    num_airports: int = 60,
    seed: int = 42,
) -> Tuple[List[Flight], List[Airport]]:
    """
    Generate a random flight network over one day of departures.

    Args:
        num_flights: Number of flights to generate.
        num_airports: Number of airports.
        seed: Random seed for reproducibility.

    Returns:
        (flights, airports)
    """
    rng = np.random.default_rng(seed)

    airports = [
        Airport(_airport_code(i), f"Airport {i}", f"City {i}", "AA" if i % 2 else "BB", "UTC")
        for i in range(num_airports)
    ]
    codes = np.array([a.code for a in airports])

    origins = rng.choice(codes, size=num_flights)
    destinations = rng.choice(codes, size=num_flights)
    mask = origins == destinations
    while mask.any():
        destinations[mask] = rng.choice(codes, size=mask.sum())
        mask = origins == destinations

    dep_minutes = rng.integers(0, 36 * 60, size=num_flights)
    durations = rng.integers(60, 600, size=num_flights)
    prices = rng.uniform(50, 500, size=num_flights).round(2)

    flights = []
    for i in range(num_flights):
        departure = BASE_DAY + timedelta(minutes=int(dep_minutes[i]))
        arrival = departure + timedelta(minutes=int(durations[i]))
        flights.append(
            Flight(
                flight_number=f"SY{i:05d}",
                airline="Synthetic Air",
                origin=str(origins[i]),
                destination=str(destinations[i]),
                local_departure_time=departure,
                local_arrival_time=arrival,
                price=float(prices[i]),
                aircraft="A320",
                departure_instant=departure.replace(tzinfo=timezone.utc),
                arrival_instant=arrival.replace(tzinfo=timezone.utc),
            )
        )
    return flights, airports


@pytest.fixture(scope="module")
def synthetic_network_2k() -> Tuple[List[Flight], List[Airport]]:
    """2,000 flights over 60 airports."""
    return generate_synthetic_network(2_000)


@pytest.fixture(scope="module")
def synthetic_snapshot_2k(synthetic_network_2k) -> DirectorySnapshot:
    flights, airports = synthetic_network_2k
    return DirectorySnapshot.from_flights(flights, airports, version="synthetic-2k")
