"""
Shared fixtures for itinerary search tests.

Airports cover three countries and a date-line crossing; flights are
built through the TimeNormalizer so every test works on real UTC
instants.
"""

from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Iterable

import pytest

from src.itinerary_search.adapters.directories.in_memory_directory import (
    DirectorySnapshot,
)
from src.itinerary_search.schemas.airport import Airport
from src.itinerary_search.schemas.flight import Flight, RawFlight
from src.itinerary_search.services.time_normalizer import TimeNormalizer

DATASET_PATH = Path(__file__).resolve().parents[1] / "data" / "flights.json"


AIRPORTS = (
    Airport("JFK", "John F. Kennedy International Airport", "New York", "US", "America/New_York"),
    Airport("LAX", "Los Angeles International Airport", "Los Angeles", "US", "America/Los_Angeles"),
    Airport("ORD", "O'Hare International Airport", "Chicago", "US", "America/Chicago"),
    Airport("SFO", "San Francisco International Airport", "San Francisco", "US", "America/Los_Angeles"),
    Airport("LHR", "Heathrow Airport", "London", "GB", "Europe/London"),
    Airport("CDG", "Charles de Gaulle Airport", "Paris", "FR", "Europe/Paris"),
    Airport("NRT", "Narita International Airport", "Tokyo", "JP", "Asia/Tokyo"),
)


@pytest.fixture
def airports() -> Dict[str, Airport]:
    """Airport lookup by code."""
    return {a.code: a for a in AIRPORTS}


@pytest.fixture
def normalizer() -> TimeNormalizer:
    return TimeNormalizer()


@pytest.fixture
def make_flight(airports, normalizer) -> Callable[..., Flight]:
    """
    Factory for normalized flights.

    Times are local ISO strings, interpreted in the origin/destination
    airport timezones.
    """

    def _make(
        flight_number: str,
        origin: str,
        destination: str,
        departure: str,
        arrival: str,
        price: float = 100.0,
        airline: str = "Test Air",
        aircraft: str = "A320",
    ) -> Flight:
        raw = RawFlight(
            flight_number=flight_number,
            airline=airline,
            origin=origin,
            destination=destination,
            departure_time=datetime.fromisoformat(departure),
            arrival_time=datetime.fromisoformat(arrival),
            price=price,
            aircraft=aircraft,
        )
        return normalizer.normalize(raw, airports[origin], airports[destination])

    return _make


@pytest.fixture
def make_directory(airports) -> Callable[..., DirectorySnapshot]:
    """Factory for directory snapshots over the shared airports."""

    def _make(flights: Iterable[Flight], extra_airports: Iterable[Airport] = ()) -> DirectorySnapshot:
        return DirectorySnapshot.from_flights(
            list(flights), list(airports.values()) + list(extra_airports)
        )

    return _make


@pytest.fixture
def dataset_path() -> Path:
    """Bundled sample dataset."""
    return DATASET_PATH
