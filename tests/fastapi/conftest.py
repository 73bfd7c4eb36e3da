"""
Fixtures for FastAPI endpoint tests.

Provides an engine over a small in-memory network and a TestClient with
the module-level engine patched to it.
"""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import patch

from src.itinerary_search.application import SearchItineraries


@pytest.fixture
def anyio_backend():
    """Use asyncio backend for async tests."""
    return "asyncio"


@pytest.fixture
def test_engine(make_directory, make_flight) -> SearchItineraries:
    """Engine over JFK/ORD/LAX/LHR/NRT flights on 2024-03-15."""
    directory = make_directory([
        make_flight("SP101", "JFK", "LAX", "2024-03-15T08:00:00", "2024-03-15T11:30:00",
                    price=299.0, airline="SkyPath Airways", aircraft="A321"),
        make_flight("SP110", "JFK", "ORD", "2024-03-15T06:30:00", "2024-03-15T08:15:00", price=149.0),
        make_flight("SP111", "ORD", "LAX", "2024-03-15T10:15:00", "2024-03-15T12:45:00", price=189.5),
        make_flight("SP300", "JFK", "NRT", "2024-03-15T12:00:00", "2024-03-16T15:30:00", price=1150.0),
    ])
    return SearchItineraries(directory=directory)


@pytest.fixture
def client(test_engine):
    """TestClient with the API's engine swapped for test_engine."""
    from src.fastapi.itinerary_api import app

    with patch("src.fastapi.itinerary_api.engine", test_engine):
        yield TestClient(app, raise_server_exceptions=False)
