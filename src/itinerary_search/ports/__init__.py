"""
Port interfaces for the itinerary search engine.

Ports define the abstract interfaces (ABCs) that the domain layer uses to
communicate with external systems. This follows the Ports and Adapters
(Hexagonal) architecture pattern.
"""

from src.itinerary_search.ports.flight_data_provider import FlightDataProvider
from src.itinerary_search.ports.flight_directory import FlightDirectory
from src.itinerary_search.ports.itinerary_finder import ItineraryFinder

__all__ = [
    "FlightDataProvider",
    "FlightDirectory",
    "ItineraryFinder",
]
