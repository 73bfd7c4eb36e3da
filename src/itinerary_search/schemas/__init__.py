"""
Schema definitions for the itinerary search engine.

Pandera-validated DataFrames at the dataset boundary, frozen dataclasses
for the values the engine passes around.
"""

from .airport import Airport, AirportDataFrame, AirportSchema
from .flight import (
    Flight,
    NormalizedFlightDataFrame,
    NormalizedFlightSchema,
    RawFlight,
    RawFlightDataFrame,
    RawFlightSchema,
)
from .itinerary import DOMESTIC, INTERNATIONAL, FlightSegment, Itinerary, Layover
from .route import LayoverRules, RouteClassification
from .search import SearchCancellation, WindowStrategy

__all__ = [
    # Airport
    "Airport",
    "AirportSchema",
    "AirportDataFrame",
    # Flight schemas
    "Flight",
    "RawFlightSchema",
    "RawFlight",
    "RawFlightDataFrame",
    "NormalizedFlightSchema",
    "NormalizedFlightDataFrame",
    # Itinerary
    "FlightSegment",
    "Layover",
    "Itinerary",
    "DOMESTIC",
    "INTERNATIONAL",
    # Route policy
    "LayoverRules",
    "RouteClassification",
    # Search execution
    "SearchCancellation",
    "WindowStrategy",
]
