"""
Route Classifier - Domestic vs. international routes and stop ceilings.
"""

from __future__ import annotations

from src.itinerary_search.ports.flight_directory import FlightDirectory
from src.itinerary_search.schemas.route import (
    DOMESTIC_MAX_STOPS,
    INTERNATIONAL_MAX_STOPS,
    RouteClassification,
)


class RouteClassifier:
    """
    Classifies a whole search as domestic or international.

    Domestic routes (same country) allow fewer stops and restrict
    intermediates to that country. Unknown airports fall back to
    international rules.
    """

    def __init__(
        self,
        directory: FlightDirectory,
        domestic_max_stops: int = DOMESTIC_MAX_STOPS,
        international_max_stops: int = INTERNATIONAL_MAX_STOPS,
    ) -> None:
        if domestic_max_stops < 0 or international_max_stops < 0:
            raise ValueError("max stops must be >= 0")
        self._directory = directory
        self._domestic_max_stops = domestic_max_stops
        self._international_max_stops = international_max_stops

    def with_directory(self, directory: FlightDirectory) -> "RouteClassifier":
        """Same ceilings, bound to another directory."""
        if directory is self._directory:
            return self
        return RouteClassifier(
            directory, self._domestic_max_stops, self._international_max_stops
        )

    def classify(self, origin_code: str, destination_code: str) -> RouteClassification:
        """
        Classify the route between two airports.

        Args:
            origin_code: Origin IATA code.
            destination_code: Destination IATA code.

        Returns:
            RouteClassification with stop ceiling and, for domestic
            routes, the country intermediates must stay in.
        """
        origin = self._directory.airport(origin_code)
        destination = self._directory.airport(destination_code)

        if origin is None or destination is None:
            return RouteClassification(
                is_domestic=False, max_stops=self._international_max_stops
            )

        if origin.is_same_country(destination):
            return RouteClassification(
                is_domestic=True,
                max_stops=self._domestic_max_stops,
                domestic_country=origin.country,
            )

        return RouteClassification(
            is_domestic=False, max_stops=self._international_max_stops
        )
