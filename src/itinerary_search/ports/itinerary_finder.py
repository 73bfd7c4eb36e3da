"""
Itinerary Finder port interface.

Defines the abstract contract for search algorithms.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from src.itinerary_search.ports.flight_directory import FlightDirectory
    from src.itinerary_search.schemas.itinerary import Itinerary
    from src.itinerary_search.schemas.route import RouteClassification
    from src.itinerary_search.schemas.search import SearchCancellation


class ItineraryFinder(ABC):
    """
    Abstract interface for itinerary search algorithms.

    Finders receive a directory snapshot that stays consistent for the
    whole call. Results are returned in discovery order; sorting is the
    caller's concern.

    Implementations:
    - DepthFirstItineraryFinder: Depth-bounded DFS with layover validation
    """

    @abstractmethod
    def find_itineraries(
        self,
        directory: FlightDirectory,
        origin: str,
        destination: str,
        departure_date: date,
        classification: RouteClassification,
        cancellation: Optional[SearchCancellation] = None,
    ) -> List[Itinerary]:
        """
        Find all legal itineraries for one origin/destination/date.

        Args:
            directory: Directory snapshot to read flights and airports from.
            origin: Origin airport IATA code.
            destination: Destination airport IATA code.
            departure_date: Local departure date at the origin.
            classification: Route classification (stop ceiling, country).
            cancellation: Optional cancellation signal.

        Returns:
            Itineraries in discovery order.

        Raises:
            SearchCancelledError: If cancelled mid-search.
        """
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Algorithm identifier.

        Returns:
            Human-readable algorithm name.
        """
        ...
