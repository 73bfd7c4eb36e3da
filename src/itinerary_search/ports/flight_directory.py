"""
Flight Directory port interface.

Defines the read-only lookup capability the search engine consumes.
Implementations may sit on memory, a database, or a remote API; the
search core never depends on a concrete provider.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import List, Optional

from src.itinerary_search.schemas.airport import Airport
from src.itinerary_search.schemas.flight import Flight


class FlightDirectory(ABC):
    """
    Abstract interface over flight and airport records.

    All flight queries return flights ordered by departure instant.
    Date ranges refer to the flight's local departure date at its origin
    and are inclusive on both ends. Instant windows are inclusive too.

    Implementations:
    - InMemoryFlightDirectory: Indexed, build-then-freeze snapshot
    """

    @abstractmethod
    def flights_departing(
        self,
        airport_code: str,
        date_from: date,
        date_to: date,
    ) -> List[Flight]:
        """
        Flights departing an airport within a local-date range.

        Args:
            airport_code: Origin IATA code.
            date_from: First local departure date (inclusive).
            date_to: Last local departure date (inclusive).

        Returns:
            Matching flights, ordered by departure instant.
        """
        ...

    @abstractmethod
    def direct_flights(
        self,
        origin: str,
        destination: str,
        date_from: date,
        date_to: date,
    ) -> List[Flight]:
        """
        Flights between two airports within a local-date range.

        Args:
            origin: Origin IATA code.
            destination: Destination IATA code.
            date_from: First local departure date (inclusive).
            date_to: Last local departure date (inclusive).

        Returns:
            Matching flights, ordered by departure instant.
        """
        ...

    @abstractmethod
    def flights_in_instant_window(
        self,
        airport_code: str,
        earliest: datetime,
        latest: datetime,
    ) -> List[Flight]:
        """
        Flights departing an airport within a UTC instant window.

        Args:
            airport_code: Origin IATA code.
            earliest: Earliest departure instant (inclusive, tz-aware).
            latest: Latest departure instant (inclusive, tz-aware).

        Returns:
            Matching flights, ordered by departure instant.
        """
        ...

    @abstractmethod
    def airport(self, code: str) -> Optional[Airport]:
        """Look up an airport by IATA code, or None if unknown."""
        ...

    @abstractmethod
    def all_airports(self) -> List[Airport]:
        """All known airports."""
        ...

    def airport_exists(self, code: str) -> bool:
        """Check if an airport with the given code exists."""
        return self.airport(code) is not None

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Human-readable name of this directory.

        Returns:
            Directory identifier (e.g., "In-Memory Directory").
        """
        ...

    def snapshot(self) -> "FlightDirectory":
        """
        Return a view that stays consistent for the duration of one search.

        Directories that can be reloaded return their current immutable
        snapshot; static directories return themselves.
        """
        return self
