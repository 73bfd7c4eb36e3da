"""
Itinerary Assembler - Validated flight paths to itinerary records.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Sequence

from src.itinerary_search.exceptions import DirectoryIntegrityError
from src.itinerary_search.ports.flight_directory import FlightDirectory
from src.itinerary_search.schemas.airport import Airport
from src.itinerary_search.schemas.flight import Flight
from src.itinerary_search.schemas.itinerary import FlightSegment, Itinerary, Layover
from src.itinerary_search.services.connection_validator import ConnectionValidator
from src.itinerary_search.services.time_normalizer import TimeNormalizer, minutes_between

DISPLAY_FORMAT = "%Y-%m-%dT%H:%M:%S"
_CENTS = Decimal("0.01")


def round_price(amount: Decimal) -> float:
    """Round half-up to 2 decimal places."""
    return float(amount.quantize(_CENTS, rounding=ROUND_HALF_UP))


class ItineraryAssembler:
    """
    Turns a chain of connected flights into an immutable Itinerary.

    Segments carry airport names and cities from the directory for
    display. Layovers are classified per connection. The total duration
    is measured end-to-end on the instant axis, which equals the sum of
    segment durations and layovers.
    """

    def __init__(
        self,
        directory: FlightDirectory,
        validator: ConnectionValidator,
        normalizer: Optional[TimeNormalizer] = None,
    ) -> None:
        self._directory = directory
        self._validator = validator
        self._normalizer = normalizer or TimeNormalizer()

    def with_directory(self, directory: FlightDirectory) -> "ItineraryAssembler":
        """Assembler bound to another directory (e.g. a pinned snapshot)."""
        if directory is self._directory:
            return self
        return ItineraryAssembler(
            directory, self._validator.with_directory(directory), self._normalizer
        )

    def assemble(self, path: Sequence[Flight]) -> Itinerary:
        """
        Build an Itinerary from a completed path.

        Args:
            path: Non-empty sequence of connected flights.

        Returns:
            Immutable Itinerary.

        Raises:
            ValueError: If path is empty.
            DirectoryIntegrityError: If a path airport is not in the directory.
        """
        if not path:
            raise ValueError("Cannot assemble an itinerary from an empty path")

        segments: List[FlightSegment] = []
        layovers: List[Layover] = []
        total_price = Decimal("0")

        for i, flight in enumerate(path):
            origin = self._require_airport(flight.origin)
            destination = self._require_airport(flight.destination)

            segments.append(
                FlightSegment(
                    flight_number=flight.flight_number,
                    airline=flight.airline,
                    origin_code=origin.code,
                    origin_name=origin.name,
                    origin_city=origin.city,
                    destination_code=destination.code,
                    destination_name=destination.name,
                    destination_city=destination.city,
                    departure_time=flight.local_departure_time.strftime(DISPLAY_FORMAT),
                    arrival_time=flight.local_arrival_time.strftime(DISPLAY_FORMAT),
                    duration_minutes=self._normalizer.duration_minutes(flight),
                    aircraft=flight.aircraft,
                    price=flight.price,
                )
            )
            total_price += Decimal(str(flight.price))

            # Layover after every flight except the last
            if i < len(path) - 1:
                next_flight = path[i + 1]
                layovers.append(
                    Layover(
                        airport_code=destination.code,
                        airport_name=destination.name,
                        airport_city=destination.city,
                        duration_minutes=self._validator.layover_minutes(flight, next_flight),
                        type=self._validator.connection_type(flight, next_flight),
                    )
                )

        return Itinerary(
            segments=tuple(segments),
            layovers=tuple(layovers),
            stops=len(path) - 1,
            total_duration_minutes=minutes_between(
                path[0].departure_instant, path[-1].arrival_instant
            ),
            total_price=round_price(total_price),
        )

    def _require_airport(self, code: str) -> Airport:
        airport = self._directory.airport(code)
        if airport is None:
            raise DirectoryIntegrityError(
                f"Airport '{code}' referenced by a flight is missing from the directory"
            )
        return airport
