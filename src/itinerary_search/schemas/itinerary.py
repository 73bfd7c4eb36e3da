"""
Itinerary result schemas.

Immutable output records of the search engine. An ``Itinerary`` is
assembled once from a validated flight path and never mutated.
"""

from dataclasses import dataclass
from typing import List, Tuple

DOMESTIC = "domestic"
INTERNATIONAL = "international"


@dataclass(frozen=True)
class FlightSegment:
    """
    One flight within an itinerary, enriched with airport display data.

    Times are local wall-clock values formatted as ISO date-times
    (``YYYY-MM-DDTHH:MM:SS``); ``duration_minutes`` is measured on the
    instant axis.
    """

    flight_number: str
    airline: str
    origin_code: str
    origin_name: str
    origin_city: str
    destination_code: str
    destination_name: str
    destination_city: str
    departure_time: str
    arrival_time: str
    duration_minutes: int
    aircraft: str
    price: float


@dataclass(frozen=True)
class Layover:
    """
    Connection between two consecutive segments.

    Attributes:
        airport_code: Connection airport (arriving flight's destination).
        airport_name: Connection airport name.
        airport_city: Connection airport city.
        duration_minutes: Gap between landing and next departure.
        type: ``"domestic"`` or ``"international"``.
    """

    airport_code: str
    airport_name: str
    airport_city: str
    duration_minutes: int
    type: str

    @property
    def is_domestic(self) -> bool:
        return self.type == DOMESTIC


@dataclass(frozen=True)
class Itinerary:
    """
    Complete itinerary from origin to destination.

    Attributes:
        segments: Flight segments in travel order.
        layovers: One layover per adjacent segment pair.
        stops: Number of intermediate airports (segments - 1).
        total_duration_minutes: First departure to last arrival.
        total_price: Sum of segment prices, rounded to 2 decimals.
    """

    segments: Tuple[FlightSegment, ...]
    layovers: Tuple[Layover, ...]
    stops: int
    total_duration_minutes: int
    total_price: float

    def __post_init__(self) -> None:
        if not self.segments:
            raise ValueError("Itinerary must have at least one segment")
        if len(self.layovers) != len(self.segments) - 1:
            raise ValueError(
                f"Expected {len(self.segments) - 1} layovers, got {len(self.layovers)}"
            )
        if self.stops != len(self.segments) - 1:
            raise ValueError(f"Expected {len(self.segments) - 1} stops, got {self.stops}")
        pairs = zip(self.segments, self.segments[1:], self.layovers)
        for arriving, departing, layover in pairs:
            if arriving.destination_code != departing.origin_code:
                raise ValueError(
                    f"Segments {arriving.flight_number} and {departing.flight_number} "
                    f"do not connect ({arriving.destination_code} != {departing.origin_code})"
                )
            if layover.airport_code != arriving.destination_code:
                raise ValueError(
                    f"Layover at {layover.airport_code} does not match connection "
                    f"airport {arriving.destination_code}"
                )

    @property
    def origin(self) -> str:
        """Origin airport code."""
        return self.segments[0].origin_code

    @property
    def destination(self) -> str:
        """Final destination airport code."""
        return self.segments[-1].destination_code

    @property
    def route_airports(self) -> List[str]:
        """Ordered airport codes visited, origin first."""
        airports = [self.segments[0].origin_code]
        airports.extend(seg.destination_code for seg in self.segments)
        return airports

    @property
    def total_flight_minutes(self) -> int:
        """Time spent in the air."""
        return sum(seg.duration_minutes for seg in self.segments)

    @property
    def total_layover_minutes(self) -> int:
        """Time spent on the ground between segments."""
        return sum(layover.duration_minutes for layover in self.layovers)
