"""
Connection Validator - Layover legality between consecutive flights.

Encapsulates all connection rules: same airport, temporal ordering,
maximum layover, and a minimum layover that depends on whether the
connection is domestic or international.
"""

from __future__ import annotations

import logging
from typing import Optional

from src.itinerary_search.ports.flight_directory import FlightDirectory
from src.itinerary_search.schemas.flight import Flight
from src.itinerary_search.schemas.itinerary import DOMESTIC, INTERNATIONAL
from src.itinerary_search.schemas.route import LayoverRules
from src.itinerary_search.services.time_normalizer import TimeNormalizer

logger = logging.getLogger(__name__)


class ConnectionValidator:
    """
    Decides whether two flights form a legal connection.

    Rules, evaluated in order (first failure wins):
    1. Airport continuity: arriving destination == departing origin.
    2. Non-negative layover.
    3. Layover <= max_minutes.
    4. Layover >= min_domestic_minutes for domestic connections,
       >= min_international_minutes otherwise.

    A connection is domestic only if all three airports it touches
    (arriving origin, connection point, departing destination) share one
    country. Any unknown airport makes it international.

    Attributes:
        _directory: Airport lookup.
        _normalizer: Instant-axis arithmetic.
        _rules: Layover thresholds.
    """

    def __init__(
        self,
        directory: FlightDirectory,
        normalizer: Optional[TimeNormalizer] = None,
        rules: Optional[LayoverRules] = None,
    ) -> None:
        self._directory = directory
        self._normalizer = normalizer or TimeNormalizer()
        self._rules = rules or LayoverRules()

    @property
    def rules(self) -> LayoverRules:
        return self._rules

    def with_directory(self, directory: FlightDirectory) -> "ConnectionValidator":
        """Same rules, bound to another directory (e.g. a pinned snapshot)."""
        if directory is self._directory:
            return self
        return ConnectionValidator(directory, self._normalizer, self._rules)

    def is_valid_connection(self, arriving: Flight, departing: Flight) -> bool:
        """
        Check if two consecutive flights form a valid connection.

        Args:
            arriving: Flight landing at the connection airport.
            departing: Flight leaving the connection airport.

        Returns:
            True if the connection is legal.
        """
        if arriving.destination != departing.origin:
            logger.debug(
                "Rejected %s -> %s: airport change %s/%s",
                arriving.flight_number,
                departing.flight_number,
                arriving.destination,
                departing.origin,
            )
            return False

        layover = self.layover_minutes(arriving, departing)
        if layover < 0:
            logger.debug(
                "Rejected %s -> %s: departs %d min before arrival",
                arriving.flight_number,
                departing.flight_number,
                -layover,
            )
            return False

        if layover > self._rules.max_minutes:
            logger.debug(
                "Rejected %s -> %s: layover %d min exceeds %d",
                arriving.flight_number,
                departing.flight_number,
                layover,
                self._rules.max_minutes,
            )
            return False

        minimum = self._rules.min_minutes(self.is_domestic_connection(arriving, departing))
        if layover < minimum:
            logger.debug(
                "Rejected %s -> %s: layover %d min below %d",
                arriving.flight_number,
                departing.flight_number,
                layover,
                minimum,
            )
            return False

        return True

    def is_domestic_connection(self, arriving: Flight, departing: Flight) -> bool:
        """Check if every airport touched by the connection is in one country."""
        arrival_origin = self._directory.airport(arriving.origin)
        connection = self._directory.airport(arriving.destination)
        onward = self._directory.airport(departing.destination)

        if arrival_origin is None or connection is None or onward is None:
            # Unknown country: stricter international rules apply
            return False

        return arrival_origin.is_same_country(connection) and connection.is_same_country(
            onward
        )

    def connection_type(self, arriving: Flight, departing: Flight) -> str:
        """``"domestic"`` or ``"international"``."""
        return DOMESTIC if self.is_domestic_connection(arriving, departing) else INTERNATIONAL

    def layover_minutes(self, arriving: Flight, departing: Flight) -> int:
        """Layover in minutes on the instant axis (negative if impossible)."""
        return self._normalizer.layover_minutes(arriving, departing)
