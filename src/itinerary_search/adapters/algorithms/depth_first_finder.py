"""
Depth-First Itinerary Finder - Bounded-depth traversal of the flight graph.

Explores the flight network lazily, one visited airport at a time:
direct legs to the destination are emitted at every node, and onward legs
to intermediate airports are followed while the stop budget lasts. Every
connection is checked by the ConnectionValidator, so per-connection
domestic/international classification decides the minimum layover.

Path and visited-set are immutable per call (tuple / frozenset extended
copy-on-write), so sibling branches never share mutable state.
"""

from __future__ import annotations

import logging
import math
from datetime import date, timedelta
from typing import Dict, FrozenSet, List, NamedTuple, Optional, Tuple

from src.itinerary_search.ports.flight_directory import FlightDirectory
from src.itinerary_search.ports.itinerary_finder import ItineraryFinder
from src.itinerary_search.schemas.flight import Flight
from src.itinerary_search.schemas.itinerary import Itinerary
from src.itinerary_search.schemas.route import RouteClassification
from src.itinerary_search.schemas.search import SearchCancellation, WindowStrategy
from src.itinerary_search.services.connection_validator import ConnectionValidator
from src.itinerary_search.services.itinerary_assembler import ItineraryAssembler

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60


class TraversalNode(NamedTuple):
    """One state of the traversal."""

    airport: str
    remaining_stops: int
    visited: FrozenSet[str]
    path: Tuple[Flight, ...]
    last_flight: Optional[Flight]
    date_from: date
    date_to: date


class _Traversal:
    """Request-scoped traversal state: one per search call."""

    def __init__(
        self,
        directory: FlightDirectory,
        validator: ConnectionValidator,
        assembler: ItineraryAssembler,
        destination: str,
        domestic_country: Optional[str],
        strategy: WindowStrategy,
        connection_span_days: int,
        cancellation: Optional[SearchCancellation],
    ) -> None:
        self.directory = directory
        self.validator = validator
        self.assembler = assembler
        self.destination = destination
        self.domestic_country = domestic_country
        self.strategy = strategy
        self.connection_span_days = connection_span_days
        self.cancellation = cancellation
        self.results: List[Itinerary] = []
        self.nodes_expanded = 0

    def explore(self, node: TraversalNode) -> None:
        if self.cancellation is not None:
            self.cancellation.raise_if_cancelled()
        self.nodes_expanded += 1

        direct, outbound = self._candidates(node, need_outbound=node.remaining_stops > 0)

        # Step 1: direct leg to the destination (valid even with zero stops left)
        for flight in direct:
            if self._connects(node.last_flight, flight):
                self.results.append(self.assembler.assemble(node.path + (flight,)))

        # Step 2: stop budget exhausted
        if node.remaining_stops == 0:
            return

        # Step 3: expand intermediates, grouped by next airport
        by_airport: Dict[str, List[Flight]] = {}
        for flight in outbound:
            if flight.destination == self.destination:
                continue
            by_airport.setdefault(flight.destination, []).append(flight)

        for next_airport, flights in by_airport.items():
            if next_airport in node.visited:
                continue
            if self.domestic_country is not None and not self._in_domestic_country(
                next_airport
            ):
                continue

            visited = node.visited | {next_airport}
            for flight in flights:
                if not self._connects(node.last_flight, flight):
                    continue
                arrival_date = flight.arrival_date
                self.explore(
                    TraversalNode(
                        airport=next_airport,
                        remaining_stops=node.remaining_stops - 1,
                        visited=visited,
                        path=node.path + (flight,),
                        last_flight=flight,
                        date_from=arrival_date,
                        date_to=arrival_date + timedelta(days=self.connection_span_days),
                    )
                )

    def _candidates(
        self, node: TraversalNode, need_outbound: bool
    ) -> Tuple[List[Flight], List[Flight]]:
        """Direct and outbound candidate flights for a node."""
        if self.strategy is WindowStrategy.INSTANT_WINDOW and node.last_flight is not None:
            rules = self.validator.rules
            arrival = node.last_flight.arrival_instant
            window = self.directory.flights_in_instant_window(
                node.airport,
                arrival + timedelta(minutes=rules.widest_min_minutes),
                arrival + timedelta(minutes=rules.max_minutes),
            )
            direct = [f for f in window if f.destination == self.destination]
            return direct, window

        direct = self.directory.direct_flights(
            node.airport, self.destination, node.date_from, node.date_to
        )
        outbound: List[Flight] = []
        if need_outbound:
            outbound = self.directory.flights_departing(
                node.airport, node.date_from, node.date_to
            )
        return direct, outbound

    def _connects(self, last_flight: Optional[Flight], flight: Flight) -> bool:
        if last_flight is None:
            return True
        return self.validator.is_valid_connection(last_flight, flight)

    def _in_domestic_country(self, airport_code: str) -> bool:
        airport = self.directory.airport(airport_code)
        return airport is not None and airport.country == self.domestic_country


class DepthFirstItineraryFinder(ItineraryFinder):
    """
    Depth-bounded DFS over the flight graph.

    Per node:
    1. Emit itineraries for direct legs to the destination.
    2. Stop if the stop budget is exhausted.
    3. Group outbound legs by next airport; skip the destination, airports
       already on the path, and (domestic searches) foreign airports;
       recurse on every leg that forms a legal connection.

    The query window follows ``strategy`` for the whole traversal:
    LOCAL_DATE queries by local departure date (arrival day through the
    next day), INSTANT_WINDOW queries by the widest legal layover window
    after the previous arrival. Both then apply the ConnectionValidator,
    so they return the same itineraries.

    Attributes:
        _validator: Connection legality rules.
        _assembler: Path to Itinerary conversion.
        _strategy: Query-window strategy.
    """

    def __init__(
        self,
        validator: ConnectionValidator,
        assembler: ItineraryAssembler,
        strategy: WindowStrategy = WindowStrategy.LOCAL_DATE,
    ) -> None:
        self._validator = validator
        self._assembler = assembler
        self._strategy = strategy

    @property
    def name(self) -> str:
        """Algorithm identifier."""
        return "Depth-First Search"

    @property
    def strategy(self) -> WindowStrategy:
        return self._strategy

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
        Find all legal itineraries in discovery order.

        Args:
            directory: Directory snapshot for this search.
            origin: Origin IATA code.
            destination: Destination IATA code.
            departure_date: Local departure date at the origin.
            classification: Stop ceiling and domestic country.
            cancellation: Optional cancellation signal, checked per node.

        Returns:
            Itineraries in discovery order (unsorted).

        Raises:
            SearchCancelledError: If cancelled mid-search.
        """
        validator = self._validator.with_directory(directory)
        # Connections may leave up to max layover after landing
        span_days = max(1, math.ceil(validator.rules.max_minutes / MINUTES_PER_DAY))

        traversal = _Traversal(
            directory=directory,
            validator=validator,
            assembler=self._assembler.with_directory(directory),
            destination=destination,
            domestic_country=classification.domestic_country
            if classification.is_domestic
            else None,
            strategy=self._strategy,
            connection_span_days=span_days,
            cancellation=cancellation,
        )
        traversal.explore(
            TraversalNode(
                airport=origin,
                remaining_stops=classification.max_stops,
                visited=frozenset({origin}),
                path=(),
                last_flight=None,
                date_from=departure_date,
                date_to=departure_date,
            )
        )

        logger.debug(
            "DFS %s -> %s on %s: %d nodes expanded, %d itineraries",
            origin,
            destination,
            departure_date,
            traversal.nodes_expanded,
            len(traversal.results),
        )
        return traversal.results
