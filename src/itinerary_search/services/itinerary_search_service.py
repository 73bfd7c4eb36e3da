"""
Itinerary Search Service - Domain orchestrator for itinerary searches.

Coordinates the interaction between:
- FlightDirectory (pinned snapshot per search)
- RouteClassifier (stop ceiling, domestic country)
- ItineraryFinder (algorithm adapter)
"""

from __future__ import annotations

import dataclasses
import logging
import time
from datetime import date
from typing import TYPE_CHECKING, List, Optional

from src.itinerary_search.schemas.itinerary import Itinerary
from src.itinerary_search.schemas.search import SearchCancellation

if TYPE_CHECKING:
    from src.itinerary_search.ports.flight_directory import FlightDirectory
    from src.itinerary_search.ports.itinerary_finder import ItineraryFinder
    from src.itinerary_search.services.route_classifier import RouteClassifier

logger = logging.getLogger(__name__)


class ItinerarySearchService:
    """
    Domain service for finding itineraries between two airports.

    Orchestrates one search:
    1. Pins the current directory snapshot
    2. Classifies the route (domestic / international)
    3. Delegates the traversal to the finder
    4. Sorts by total duration (stable) and logs timings

    Mutable state is request-local, so one instance serves concurrent
    searches.

    Attributes:
        _directory: Shared flight directory.
        _classifier: Route classifier.
        _finder: Algorithm adapter.
        _search_timeout_seconds: Deadline applied when the caller passes
            no cancellation of its own.
    """

    def __init__(
        self,
        directory: FlightDirectory,
        classifier: RouteClassifier,
        finder: ItineraryFinder,
        search_timeout_seconds: Optional[float] = None,
    ) -> None:
        self._directory = directory
        self._classifier = classifier
        self._finder = finder
        self._search_timeout_seconds = search_timeout_seconds

    def search(
        self,
        origin: str,
        destination: str,
        departure_date: date,
        cancellation: Optional[SearchCancellation] = None,
        max_stops: Optional[int] = None,
    ) -> List[Itinerary]:
        """
        Find all itineraries from origin to destination on a local date.

        Args:
            origin: Origin IATA code (already validated).
            destination: Destination IATA code (already validated).
            departure_date: Local departure date at the origin.
            cancellation: Optional cancellation signal. When None and a
                search timeout is configured, a deadline is derived from it.
            max_stops: Optional tighter stop ceiling than the route default.

        Returns:
            Itineraries sorted by total duration ascending; ties keep
            discovery order. Empty when nothing connects.

        Raises:
            SearchCancelledError: If cancelled or past the deadline.
            DirectoryNotInitializedError: If the directory cannot be loaded.
        """
        start_time = time.perf_counter()

        if cancellation is None and self._search_timeout_seconds is not None:
            cancellation = SearchCancellation.with_timeout(self._search_timeout_seconds)

        # 1. Pin one snapshot for the whole search
        snapshot = self._directory.snapshot()

        # 2. Classify route
        classification = self._classifier.with_directory(snapshot).classify(
            origin, destination
        )
        if max_stops is not None and max_stops < classification.max_stops:
            classification = dataclasses.replace(classification, max_stops=max(0, max_stops))

        logger.info(
            "Searching %s -> %s on %s: %s route, max %d stop(s)",
            origin,
            destination,
            departure_date.isoformat(),
            classification.label,
            classification.max_stops,
        )

        # 3. Delegate to algorithm adapter
        algo_start = time.perf_counter()
        results = self._finder.find_itineraries(
            directory=snapshot,
            origin=origin,
            destination=destination,
            departure_date=departure_date,
            classification=classification,
            cancellation=cancellation,
        )
        algo_time = time.perf_counter() - algo_start

        # 4. Stable sort by total duration
        ordered = sorted(results, key=lambda it: it.total_duration_minutes)

        total_time = time.perf_counter() - start_time
        logger.info(
            "Search %s -> %s completed: %d itineraries in %.3fms (algo: %.3fms)",
            origin,
            destination,
            len(ordered),
            total_time * 1000,
            algo_time * 1000,
        )
        return ordered

    @property
    def algorithm_name(self) -> str:
        """Get name of the underlying algorithm."""
        return self._finder.name

    @property
    def is_ready(self) -> bool:
        """Check if the directory has been loaded."""
        return getattr(self._directory, "is_initialized", True)
