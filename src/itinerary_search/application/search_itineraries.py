"""
SearchItineraries Use Case - Public API for itinerary search.

This module provides the main entry point for the itinerary search engine.
It acts as a Facade/Factory, handling dependency initialization and
providing a clean interface for consumers (HTTP layer, scripts, tests).
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import List, Optional, Tuple, Union

from src.itinerary_search.adapters.algorithms.depth_first_finder import (
    DepthFirstItineraryFinder,
)
from src.itinerary_search.adapters.data_providers.json_provider import (
    JsonFlightDataProvider,
)
from src.itinerary_search.adapters.directories.in_memory_directory import (
    InMemoryFlightDirectory,
)
from src.itinerary_search.config import SearchSettings
from src.itinerary_search.ports.flight_data_provider import FlightDataProvider
from src.itinerary_search.ports.flight_directory import FlightDirectory
from src.itinerary_search.ports.itinerary_finder import ItineraryFinder
from src.itinerary_search.schemas.airport import Airport
from src.itinerary_search.schemas.itinerary import Itinerary
from src.itinerary_search.schemas.search import SearchCancellation
from src.itinerary_search.services.connection_validator import ConnectionValidator
from src.itinerary_search.services.itinerary_assembler import ItineraryAssembler
from src.itinerary_search.services.itinerary_search_service import (
    ItinerarySearchService,
)
from src.itinerary_search.services.route_classifier import RouteClassifier
from src.itinerary_search.services.time_normalizer import TimeNormalizer
from src.itinerary_search.validation import validate_search_params

logger = logging.getLogger(__name__)


class SearchItineraries:
    """
    Public API for finding itineraries.

    Handles dependency initialization with defaults taken from
    SearchSettings and provides a simple interface for searches.

    Example usage:
        >>> engine = SearchItineraries(data_file="data/flights.json")
        >>> results = engine.search("JFK", "LAX", "2024-03-15")
        >>> for itinerary in results:
        ...     print(itinerary.route_airports, itinerary.total_duration_minutes)

    Attributes:
        _settings: Effective settings.
        _directory: Flight directory (shared, reloadable).
        _service: Underlying ItinerarySearchService.
    """

    def __init__(
        self,
        settings: Optional[SearchSettings] = None,
        data_file: Optional[Union[str, Path]] = None,
        data_provider: Optional[FlightDataProvider] = None,
        directory: Optional[FlightDirectory] = None,
        finder: Optional[ItineraryFinder] = None,
    ) -> None:
        """
        Initialize the engine with optional custom dependencies.

        Args:
            settings: Settings. Defaults to SearchSettings() (not read from
                the environment; use SearchSettings.from_env() for that).
            data_file: JSON dataset path. Overrides settings.data_file.
            data_provider: Custom data provider. If None, uses
                JsonFlightDataProvider on the dataset path.
            directory: Custom directory. If None, uses an
                InMemoryFlightDirectory over the data provider.
            finder: Custom algorithm. If None, uses DepthFirstItineraryFinder.
        """
        self._settings = settings or SearchSettings()
        normalizer = TimeNormalizer()

        if directory is not None:
            self._directory = directory
        else:
            if data_provider is None:
                path = data_file if data_file is not None else self._settings.data_file
                data_provider = JsonFlightDataProvider(path)
            self._directory = InMemoryFlightDirectory(data_provider, normalizer=normalizer)

        if finder is not None:
            self._finder = finder
        else:
            validator = ConnectionValidator(
                self._directory,
                normalizer=normalizer,
                rules=self._settings.layover_rules,
            )
            self._finder = DepthFirstItineraryFinder(
                validator=validator,
                assembler=ItineraryAssembler(self._directory, validator, normalizer),
                strategy=self._settings.window_strategy,
            )

        classifier = RouteClassifier(
            self._directory,
            domestic_max_stops=self._settings.domestic_max_stops,
            international_max_stops=self._settings.international_max_stops,
        )

        self._service = ItinerarySearchService(
            directory=self._directory,
            classifier=classifier,
            finder=self._finder,
            search_timeout_seconds=self._settings.search_timeout_seconds,
        )

        logger.info(
            "SearchItineraries initialized with %s algorithm (%s windows)",
            self._finder.name,
            self._settings.window_strategy.value,
        )

    def validate_request(
        self, origin: str, destination: str, date_value: str
    ) -> Tuple[str, str, date]:
        """
        Validate raw request parameters against the loaded airports.

        Returns:
            Normalized (origin, destination, date).

        Raises:
            InvalidSearchError: Subclass describing the first problem found.
        """
        return validate_search_params(
            origin, destination, date_value, self._directory.snapshot()
        )

    def search(
        self,
        origin: str,
        destination: str,
        departure_date: Union[str, date],
        cancellation: Optional[SearchCancellation] = None,
        max_stops: Optional[int] = None,
    ) -> List[Itinerary]:
        """
        Search for itineraries between two airports.

        String dates and codes are validated first; a ``date`` value skips
        only the date parsing.

        Args:
            origin: Origin airport IATA code (e.g., 'JFK').
            destination: Destination airport IATA code.
            departure_date: Local departure date, ``date`` or 'YYYY-MM-DD'.
            cancellation: Optional cancellation signal.
            max_stops: Optional tighter stop ceiling.

        Returns:
            Itineraries sorted by total duration ascending.

        Raises:
            InvalidSearchError: If the parameters are invalid.
            SearchCancelledError: If the search is cancelled or times out.
        """
        date_value = (
            departure_date.isoformat()
            if isinstance(departure_date, date)
            else departure_date
        )
        origin, destination, parsed_date = self.validate_request(
            origin, destination, date_value
        )
        return self.search_validated(
            origin,
            destination,
            parsed_date,
            cancellation=cancellation,
            max_stops=max_stops,
        )

    def search_validated(
        self,
        origin: str,
        destination: str,
        departure_date: date,
        cancellation: Optional[SearchCancellation] = None,
        max_stops: Optional[int] = None,
    ) -> List[Itinerary]:
        """
        Search with parameters already normalized by validate_request().

        Returns:
            Itineraries sorted by total duration ascending.

        Raises:
            SearchCancelledError: If the search is cancelled or times out.
        """
        return self._service.search(
            origin,
            destination,
            departure_date,
            cancellation=cancellation,
            max_stops=max_stops,
        )

    def get_airports(self) -> List[Airport]:
        """
        Get all airports in the loaded dataset, sorted by code.

        Returns:
            List of Airport values.
        """
        return sorted(self._directory.all_airports(), key=lambda a: a.code)

    def airport_exists(self, code: str) -> bool:
        """Check if an airport code is known (case-insensitive)."""
        return self._directory.airport_exists(code.strip().upper())

    @property
    def settings(self) -> SearchSettings:
        return self._settings

    @property
    def directory(self) -> FlightDirectory:
        return self._directory

    @property
    def is_ready(self) -> bool:
        """Check if the engine is ready to handle requests."""
        return self._service.is_ready

    @property
    def algorithm_name(self) -> str:
        """Get the name of the search algorithm being used."""
        return self._service.algorithm_name

    def refresh_data(self) -> None:
        """Reload the dataset and swap in the new snapshot."""
        reload = getattr(self._directory, "reload", None)
        if reload is None:
            logger.warning("Directory %s does not support reload", self._directory.name)
            return
        reload()
        logger.info("Flight data refreshed")
