"""
Flight Data Provider port interface.

Defines the abstract contract for data sources that supply raw airport
and flight records. Implementations handle parsing and record coercion;
timezone normalization and indexing happen in the directory.
"""

from abc import ABC, abstractmethod

from src.itinerary_search.schemas.airport import AirportDataFrame
from src.itinerary_search.schemas.flight import RawFlightDataFrame


class FlightDataProvider(ABC):
    """
    Abstract interface for raw flight datasets.

    Providers return validated DataFrames directly - no object creation.
    Malformed records are dropped (with a logged warning) inside the
    provider, so a single bad record never fails the whole load.

    Implementations:
    - JsonFlightDataProvider: JSON file with "airports" and "flights" arrays
    """

    @abstractmethod
    def get_airports_df(self) -> AirportDataFrame:
        """
        Return airports as a validated DataFrame.

        Returns:
            DataFrame validated against AirportSchema.
        """
        ...

    @abstractmethod
    def get_flights_df(self) -> RawFlightDataFrame:
        """
        Return flights as a validated DataFrame.

        Only flights whose origin and destination are known airports are
        returned.

        Returns:
            DataFrame validated against RawFlightSchema.

        Raises:
            pandera.errors.SchemaError: If data fails validation.
            FileNotFoundError: If the data source is missing.
        """
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Human-readable name of this data provider.

        Returns:
            Provider identifier (e.g., "JSON file").
        """
        ...

    @property
    def is_available(self) -> bool:
        """
        Check if the data source is currently available.

        Default implementation returns True. Override for providers
        that need health checks.
        """
        return True
