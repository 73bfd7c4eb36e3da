"""
In-Memory Flight Directory - Build-then-freeze indexed flight data.

Implements the FlightDirectory port with:
- Immutable DirectorySnapshot per load (safe for concurrent readers)
- Numpy-vectorized origin index over a sorted flight table
- Binary search on departure instants for instant-window queries
- Atomic snapshot swap on reload (readers never see a partial dataset)
"""

from __future__ import annotations

import hashlib
import logging
import threading
from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from datetime import date, datetime
from types import MappingProxyType
from typing import TYPE_CHECKING, Dict, List, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

from src.itinerary_search.exceptions import DirectoryNotInitializedError
from src.itinerary_search.ports.flight_directory import FlightDirectory
from src.itinerary_search.schemas.airport import Airport
from src.itinerary_search.schemas.flight import Flight
from src.itinerary_search.services.time_normalizer import TimeNormalizer

if TYPE_CHECKING:
    from src.itinerary_search.ports.flight_data_provider import FlightDataProvider

logger = logging.getLogger(__name__)


# =============================================================================
# ORIGIN INDEX: O(1) access to the flights departing an airport
# =============================================================================


@dataclass(frozen=True)
class AirportIndex:
    """
    Row range of one origin airport in the sorted flight table.

    Attributes:
        start: First row (inclusive).
        end: Last row (exclusive).
    """

    start: int
    end: int

    def __post_init__(self) -> None:
        """Validate index bounds."""
        if self.start < 0:
            raise ValueError(f"start must be >= 0, got {self.start}")
        if self.end < self.start:
            raise ValueError(f"end ({self.end}) must be >= start ({self.start})")


def build_origin_index(df: pd.DataFrame) -> Dict[str, AirportIndex]:
    """
    Build the origin index from a DataFrame pre-sorted by ``origin``.

    Boundaries where the origin changes are found with vectorized numpy
    comparisons; the remaining loop is O(num_airports).

    Args:
        df: Flights sorted by 'origin', index reset (0, 1, 2, ...).

    Returns:
        Dict mapping airport code to its AirportIndex.

    Example:
        >>> df = pd.DataFrame({'origin': ['JFK', 'JFK', 'LAX', 'ORD', 'ORD']})
        >>> build_origin_index(df)['ORD']
        AirportIndex(start=3, end=5)
    """
    if df.empty:
        return {}

    origins = df["origin"].to_numpy()
    n = len(origins)

    change_mask = np.concatenate([[True], origins[1:] != origins[:-1]])
    change_indices = np.where(change_mask)[0]

    index: Dict[str, AirportIndex] = {}
    num_boundaries = len(change_indices)

    for i in range(num_boundaries):
        start = int(change_indices[i])
        end = int(change_indices[i + 1]) if i + 1 < num_boundaries else n
        index[str(origins[start])] = AirportIndex(start=start, end=end)

    return index


# =============================================================================
# DIRECTORY SNAPSHOT: one immutable, fully-indexed dataset
# =============================================================================


class DirectorySnapshot(FlightDirectory):
    """
    Immutable, indexed view of one loaded dataset.

    Flights are stored once, sorted by origin then departure instant.
    Nothing is mutated after construction, so any number of searches may
    read a snapshot concurrently without locking.

    Attributes:
        flights: All flights, sorted by (origin, departure_instant).
        origin_index: Airport code to row range in ``flights``.
        airports: Airport code to Airport (read-only mapping).
        built_at: Build timestamp.
        version: Content hash for change tracking.
    """

    def __init__(
        self,
        flights: Tuple[Flight, ...],
        origin_index: Mapping[str, AirportIndex],
        airports: Mapping[str, Airport],
        built_at: Optional[datetime] = None,
        version: str = "",
    ) -> None:
        self._flights = flights
        self._origin_index = MappingProxyType(dict(origin_index))
        self._airports = MappingProxyType(dict(airports))
        self._departures = tuple(f.departure_instant for f in flights)

        routes: Dict[Tuple[str, str], List[Flight]] = {}
        for flight in flights:
            routes.setdefault((flight.origin, flight.destination), []).append(flight)
        self._routes = MappingProxyType({key: tuple(value) for key, value in routes.items()})

        self.built_at = built_at or datetime.now()
        self.version = version

    @classmethod
    def from_flights(
        cls,
        flights: List[Flight],
        airports: List[Airport],
        version: str = "",
    ) -> "DirectorySnapshot":
        """
        Build a snapshot from already-normalized Flight values.

        Args:
            flights: Flights in any order.
            airports: Airports referenced by the flights.
            version: Optional version label.

        Returns:
            Indexed DirectorySnapshot.
        """
        ordered = tuple(sorted(flights, key=lambda f: (f.origin, f.departure_instant)))
        origin_index = build_origin_index(
            pd.DataFrame({"origin": [f.origin for f in ordered]})
        )
        return cls(
            flights=ordered,
            origin_index=origin_index,
            airports={a.code: a for a in airports},
            version=version,
        )

    # ----- metadata --------------------------------------------------------

    @property
    def name(self) -> str:
        return f"Directory snapshot {self.version}" if self.version else "Directory snapshot"

    @property
    def flights(self) -> Tuple[Flight, ...]:
        return self._flights

    @property
    def origin_index(self) -> Mapping[str, AirportIndex]:
        return self._origin_index

    @property
    def flight_count(self) -> int:
        return len(self._flights)

    @property
    def route_count(self) -> int:
        return len(self._routes)

    def has_route(self, origin: str, destination: str) -> bool:
        """Check if a direct route exists."""
        return (origin, destination) in self._routes

    # ----- FlightDirectory -------------------------------------------------

    def flights_departing(
        self, airport_code: str, date_from: date, date_to: date
    ) -> List[Flight]:
        return [
            f
            for f in self._departing(airport_code)
            if date_from <= f.departure_date <= date_to
        ]

    def direct_flights(
        self, origin: str, destination: str, date_from: date, date_to: date
    ) -> List[Flight]:
        return [
            f
            for f in self._routes.get((origin, destination), ())
            if date_from <= f.departure_date <= date_to
        ]

    def flights_in_instant_window(
        self, airport_code: str, earliest: datetime, latest: datetime
    ) -> List[Flight]:
        idx = self._origin_index.get(airport_code)
        if idx is None or latest < earliest:
            return []
        lo = bisect_left(self._departures, earliest, idx.start, idx.end)
        hi = bisect_right(self._departures, latest, idx.start, idx.end)
        return list(self._flights[lo:hi])

    def airport(self, code: str) -> Optional[Airport]:
        return self._airports.get(code)

    def all_airports(self) -> List[Airport]:
        return list(self._airports.values())

    def airport_exists(self, code: str) -> bool:
        return code in self._airports

    def _departing(self, airport_code: str) -> Tuple[Flight, ...]:
        idx = self._origin_index.get(airport_code)
        if idx is None:
            return ()
        return self._flights[idx.start : idx.end]


def build_snapshot(
    provider: FlightDataProvider,
    normalizer: Optional[TimeNormalizer] = None,
) -> DirectorySnapshot:
    """
    Build a new snapshot from a data provider.

    Steps:
    1. Fetch airport and raw flight frames
    2. Normalize local times to UTC instants (vectorized)
    3. Sort by origin, then departure instant
    4. Build origin index (numpy)
    5. Materialize immutable Flight values

    Args:
        provider: Source of raw airports and flights.
        normalizer: Time normalizer (default instance if None).

    Returns:
        Fully built DirectorySnapshot.
    """
    normalizer = normalizer or TimeNormalizer()

    airports_df = provider.get_airports_df()
    airports = {
        str(row.code): Airport(
            code=str(row.code),
            name=str(row.name),
            city=str(row.city),
            country=str(row.country),
            timezone=str(row.timezone),
        )
        for row in airports_df.itertuples(index=False)
    }

    normalized = normalizer.normalize_frame(provider.get_flights_df(), airports)
    normalized = normalized.sort_values(
        ["origin", "departure_instant"], kind="mergesort"
    ).reset_index(drop=True)

    origin_index = build_origin_index(normalized)
    flights = tuple(Flight.from_record(row) for row in normalized.itertuples(index=False))

    return DirectorySnapshot(
        flights=flights,
        origin_index=origin_index,
        airports=airports,
        built_at=datetime.now(),
        version=_compute_version(airports_df, normalized),
    )


def _compute_version(airports_df: pd.DataFrame, flights_df: pd.DataFrame) -> str:
    """Compute a short hash of the dataset for version tracking."""
    content = f"{len(airports_df)}:{len(flights_df)}:{flights_df.columns.tolist()}"
    if len(flights_df) > 0:
        content += f":{flights_df.iloc[0].to_dict()}:{flights_df.iloc[-1].to_dict()}"
    return hashlib.md5(content.encode()).hexdigest()[:12]


# =============================================================================
# IN-MEMORY DIRECTORY: current snapshot + atomic reload
# =============================================================================


class InMemoryFlightDirectory(FlightDirectory):
    """
    Directory backed by an immutable in-memory snapshot.

    Architecture:
    - _current always points to a complete, servable snapshot
    - First access (cold start) builds the snapshot, blocking
    - reload() builds a new snapshot, then swaps the reference atomically
    - Searches pin one snapshot via snapshot() for their whole run

    Usage:
        >>> provider = JsonFlightDataProvider("data/flights.json")
        >>> directory = InMemoryFlightDirectory(provider)
        >>> directory.airport("JFK")
    """

    def __init__(
        self,
        data_provider: FlightDataProvider,
        normalizer: Optional[TimeNormalizer] = None,
    ) -> None:
        self._provider = data_provider
        self._normalizer = normalizer or TimeNormalizer()
        self._current: Optional[DirectorySnapshot] = None
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return f"In-Memory Directory ({self._provider.name})"

    def snapshot(self) -> DirectorySnapshot:
        """
        Current snapshot - builds it on first access.

        Raises:
            DirectoryNotInitializedError: If the cold-start build fails.
        """
        current = self._current
        if current is not None:
            return current

        with self._lock:
            # Double-check after acquiring lock
            if self._current is not None:
                return self._current
            try:
                self._current = self._build()
            except Exception as e:
                logger.error("Cold start failed: %s", e)
                raise DirectoryNotInitializedError(
                    f"Failed to initialize flight directory: {e}"
                ) from e
            return self._current

    def reload(self) -> DirectorySnapshot:
        """
        Rebuild from the provider and swap in the new snapshot.

        Searches already running keep the snapshot they pinned. On
        failure the previous snapshot stays in service and the error
        propagates.
        """
        new_snapshot = self._build()
        with self._lock:
            self._current = new_snapshot
        return new_snapshot

    def _build(self) -> DirectorySnapshot:
        snapshot = build_snapshot(self._provider, self._normalizer)
        logger.info(
            "Loaded %d airports and %d flights (%d routes), version %s",
            len(snapshot.all_airports()),
            snapshot.flight_count,
            snapshot.route_count,
            snapshot.version,
        )
        return snapshot

    @property
    def is_initialized(self) -> bool:
        """Check if a snapshot has been built at least once."""
        return self._current is not None

    @property
    def version(self) -> Optional[str]:
        current = self._current
        return current.version if current else None

    @property
    def flight_count(self) -> int:
        return self.snapshot().flight_count

    @property
    def route_count(self) -> int:
        return self.snapshot().route_count

    # ----- FlightDirectory (delegates to the current snapshot) -------------

    def flights_departing(
        self, airport_code: str, date_from: date, date_to: date
    ) -> List[Flight]:
        return self.snapshot().flights_departing(airport_code, date_from, date_to)

    def direct_flights(
        self, origin: str, destination: str, date_from: date, date_to: date
    ) -> List[Flight]:
        return self.snapshot().direct_flights(origin, destination, date_from, date_to)

    def flights_in_instant_window(
        self, airport_code: str, earliest: datetime, latest: datetime
    ) -> List[Flight]:
        return self.snapshot().flights_in_instant_window(airport_code, earliest, latest)

    def airport(self, code: str) -> Optional[Airport]:
        return self.snapshot().airport(code)

    def all_airports(self) -> List[Airport]:
        return self.snapshot().all_airports()

    def airport_exists(self, code: str) -> bool:
        return self.snapshot().airport_exists(code)
