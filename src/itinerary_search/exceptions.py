"""
Custom exceptions for the itinerary search engine.

Provides a hierarchy of exceptions for clear error handling. Every error
carries a machine-readable ``kind`` so callers (e.g. the HTTP layer) can
map failures without parsing messages.
"""

from datetime import datetime
from typing import Optional


class ItinerarySearchError(Exception):
    """Base exception for all itinerary search errors."""

    kind: str = "search_error"

    @property
    def message(self) -> str:
        """Human-readable error message."""
        return str(self)


# =============================================================================
# INPUT VALIDATION (raised by the request layer, before the core runs)
# =============================================================================


class InvalidSearchError(ItinerarySearchError):
    """Raised when search parameters are invalid."""

    kind = "invalid_search"


class MissingParameterError(InvalidSearchError):
    """Raised when a required search parameter is empty."""

    def __init__(self, message: str = "Origin, destination, and date are required.") -> None:
        super().__init__(message)


class InvalidAirportCodeError(InvalidSearchError):
    """Raised when an airport code is not a 3-letter IATA code."""

    def __init__(self, code: str, role: str) -> None:
        self.code = code
        self.role = role
        super().__init__(
            f"Invalid {role} airport code: '{code}'. Must be a 3-letter IATA code."
        )


class UnknownAirportError(InvalidSearchError):
    """Raised when an airport code is well-formed but not in the directory."""

    def __init__(self, code: str, role: str) -> None:
        self.code = code
        self.role = role
        super().__init__(
            f"Unknown {role} airport: '{code}'. Airport not found in our database."
        )


class SameAirportError(InvalidSearchError):
    """Raised when origin and destination are the same airport."""

    def __init__(self, code: str) -> None:
        self.code = code
        super().__init__(
            f"Origin and destination cannot be the same airport: '{code}'."
        )


class InvalidDateError(InvalidSearchError):
    """Raised when the search date cannot be parsed."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(
            f"Invalid date format: '{value}'. Expected format: YYYY-MM-DD."
        )


# =============================================================================
# DIRECTORY / DATASET
# =============================================================================


class DirectoryError(ItinerarySearchError):
    """Base exception for flight directory failures."""

    kind = "directory_error"


class DirectoryNotInitializedError(DirectoryError):
    """Raised when the directory is queried before its first load."""

    kind = "directory_not_initialized"


class DirectoryIntegrityError(DirectoryError):
    """Raised when the directory contradicts its own invariants."""

    kind = "directory_integrity"


class DatasetFormatError(DirectoryError):
    """Raised when a dataset file cannot be parsed at all."""

    kind = "dataset_format"


# =============================================================================
# FLIGHT INVARIANTS
# =============================================================================


class MissingInstantError(ItinerarySearchError):
    """Raised when a flight is used without precomputed UTC instants."""

    kind = "missing_instant"

    def __init__(self, flight_number: str, field_name: str) -> None:
        self.flight_number = flight_number
        self.field_name = field_name
        super().__init__(
            f"Flight {flight_number} has no timezone-aware {field_name}; "
            "flights must be normalized before indexing"
        )


class InvalidScheduleError(ItinerarySearchError):
    """Raised when a flight arrives at or before its departure instant."""

    kind = "invalid_schedule"

    def __init__(
        self,
        flight_number: str,
        departure: Optional[datetime] = None,
        arrival: Optional[datetime] = None,
    ) -> None:
        self.flight_number = flight_number
        super().__init__(
            f"Flight {flight_number} arrives ({arrival}) "
            f"not after it departs ({departure})"
        )


# =============================================================================
# SEARCH EXECUTION
# =============================================================================


class SearchCancelledError(ItinerarySearchError):
    """Raised when a search is cancelled or exceeds its deadline."""

    kind = "search_cancelled"
