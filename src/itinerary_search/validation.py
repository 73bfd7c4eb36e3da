"""
Input validation for search requests.

Runs before the search core is invoked, so the core can assume known,
distinct airport codes and a valid date. Fail-fast with a specific
InvalidSearchError subclass per problem.
"""

import re
from datetime import date
from typing import Tuple

from src.itinerary_search.exceptions import (
    InvalidAirportCodeError,
    InvalidDateError,
    MissingParameterError,
    SameAirportError,
    UnknownAirportError,
)
from src.itinerary_search.ports.flight_directory import FlightDirectory

ISO_DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


def normalize_airport_code(code: str) -> str:
    """Trim and upper-case an airport code."""
    return (code or "").strip().upper()


def is_valid_iata_code(code: str) -> bool:
    """Check for exactly three ASCII letters."""
    return len(code) == 3 and code.isascii() and code.isalpha()


def parse_search_date(value: str) -> date:
    """
    Parse a YYYY-MM-DD date.

    Only the extended calendar form is accepted; basic (``20240315``) and
    week (``2024-W11-5``) forms are rejected.

    Raises:
        InvalidDateError: If the value is not an ISO calendar date.
    """
    text = value.strip() if isinstance(value, str) else ""
    if not ISO_DATE_PATTERN.fullmatch(text):
        raise InvalidDateError(value)
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise InvalidDateError(value) from None


def validate_search_params(
    origin: str,
    destination: str,
    date_value: str,
    directory: FlightDirectory,
) -> Tuple[str, str, date]:
    """
    Validate and normalize raw search parameters.

    Checks, in order: required values, IATA code shape, known origin,
    known destination, distinct airports, parseable date.

    Args:
        origin: Raw origin code.
        destination: Raw destination code.
        date_value: Raw date string (YYYY-MM-DD).
        directory: Directory used for the known-airport checks.

    Returns:
        Tuple of (origin, destination, date), codes upper-cased.

    Raises:
        MissingParameterError: If any value is empty.
        InvalidAirportCodeError: If a code is not 3 letters.
        UnknownAirportError: If a code is not in the directory.
        SameAirportError: If origin equals destination.
        InvalidDateError: If the date cannot be parsed.
    """
    origin = normalize_airport_code(origin)
    destination = normalize_airport_code(destination)
    date_value = (date_value or "").strip()

    if not origin or not destination or not date_value:
        raise MissingParameterError()

    if not is_valid_iata_code(origin):
        raise InvalidAirportCodeError(origin, "origin")
    if not is_valid_iata_code(destination):
        raise InvalidAirportCodeError(destination, "destination")

    if not directory.airport_exists(origin):
        raise UnknownAirportError(origin, "origin")
    if not directory.airport_exists(destination):
        raise UnknownAirportError(destination, "destination")

    if origin == destination:
        raise SameAirportError(origin)

    return origin, destination, parse_search_date(date_value)
