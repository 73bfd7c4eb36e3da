"""
JSON Data Provider - Dataset file to DataFrame adapter.

Reads a JSON document of the form ``{"airports": [...], "flights": [...]}``
and transforms it into AirportSchema / RawFlightSchema DataFrames.
Record-level problems (unknown or malformed airport codes, bad prices,
unparsable or offset-qualified times, bad timezones) drop the offending record with a logged warning;
they never fail the whole load.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Set, Union

import pandas as pd

from src.itinerary_search.exceptions import DatasetFormatError
from src.itinerary_search.ports.flight_data_provider import FlightDataProvider
from src.itinerary_search.schemas.airport import (
    AirportDataFrame,
    AirportSchema,
    is_valid_timezone,
)
from src.itinerary_search.schemas.flight import RawFlightDataFrame, RawFlightSchema
from src.itinerary_search.validation import is_valid_iata_code

logger = logging.getLogger(__name__)

AIRPORT_COLUMNS = ["code", "name", "city", "country", "timezone"]

# Dataset field -> RawFlightSchema column
FLIGHT_COLUMN_MAP = {
    "flightNumber": "flight_number",
    "airline": "airline",
    "origin": "origin",
    "destination": "destination",
    "departureTime": "departure_time",
    "arrivalTime": "arrival_time",
    "price": "price",
    "aircraft": "aircraft",
}
FLIGHT_COLUMNS = list(FLIGHT_COLUMN_MAP.values())
REQUIRED_FLIGHT_COLUMNS = [c for c in FLIGHT_COLUMNS if c != "aircraft"]


def coerce_prices(prices: pd.Series) -> pd.Series:
    """
    Coerce a price column to float.

    Accepts numbers and numeric strings (e.g. ``"289.00"``, ``"99"``).
    Anything else becomes NaN.

    Examples:
        >>> coerce_prices(pd.Series([289.0, "99", "n/a"])).tolist()
        [289.0, 99.0, nan]
    """
    as_text = prices.map(lambda v: v.strip() if isinstance(v, str) else v)
    return pd.to_numeric(as_text, errors="coerce").astype(float)


def _parse_local_time(value: Any) -> pd.Timestamp:
    if not isinstance(value, str):
        return pd.NaT
    parsed = pd.to_datetime(value.strip(), format="ISO8601", errors="coerce")
    # Local wall-clock readings only
    if pd.isna(parsed) or parsed.tzinfo is not None:
        return pd.NaT
    return parsed


def parse_local_times(values: pd.Series) -> pd.Series:
    """
    Parse ISO local date-times, one value at a time.

    Unparsable values and values carrying a UTC offset become NaT, so one
    bad record never fails the column.
    """
    return pd.to_datetime(values.map(_parse_local_time))


class JsonFlightDataProvider(FlightDataProvider):
    """
    Data provider for a JSON dataset file.

    The file is read on every call so a directory reload picks up changes.

    Attributes:
        _path: Path to the JSON file.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def name(self) -> str:
        """Human-readable provider name."""
        return f"JSON file {self._path.name}"

    @property
    def is_available(self) -> bool:
        """Check if the dataset file exists."""
        return self._path.exists()

    def get_airports_df(self) -> AirportDataFrame:
        """
        Load airports, skipping incomplete records and unknown timezones.

        Returns:
            DataFrame validated against AirportSchema.
        """
        records = self._read_section("airports")
        return self._airports_from_records(records)

    def get_flights_df(self) -> RawFlightDataFrame:
        """
        Load flights, dropping records that cannot be used.

        A record is dropped (with a warning) when it misses a required
        field, references an unknown airport, has a non-numeric price, or
        has an unparsable departure/arrival time.

        Returns:
            DataFrame validated against RawFlightSchema.
        """
        payload = self._read_payload()
        known_airports = set(
            self._airports_from_records(self._section(payload, "airports"))["code"]
        )
        return self._flights_from_records(self._section(payload, "flights"), known_airports)

    # ----- parsing ---------------------------------------------------------

    def _airports_from_records(self, records: List[Dict[str, Any]]) -> AirportDataFrame:
        df = pd.DataFrame.from_records(records) if records else pd.DataFrame()
        df = df.reindex(columns=AIRPORT_COLUMNS)

        incomplete = df[AIRPORT_COLUMNS].isna().any(axis=1)
        for code in df.loc[incomplete, "code"]:
            logger.warning("Skipping airport %s: missing required fields", code)
        df = df.loc[~incomplete]

        bad_code = ~df["code"].map(
            lambda code: isinstance(code, str) and is_valid_iata_code(code)
        ).astype(bool)
        for code in df.loc[bad_code, "code"]:
            logger.warning("Skipping airport %r: code must be three letters", code)
        df = df.loc[~bad_code]

        bad_zone = ~df["timezone"].map(is_valid_timezone).astype(bool)
        for code, zone in zip(df.loc[bad_zone, "code"], df.loc[bad_zone, "timezone"]):
            logger.warning("Skipping airport %s: unknown timezone %r", code, zone)
        df = df.loc[~bad_zone]

        duplicated = df["code"].duplicated(keep="first")
        for code in df.loc[duplicated, "code"]:
            logger.warning("Skipping duplicate airport record %s", code)
        df = df.loc[~duplicated].reset_index(drop=True)

        return AirportSchema.validate(df.astype({c: str for c in AIRPORT_COLUMNS}))

    def _flights_from_records(
        self,
        records: List[Dict[str, Any]],
        known_airports: Set[str],
    ) -> RawFlightDataFrame:
        df = pd.DataFrame.from_records(records) if records else pd.DataFrame()
        df = df.rename(columns=FLIGHT_COLUMN_MAP).reindex(columns=FLIGHT_COLUMNS)
        total = len(df)

        incomplete = df[REQUIRED_FLIGHT_COLUMNS].isna().any(axis=1)
        for flight_number in df.loc[incomplete, "flight_number"]:
            logger.warning("Skipping flight %s: missing required fields", flight_number)
        df = df.loc[~incomplete].copy()

        # Handles typos such as "JKF" for "JFK"
        unknown = ~(df["origin"].isin(known_airports) & df["destination"].isin(known_airports))
        for row in df.loc[unknown, ["flight_number", "origin", "destination"]].itertuples(
            index=False
        ):
            logger.warning(
                "Skipping flight %s with unknown airport(s): %s -> %s",
                row.flight_number,
                row.origin,
                row.destination,
            )
        df = df.loc[~unknown].copy()

        df["price"] = coerce_prices(df["price"])
        bad_price = df["price"].isna() | (df["price"] < 0)
        for flight_number in df.loc[bad_price, "flight_number"]:
            logger.warning("Skipping flight %s: unusable price", flight_number)
        df = df.loc[~bad_price].copy()

        df["departure_time"] = parse_local_times(df["departure_time"])
        df["arrival_time"] = parse_local_times(df["arrival_time"])
        bad_time = df["departure_time"].isna() | df["arrival_time"].isna()
        for flight_number in df.loc[bad_time, "flight_number"]:
            logger.warning(
                "Skipping flight %s: departure/arrival is not an ISO local date-time", flight_number
            )
        df = df.loc[~bad_time].copy()

        df["aircraft"] = df["aircraft"].fillna("")
        df = df.reset_index(drop=True)

        skipped = total - len(df)
        if skipped > 0:
            logger.warning("Skipped %d of %d flights during load", skipped, total)

        return RawFlightSchema.validate(df)

    # ----- file access -----------------------------------------------------

    def _read_payload(self) -> Dict[str, Any]:
        if not self._path.exists():
            raise FileNotFoundError(f"Dataset not found: {self._path}")

        try:
            with open(self._path, "r", encoding="utf-8") as f:
                payload = json.load(f)
        except json.JSONDecodeError as e:
            raise DatasetFormatError(f"Malformed JSON in {self._path}: {e}") from e

        if not isinstance(payload, dict):
            raise DatasetFormatError(
                f"Expected a JSON object with 'airports' and 'flights' in {self._path}"
            )
        return payload

    def _read_section(self, key: str) -> List[Dict[str, Any]]:
        return self._section(self._read_payload(), key)

    def _section(self, payload: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
        section = payload.get(key)
        if not isinstance(section, list):
            raise DatasetFormatError(f"'{key}' must be a list in {self._path}")
        return [record for record in section if isinstance(record, dict)]
