"""
Tests for JsonFlightDataProvider.

Tests cover:
- Airport loading and skipping of unusable records
- Flight loading: camelCase mapping, price coercion, unknown airports
- File-level failures
"""

import json
from pathlib import Path

import pandas as pd
import pytest

from src.itinerary_search.adapters.data_providers.json_provider import (
    JsonFlightDataProvider,
    coerce_prices,
)
from src.itinerary_search.exceptions import DatasetFormatError


# =============================================================================
# FIXTURES
# =============================================================================


AIRPORTS = [
    {"code": "JFK", "name": "John F. Kennedy International Airport", "city": "New York",
     "country": "US", "timezone": "America/New_York"},
    {"code": "LAX", "name": "Los Angeles International Airport", "city": "Los Angeles",
     "country": "US", "timezone": "America/Los_Angeles"},
]


def _flight(number: str, **overrides) -> dict:
    record = {
        "flightNumber": number,
        "airline": "SkyPath Airways",
        "origin": "JFK",
        "destination": "LAX",
        "departureTime": "2024-03-15T08:00:00",
        "arrivalTime": "2024-03-15T11:30:00",
        "price": 299.0,
        "aircraft": "A321",
    }
    record.update(overrides)
    return record


@pytest.fixture
def write_dataset(tmp_path):
    def _write(payload) -> Path:
        path = tmp_path / "flights.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    return _write


# =============================================================================
# AIRPORTS
# =============================================================================


class TestAirports:
    """Tests for get_airports_df."""

    def test_loads_airports(self, write_dataset) -> None:
        provider = JsonFlightDataProvider(write_dataset({"airports": AIRPORTS, "flights": []}))
        df = provider.get_airports_df()

        assert list(df["code"]) == ["JFK", "LAX"]
        assert list(df.columns) == ["code", "name", "city", "country", "timezone"]

    def test_skips_bad_timezone(self, write_dataset, caplog) -> None:
        airports = AIRPORTS + [
            {"code": "XXX", "name": "Nowhere", "city": "Nowhere", "country": "ZZ",
             "timezone": "Mars/Base"},
        ]
        provider = JsonFlightDataProvider(write_dataset({"airports": airports, "flights": []}))

        with caplog.at_level("WARNING"):
            df = provider.get_airports_df()

        assert "XXX" not in set(df["code"])
        assert "unknown timezone" in caplog.text

    def test_skips_incomplete_and_duplicate(self, write_dataset) -> None:
        airports = AIRPORTS + [
            {"code": "ORD", "name": "O'Hare"},
            dict(AIRPORTS[0], name="Duplicate JFK"),
        ]
        provider = JsonFlightDataProvider(write_dataset({"airports": airports, "flights": []}))
        df = provider.get_airports_df()

        assert list(df["code"]) == ["JFK", "LAX"]
        assert df.loc[df["code"] == "JFK", "name"].item() == "John F. Kennedy International Airport"

    @pytest.mark.parametrize("code", ["XX", "", "J1K", "JFKX", 123])
    def test_skips_malformed_code(self, write_dataset, caplog, code) -> None:
        airports = AIRPORTS + [dict(AIRPORTS[1], code=code, name="Broken")]
        provider = JsonFlightDataProvider(write_dataset({"airports": airports, "flights": []}))

        with caplog.at_level("WARNING"):
            df = provider.get_airports_df()

        assert list(df["code"]) == ["JFK", "LAX"]
        assert "code must be three letters" in caplog.text


# =============================================================================
# FLIGHTS
# =============================================================================


class TestFlights:
    """Tests for get_flights_df."""

    def test_maps_columns(self, write_dataset) -> None:
        provider = JsonFlightDataProvider(
            write_dataset({"airports": AIRPORTS, "flights": [_flight("SP101")]})
        )
        df = provider.get_flights_df()

        row = df.iloc[0]
        assert row["flight_number"] == "SP101"
        assert row["departure_time"] == pd.Timestamp("2024-03-15T08:00:00")
        assert row["price"] == 299.0

    def test_string_price_coerced(self, write_dataset) -> None:
        provider = JsonFlightDataProvider(
            write_dataset({"airports": AIRPORTS, "flights": [_flight("SP120", price="289.00")]})
        )
        df = provider.get_flights_df()

        assert df["price"].tolist() == [289.0]

    def test_unusable_price_skipped(self, write_dataset, caplog) -> None:
        flights = [_flight("SP101"), _flight("SP102", price="call us"), _flight("SP103", price=-5)]
        provider = JsonFlightDataProvider(write_dataset({"airports": AIRPORTS, "flights": flights}))

        with caplog.at_level("WARNING"):
            df = provider.get_flights_df()

        assert list(df["flight_number"]) == ["SP101"]
        assert "Skipped 2 of 3 flights" in caplog.text

    def test_unknown_airport_skipped(self, write_dataset, caplog) -> None:
        flights = [_flight("SP101"), _flight("SP999", origin="JKF")]
        provider = JsonFlightDataProvider(write_dataset({"airports": AIRPORTS, "flights": flights}))

        with caplog.at_level("WARNING"):
            df = provider.get_flights_df()

        assert list(df["flight_number"]) == ["SP101"]
        assert "SP999 with unknown airport(s): JKF -> LAX" in caplog.text

    def test_unparsable_time_skipped(self, write_dataset) -> None:
        flights = [_flight("SP101"), _flight("SP102", departureTime="tomorrow morning")]
        provider = JsonFlightDataProvider(write_dataset({"airports": AIRPORTS, "flights": flights}))

        assert list(provider.get_flights_df()["flight_number"]) == ["SP101"]

    @pytest.mark.parametrize(
        "overrides",
        [
            {"departureTime": "2024-03-15T08:00:00-04:00"},
            {"arrivalTime": "2024-03-15T18:30:00Z"},
        ],
    )
    def test_offset_time_skipped(self, write_dataset, caplog, overrides) -> None:
        flights = [_flight("SP101"), _flight("SP102", **overrides), _flight("SP103")]
        provider = JsonFlightDataProvider(write_dataset({"airports": AIRPORTS, "flights": flights}))

        with caplog.at_level("WARNING"):
            df = provider.get_flights_df()

        assert list(df["flight_number"]) == ["SP101", "SP103"]
        assert "SP102: departure/arrival is not an ISO local date-time" in caplog.text

    def test_missing_aircraft_allowed(self, write_dataset) -> None:
        record = _flight("SP101")
        del record["aircraft"]
        provider = JsonFlightDataProvider(write_dataset({"airports": AIRPORTS, "flights": [record]}))

        assert provider.get_flights_df()["aircraft"].tolist() == [""]

    def test_missing_required_field_skipped(self, write_dataset) -> None:
        record = _flight("SP102")
        del record["arrivalTime"]
        provider = JsonFlightDataProvider(
            write_dataset({"airports": AIRPORTS, "flights": [_flight("SP101"), record]})
        )

        assert list(provider.get_flights_df()["flight_number"]) == ["SP101"]

    def test_bundled_dataset(self, dataset_path) -> None:
        provider = JsonFlightDataProvider(dataset_path)
        df = provider.get_flights_df()

        assert "SP999" not in set(df["flight_number"])
        assert df.loc[df["flight_number"] == "SP120", "price"].item() == 289.0


# =============================================================================
# FILE ACCESS
# =============================================================================


class TestFileAccess:
    """Tests for file-level failures."""

    def test_missing_file(self, tmp_path) -> None:
        provider = JsonFlightDataProvider(tmp_path / "nope.json")
        assert not provider.is_available
        with pytest.raises(FileNotFoundError):
            provider.get_flights_df()

    def test_malformed_json(self, tmp_path) -> None:
        path = tmp_path / "flights.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(DatasetFormatError, match="Malformed JSON"):
            JsonFlightDataProvider(path).get_airports_df()

    def test_sections_must_be_lists(self, write_dataset) -> None:
        provider = JsonFlightDataProvider(write_dataset({"airports": {}, "flights": []}))
        with pytest.raises(DatasetFormatError, match="'airports' must be a list"):
            provider.get_airports_df()

    def test_top_level_must_be_object(self, write_dataset) -> None:
        provider = JsonFlightDataProvider(write_dataset([1, 2, 3]))
        with pytest.raises(DatasetFormatError):
            provider.get_flights_df()

    def test_name(self, write_dataset) -> None:
        provider = JsonFlightDataProvider(write_dataset({"airports": [], "flights": []}))
        assert provider.name == "JSON file flights.json"
        assert provider.is_available


class TestCoercePrices:
    """Tests for coerce_prices."""

    def test_mixed_values(self) -> None:
        result = coerce_prices(pd.Series([289.0, "99", " 12.50 ", "n/a", None]))
        assert result.tolist()[:3] == [289.0, 99.0, 12.5]
        assert result.isna().tolist()[3:] == [True, True]
