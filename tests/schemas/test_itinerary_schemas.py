"""
Tests for itinerary_search schema definitions.

Validates that:
1. Pandera contracts accept well-formed frames and reject bad ones
2. Flight values cannot exist without timezone-aware instants
3. Itinerary, LayoverRules and cancellation values enforce their invariants
"""

import time
from datetime import datetime, timezone

import pandas as pd
import pandera as pa
import pytest

from src.itinerary_search.exceptions import (
    InvalidScheduleError,
    MissingInstantError,
    SearchCancelledError,
)
from src.itinerary_search.schemas.airport import AirportSchema, is_valid_timezone
from src.itinerary_search.schemas.flight import Flight, NormalizedFlightSchema, RawFlightSchema
from src.itinerary_search.schemas.itinerary import FlightSegment, Itinerary, Layover
from src.itinerary_search.schemas.route import LayoverRules, RouteClassification
from src.itinerary_search.schemas.search import SearchCancellation, WindowStrategy


# -------------------------
# Fixtures
# -------------------------


@pytest.fixture
def valid_airports_df() -> pd.DataFrame:
    return pd.DataFrame({
        "code": ["JFK", "LHR"],
        "name": ["John F. Kennedy International Airport", "Heathrow Airport"],
        "city": ["New York", "London"],
        "country": ["US", "GB"],
        "timezone": ["America/New_York", "Europe/London"],
    })


@pytest.fixture
def valid_raw_flights_df() -> pd.DataFrame:
    return pd.DataFrame({
        "flight_number": ["SP101"],
        "airline": ["SkyPath Airways"],
        "origin": ["JFK"],
        "destination": ["LAX"],
        "departure_time": [pd.Timestamp("2024-03-15T08:00:00")],
        "arrival_time": [pd.Timestamp("2024-03-15T11:30:00")],
        "price": [299.0],
        "aircraft": ["A321"],
    })


def _segment(code_from: str, code_to: str, minutes: int = 60) -> FlightSegment:
    return FlightSegment(
        flight_number="SP1",
        airline="Test Air",
        origin_code=code_from,
        origin_name=code_from,
        origin_city=code_from,
        destination_code=code_to,
        destination_name=code_to,
        destination_city=code_to,
        departure_time="2024-03-15T08:00:00",
        arrival_time="2024-03-15T09:00:00",
        duration_minutes=minutes,
        aircraft="A320",
        price=100.0,
    )


def _utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


# -------------------------
# AirportSchema / Airport
# -------------------------


class TestAirportSchema:
    """Tests for AirportSchema validation."""

    def test_valid_df_passes(self, valid_airports_df: pd.DataFrame) -> None:
        validated = AirportSchema.validate(valid_airports_df)
        assert list(validated["code"]) == ["JFK", "LHR"]

    def test_unknown_timezone_fails(self, valid_airports_df: pd.DataFrame) -> None:
        valid_airports_df.loc[1, "timezone"] = "Mars/Olympus_Mons"
        with pytest.raises(pa.errors.SchemaError):
            AirportSchema.validate(valid_airports_df)

    def test_duplicate_code_fails(self, valid_airports_df: pd.DataFrame) -> None:
        valid_airports_df.loc[1, "code"] = "JFK"
        with pytest.raises(pa.errors.SchemaError):
            AirportSchema.validate(valid_airports_df)

    def test_code_length_enforced(self, valid_airports_df: pd.DataFrame) -> None:
        valid_airports_df.loc[0, "code"] = "JFKX"
        with pytest.raises(pa.errors.SchemaError):
            AirportSchema.validate(valid_airports_df)


class TestAirport:
    """Tests for the Airport value."""

    def test_same_country(self, airports) -> None:
        assert airports["JFK"].is_same_country(airports["LAX"])
        assert not airports["JFK"].is_same_country(airports["LHR"])

    def test_is_frozen(self, airports) -> None:
        with pytest.raises(AttributeError):
            airports["JFK"].country = "GB"

    @pytest.mark.parametrize(
        "name,expected",
        [("Europe/Paris", True), ("Not/AZone", False), ("", False), (None, False)],
    )
    def test_is_valid_timezone(self, name, expected) -> None:
        assert is_valid_timezone(name) is expected


# -------------------------
# Flight schemas / Flight
# -------------------------


class TestFlightSchemas:
    """Tests for RawFlightSchema and NormalizedFlightSchema."""

    def test_raw_valid_df_passes(self, valid_raw_flights_df: pd.DataFrame) -> None:
        validated = RawFlightSchema.validate(valid_raw_flights_df)
        assert len(validated) == 1

    def test_raw_negative_price_fails(self, valid_raw_flights_df: pd.DataFrame) -> None:
        valid_raw_flights_df.loc[0, "price"] = -1.0
        with pytest.raises(pa.errors.SchemaError):
            RawFlightSchema.validate(valid_raw_flights_df)

    def test_raw_extra_columns_pass_through(self, valid_raw_flights_df: pd.DataFrame) -> None:
        valid_raw_flights_df["terminal"] = ["4"]
        validated = RawFlightSchema.validate(valid_raw_flights_df)
        assert "terminal" in validated.columns

    def test_normalized_requires_arrival_after_departure(
        self, valid_raw_flights_df: pd.DataFrame
    ) -> None:
        df = valid_raw_flights_df.copy()
        df["departure_instant"] = pd.Series([pd.Timestamp("2024-03-15T12:00:00", tz="UTC")])
        df["arrival_instant"] = pd.Series([pd.Timestamp("2024-03-15T11:00:00", tz="UTC")])
        with pytest.raises(pa.errors.SchemaError):
            NormalizedFlightSchema.validate(df)


class TestFlight:
    """Tests for the Flight value and its invariants."""

    def _kwargs(self, **overrides):
        values = dict(
            flight_number="SP101",
            airline="SkyPath Airways",
            origin="JFK",
            destination="LAX",
            local_departure_time=datetime(2024, 3, 15, 8, 0),
            local_arrival_time=datetime(2024, 3, 15, 11, 30),
            price=299.0,
            aircraft="A321",
            departure_instant=_utc(2024, 3, 15, 12, 0),
            arrival_instant=_utc(2024, 3, 15, 18, 30),
        )
        values.update(overrides)
        return values

    def test_valid_flight(self) -> None:
        flight = Flight(**self._kwargs())
        assert flight.departure_date == datetime(2024, 3, 15).date()

    def test_naive_instant_rejected(self) -> None:
        with pytest.raises(MissingInstantError):
            Flight(**self._kwargs(departure_instant=datetime(2024, 3, 15, 12, 0)))

    def test_missing_instant_rejected(self) -> None:
        with pytest.raises(MissingInstantError):
            Flight(**self._kwargs(arrival_instant=None))

    def test_arrival_not_after_departure_rejected(self) -> None:
        with pytest.raises(InvalidScheduleError):
            Flight(**self._kwargs(arrival_instant=_utc(2024, 3, 15, 12, 0)))

    def test_from_record(self) -> None:
        row = pd.DataFrame({
            "flight_number": ["SP101"],
            "airline": ["SkyPath Airways"],
            "origin": ["JFK"],
            "destination": ["LAX"],
            "departure_time": [pd.Timestamp("2024-03-15T08:00:00")],
            "arrival_time": [pd.Timestamp("2024-03-15T11:30:00")],
            "price": [299.0],
            "aircraft": [float("nan")],
            "departure_instant": [pd.Timestamp("2024-03-15T12:00:00", tz="UTC")],
            "arrival_instant": [pd.Timestamp("2024-03-15T18:30:00", tz="UTC")],
        })
        flight = Flight.from_record(next(row.itertuples(index=False)))

        assert flight.aircraft == ""
        assert flight.departure_instant == _utc(2024, 3, 15, 12, 0)
        assert flight.local_arrival_time == datetime(2024, 3, 15, 11, 30)


# -------------------------
# Itinerary / route policy
# -------------------------


class TestItinerary:
    """Tests for Itinerary invariants and helpers."""

    def test_empty_segments_rejected(self) -> None:
        with pytest.raises(ValueError):
            Itinerary(segments=(), layovers=(), stops=0, total_duration_minutes=0, total_price=0.0)

    def test_layover_count_must_match(self) -> None:
        with pytest.raises(ValueError):
            Itinerary(
                segments=(_segment("JFK", "ORD"), _segment("ORD", "LAX")),
                layovers=(),
                stops=1,
                total_duration_minutes=200,
                total_price=200.0,
            )

    def test_stops_must_match(self) -> None:
        with pytest.raises(ValueError, match="stops"):
            Itinerary(
                segments=(_segment("JFK", "ORD"), _segment("ORD", "LAX")),
                layovers=(Layover("ORD", "O'Hare", "Chicago", 80, "domestic"),),
                stops=2,
                total_duration_minutes=200,
                total_price=200.0,
            )

    def test_segments_must_connect(self) -> None:
        with pytest.raises(ValueError, match="do not connect"):
            Itinerary(
                segments=(_segment("JFK", "ORD"), _segment("SFO", "LAX")),
                layovers=(Layover("ORD", "O'Hare", "Chicago", 80, "domestic"),),
                stops=1,
                total_duration_minutes=200,
                total_price=200.0,
            )

    def test_layover_airport_must_match_connection(self) -> None:
        with pytest.raises(ValueError, match="Layover at SFO"):
            Itinerary(
                segments=(_segment("JFK", "ORD"), _segment("ORD", "LAX")),
                layovers=(Layover("SFO", "San Francisco", "San Francisco", 80, "domestic"),),
                stops=1,
                total_duration_minutes=200,
                total_price=200.0,
            )

    def test_helpers(self) -> None:
        layover = Layover("ORD", "O'Hare", "Chicago", 80, "domestic")
        itinerary = Itinerary(
            segments=(_segment("JFK", "ORD", 120), _segment("ORD", "LAX", 240)),
            layovers=(layover,),
            stops=1,
            total_duration_minutes=440,
            total_price=200.0,
        )

        assert itinerary.origin == "JFK"
        assert itinerary.destination == "LAX"
        assert itinerary.route_airports == ["JFK", "ORD", "LAX"]
        assert itinerary.total_flight_minutes == 360
        assert itinerary.total_layover_minutes == 80
        assert layover.is_domestic


class TestLayoverRules:
    """Tests for LayoverRules validation."""

    def test_defaults(self) -> None:
        rules = LayoverRules()
        assert rules.min_minutes(domestic=True) == 45
        assert rules.min_minutes(domestic=False) == 90
        assert rules.max_minutes == 360
        assert rules.widest_min_minutes == 45

    def test_negative_rejected(self) -> None:
        with pytest.raises(ValueError, match="min_domestic_minutes"):
            LayoverRules(min_domestic_minutes=-1)

    def test_minimum_above_maximum_rejected(self) -> None:
        with pytest.raises(ValueError, match="min_international_minutes"):
            LayoverRules(min_international_minutes=400, max_minutes=360)

    def test_classification_label(self) -> None:
        assert RouteClassification(True, 1, "US").label == "domestic"
        assert RouteClassification(False, 2).label == "international"


class TestSearchCancellation:
    """Tests for SearchCancellation."""

    def test_not_cancelled_by_default(self) -> None:
        cancellation = SearchCancellation()
        assert not cancellation.is_cancelled
        cancellation.raise_if_cancelled()

    def test_cancel_raises(self) -> None:
        cancellation = SearchCancellation()
        cancellation.cancel()
        assert cancellation.is_cancelled
        with pytest.raises(SearchCancelledError, match="cancelled"):
            cancellation.raise_if_cancelled()

    def test_expired_deadline_raises(self) -> None:
        cancellation = SearchCancellation(deadline=time.monotonic() - 1)
        with pytest.raises(SearchCancelledError, match="deadline"):
            cancellation.raise_if_cancelled()

    def test_with_timeout(self) -> None:
        assert SearchCancellation.with_timeout(None).deadline is None
        cancellation = SearchCancellation.with_timeout(60)
        assert cancellation.deadline > time.monotonic()
        assert not cancellation.is_cancelled

    def test_window_strategy_values(self) -> None:
        assert WindowStrategy("local_date") is WindowStrategy.LOCAL_DATE
        assert WindowStrategy("instant_window") is WindowStrategy.INSTANT_WINDOW
