"""
Flight data schemas.

Flights are built in two phases:

1. Raw records (local wall-clock times, no zone) validated against
   ``RawFlightSchema`` at the dataset boundary.
2. Normalized records carrying UTC instants, validated against
   ``NormalizedFlightSchema`` and materialized as immutable ``Flight``
   values.

A ``Flight`` can never exist without both instants, so nothing
half-initialized reaches a directory index.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, NamedTuple, Optional

import pandas as pd
import pandera as pa
from pandera.typing import DataFrame, Series

from src.itinerary_search.exceptions import InvalidScheduleError, MissingInstantError


class RawFlightSchema(pa.DataFrameModel):
    """
    Raw flight contract - what a data provider must supply.

    Local times are naive wall-clock values; the airport timezones
    needed to interpret them live in the airport data.
    """

    flight_number: Series[str] = pa.Field(
        nullable=False,
        description="Flight number (e.g., 'SP101')",
    )
    airline: Series[str] = pa.Field(nullable=False, description="Operating airline")
    origin: Series[str] = pa.Field(
        nullable=False,
        str_length={"min_value": 3, "max_value": 3},
        description="Departure airport IATA code",
    )
    destination: Series[str] = pa.Field(
        nullable=False,
        str_length={"min_value": 3, "max_value": 3},
        description="Arrival airport IATA code",
    )
    departure_time: Series[pa.DateTime] = pa.Field(
        nullable=False,
        description="Local departure wall-clock time at origin",
    )
    arrival_time: Series[pa.DateTime] = pa.Field(
        nullable=False,
        description="Local arrival wall-clock time at destination",
    )
    price: Series[float] = pa.Field(ge=0, description="Fare in base currency")
    aircraft: Series[str] = pa.Field(nullable=True, description="Aircraft type")

    class Config:
        # Extra columns from providers pass through unchanged
        strict = False
        coerce = True
        name = "RawFlightSchema"
        description = "Flight records with local wall-clock times"


class NormalizedFlightSchema(RawFlightSchema):
    """
    Raw flight contract plus the derived UTC instants.

    Produced by the time normalizer; the only frame shape a directory
    will index.
    """

    departure_instant: Series[pd.DatetimeTZDtype] = pa.Field(
        nullable=False,
        dtype_kwargs={"unit": "ns", "tz": "UTC"},
        description="Departure instant on the UTC axis",
    )
    arrival_instant: Series[pd.DatetimeTZDtype] = pa.Field(
        nullable=False,
        dtype_kwargs={"unit": "ns", "tz": "UTC"},
        description="Arrival instant on the UTC axis",
    )

    class Config:
        strict = False
        coerce = True
        name = "NormalizedFlightSchema"
        description = "Flight records with UTC instants attached"

    @pa.dataframe_check
    def arrival_after_departure(cls, df: pd.DataFrame) -> Series[bool]:
        """Arrival must be strictly after departure on the instant axis."""
        return df["arrival_instant"] > df["departure_instant"]


RawFlightDataFrame = DataFrame[RawFlightSchema]
NormalizedFlightDataFrame = DataFrame[NormalizedFlightSchema]


class RawFlight(NamedTuple):
    """
    Single parsed flight record before timezone normalization.

    Field names match ``RawFlightSchema`` columns, so rows from
    ``RawFlightDataFrame.itertuples()`` can be used interchangeably.
    """

    flight_number: str
    airline: str
    origin: str
    destination: str
    departure_time: datetime
    arrival_time: datetime
    price: float
    aircraft: str = ""


def _require_aware(value: Optional[datetime], flight_number: str, field_name: str) -> None:
    if value is None or value.tzinfo is None or value.utcoffset() is None:
        raise MissingInstantError(flight_number, field_name)


@dataclass(frozen=True)
class Flight:
    """
    Immutable flight with local times and derived UTC instants.

    Attributes:
        flight_number: Flight number.
        airline: Operating airline.
        origin: Departure airport code.
        destination: Arrival airport code.
        local_departure_time: Naive wall-clock departure at origin.
        local_arrival_time: Naive wall-clock arrival at destination.
        price: Fare.
        aircraft: Aircraft type.
        departure_instant: Timezone-aware departure instant (UTC).
        arrival_instant: Timezone-aware arrival instant (UTC).

    Raises:
        MissingInstantError: If an instant is missing or naive.
        InvalidScheduleError: If arrival is not after departure.
    """

    flight_number: str
    airline: str
    origin: str
    destination: str
    local_departure_time: datetime
    local_arrival_time: datetime
    price: float
    aircraft: str
    departure_instant: datetime
    arrival_instant: datetime

    def __post_init__(self) -> None:
        _require_aware(self.departure_instant, self.flight_number, "departure_instant")
        _require_aware(self.arrival_instant, self.flight_number, "arrival_instant")
        if self.arrival_instant <= self.departure_instant:
            raise InvalidScheduleError(
                self.flight_number, self.departure_instant, self.arrival_instant
            )

    @property
    def departure_date(self) -> date:
        """Local departure date at the origin airport."""
        return self.local_departure_time.date()

    @property
    def arrival_date(self) -> date:
        """Local arrival date at the destination airport."""
        return self.local_arrival_time.date()

    @classmethod
    def from_record(cls, record: Any) -> "Flight":
        """
        Build a Flight from one normalized frame row.

        Args:
            record: Row from ``NormalizedFlightDataFrame.itertuples()``.

        Returns:
            Fully-formed Flight.
        """
        aircraft = record.aircraft
        return cls(
            flight_number=str(record.flight_number),
            airline=str(record.airline),
            origin=str(record.origin),
            destination=str(record.destination),
            local_departure_time=pd.Timestamp(record.departure_time).to_pydatetime(),
            local_arrival_time=pd.Timestamp(record.arrival_time).to_pydatetime(),
            price=float(record.price),
            aircraft="" if pd.isna(aircraft) else str(aircraft),
            departure_instant=pd.Timestamp(record.departure_instant).to_pydatetime(),
            arrival_instant=pd.Timestamp(record.arrival_instant).to_pydatetime(),
        )

    def __str__(self) -> str:
        return (
            f"{self.flight_number} {self.origin}->{self.destination} "
            f"({self.local_departure_time:%Y-%m-%dT%H:%M} -> "
            f"{self.local_arrival_time:%Y-%m-%dT%H:%M})"
        )
