"""
Time Normalizer - Local wall-clock times onto the UTC instant axis.

All duration and ordering logic in the engine compares instants, never
local clock readings, so results stay correct across timezones, DST
changes and date-line crossings (e.g. NRT -> LAX, where the local arrival
clock reads earlier than the local departure clock).
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Mapping

import numpy as np
import pandas as pd

from src.itinerary_search.schemas.airport import Airport
from src.itinerary_search.schemas.flight import (
    Flight,
    NormalizedFlightDataFrame,
    NormalizedFlightSchema,
    RawFlight,
)

logger = logging.getLogger(__name__)

# Wall-clock readings repeated by a DST fall-back resolve to the earlier
# (daylight-saving) offset; readings skipped by spring-forward move forward.
NONEXISTENT_POLICY = "shift_forward"


def floor_to_minute(local_time: datetime) -> datetime:
    """Drop seconds and sub-second parts from a wall-clock time."""
    return pd.Timestamp(local_time).floor("min").to_pydatetime()


def minutes_between(start: datetime, end: datetime) -> int:
    """
    Whole minutes from ``start`` to ``end``, truncated toward zero.

    Negative when ``end`` precedes ``start``.
    """
    return int((end - start).total_seconds() / 60)


class TimeNormalizer:
    """
    Converts local flight times to UTC instants using airport timezones.

    Must run exactly once per flight, at ingestion time, before the flight
    enters any index used by search. Local times are floored to the minute
    first, so every instant sits on a minute boundary. Offers a scalar
    path (one record) and a vectorized path (a whole DataFrame) with
    identical DST rules.
    """

    def to_instant(self, local_time: datetime, timezone: str) -> datetime:
        """
        Attach ``timezone`` to a naive wall-clock time and convert to UTC.

        Args:
            local_time: Naive local date-time.
            timezone: IANA timezone identifier.

        Returns:
            Timezone-aware UTC datetime.
        """
        localized = pd.Timestamp(local_time).tz_localize(
            timezone, ambiguous=True, nonexistent=NONEXISTENT_POLICY
        )
        return localized.tz_convert("UTC").to_pydatetime()

    def normalize(
        self,
        raw: RawFlight,
        origin_airport: Airport,
        destination_airport: Airport,
    ) -> Flight:
        """
        Produce a fully-formed Flight from a raw record.

        The origin timezone applies to the departure time and the
        destination timezone to the arrival time.

        Args:
            raw: Parsed record with naive local times.
            origin_airport: Airport the flight departs from.
            destination_airport: Airport the flight arrives at.

        Returns:
            Immutable Flight with both instants populated.

        Raises:
            ValueError: If the airports do not match the record.
            InvalidScheduleError: If arrival is not after departure.
        """
        if raw.origin != origin_airport.code or raw.destination != destination_airport.code:
            raise ValueError(
                f"Airports {origin_airport.code}->{destination_airport.code} do not match "
                f"flight {raw.flight_number} ({raw.origin}->{raw.destination})"
            )

        departure_time = floor_to_minute(raw.departure_time)
        arrival_time = floor_to_minute(raw.arrival_time)

        return Flight(
            flight_number=raw.flight_number,
            airline=raw.airline,
            origin=raw.origin,
            destination=raw.destination,
            local_departure_time=departure_time,
            local_arrival_time=arrival_time,
            price=float(raw.price),
            aircraft=raw.aircraft or "",
            departure_instant=self.to_instant(departure_time, origin_airport.timezone),
            arrival_instant=self.to_instant(arrival_time, destination_airport.timezone),
        )

    def normalize_frame(
        self,
        flights_df: pd.DataFrame,
        airports: Mapping[str, Airport],
    ) -> NormalizedFlightDataFrame:
        """
        Vectorized normalization of a raw flights DataFrame.

        Rows are grouped by timezone so each group is localized with a
        single pandas call. Rows whose airports are unknown, or whose
        arrival instant is not after the departure instant, are dropped
        with a logged warning.

        Args:
            flights_df: DataFrame validated against RawFlightSchema.
            airports: Airport lookup by code.

        Returns:
            DataFrame validated against NormalizedFlightSchema.
        """
        df = flights_df.copy()
        df["departure_time"] = pd.to_datetime(df["departure_time"]).dt.floor("min")
        df["arrival_time"] = pd.to_datetime(df["arrival_time"]).dt.floor("min")

        origin_zones = df["origin"].map(
            lambda code: airports[code].timezone if code in airports else None
        )
        destination_zones = df["destination"].map(
            lambda code: airports[code].timezone if code in airports else None
        )

        df["departure_instant"] = self._localize_column(df["departure_time"], origin_zones)
        df["arrival_instant"] = self._localize_column(df["arrival_time"], destination_zones)

        missing = df["departure_instant"].isna() | df["arrival_instant"].isna()
        inverted = ~missing & (df["arrival_instant"] <= df["departure_instant"])

        for flight_number in df.loc[missing, "flight_number"]:
            logger.warning("Skipping flight %s: timezone unavailable", flight_number)
        for flight_number in df.loc[inverted, "flight_number"]:
            logger.warning(
                "Skipping flight %s: arrival is not after departure", flight_number
            )

        df = df.loc[~(missing | inverted)].reset_index(drop=True)
        return NormalizedFlightSchema.validate(df)

    def duration_minutes(self, flight: Flight) -> int:
        """Flight duration on the instant axis."""
        return minutes_between(flight.departure_instant, flight.arrival_instant)

    def layover_minutes(self, arriving: Flight, departing: Flight) -> int:
        """
        Ground time between an arriving and a departing flight.

        Returns:
            Minutes from arrival to departure; negative if the departing
            flight leaves before the arriving one lands.
        """
        return minutes_between(arriving.arrival_instant, departing.departure_instant)

    @staticmethod
    def _localize_column(local: pd.Series, zones: pd.Series) -> pd.Series:
        """Localize a naive datetime column, one timezone group at a time."""
        local = pd.to_datetime(local)
        pieces = []
        for zone_name, group in local.groupby(zones, sort=False):
            localized = group.dt.tz_localize(
                zone_name,
                ambiguous=np.ones(len(group), dtype=bool),
                nonexistent=NONEXISTENT_POLICY,
            )
            pieces.append(localized.dt.tz_convert("UTC"))

        if not pieces:
            return pd.Series(pd.NaT, index=local.index, dtype="datetime64[ns, UTC]")
        return pd.concat(pieces).reindex(local.index)
