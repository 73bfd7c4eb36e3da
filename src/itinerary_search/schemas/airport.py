"""
Airport schemas.

``AirportSchema`` is the Pandera contract for airport records at the
dataset boundary. ``Airport`` is the immutable value the engine looks up
by code for the lifetime of a directory snapshot.
"""

from dataclasses import dataclass
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import pandera as pa
from pandera.typing import DataFrame, Series


@lru_cache(maxsize=None)
def load_zone(name: str) -> ZoneInfo:
    """Return the ZoneInfo for an IANA identifier (cached)."""
    return ZoneInfo(name)


def is_valid_timezone(name: object) -> bool:
    """Check whether ``name`` is a known IANA timezone identifier."""
    if not isinstance(name, str) or not name:
        return False
    try:
        load_zone(name)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


class AirportSchema(pa.DataFrameModel):
    """
    Contract for airport records loaded from a dataset.

    One row per airport, unique by ``code``.
    """

    code: Series[str] = pa.Field(
        nullable=False,
        unique=True,
        str_length={"min_value": 3, "max_value": 3},
        description="IATA airport code (e.g., 'JFK')",
    )
    name: Series[str] = pa.Field(nullable=False, description="Airport name")
    city: Series[str] = pa.Field(nullable=False, description="City served")
    country: Series[str] = pa.Field(
        nullable=False,
        description="Country (compared verbatim for domestic checks)",
    )
    timezone: Series[str] = pa.Field(
        nullable=False,
        description="IANA timezone identifier (e.g., 'America/New_York')",
    )

    class Config:
        strict = False
        coerce = True
        name = "AirportSchema"
        description = "Airport reference data"

    @pa.check("timezone")
    def known_timezone(cls, series: Series[str]) -> Series[bool]:
        """Every timezone must resolve through zoneinfo."""
        return series.map(is_valid_timezone)


AirportDataFrame = DataFrame[AirportSchema]


@dataclass(frozen=True)
class Airport:
    """
    Immutable airport record.

    Attributes:
        code: 3-letter IATA code, unique key.
        name: Airport name.
        city: City served.
        country: Country, used for domestic/international decisions.
        timezone: IANA timezone identifier.
    """

    code: str
    name: str
    city: str
    country: str
    timezone: str

    def is_same_country(self, other: "Airport") -> bool:
        """Check if this airport is in the same country as another."""
        return self.country == other.country
