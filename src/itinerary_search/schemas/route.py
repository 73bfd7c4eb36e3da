"""
Route-level policy schemas.

``LayoverRules`` holds the connection thresholds; ``RouteClassification``
is the whole-route decision that sets traversal limits.
"""

from dataclasses import dataclass
from typing import Optional

# Default connection thresholds (minutes)
MIN_DOMESTIC_LAYOVER_MINUTES = 45
MIN_INTERNATIONAL_LAYOVER_MINUTES = 90
MAX_LAYOVER_MINUTES = 360

# Default stop ceilings
DOMESTIC_MAX_STOPS = 1
INTERNATIONAL_MAX_STOPS = 2


@dataclass(frozen=True)
class LayoverRules:
    """
    Immutable layover thresholds.

    Attributes:
        min_domestic_minutes: Minimum layover for a domestic connection.
        min_international_minutes: Minimum layover for an international connection.
        max_minutes: Maximum layover, regardless of classification.
    """

    min_domestic_minutes: int = MIN_DOMESTIC_LAYOVER_MINUTES
    min_international_minutes: int = MIN_INTERNATIONAL_LAYOVER_MINUTES
    max_minutes: int = MAX_LAYOVER_MINUTES

    def __post_init__(self) -> None:
        """Validate thresholds after initialization."""
        for name in ("min_domestic_minutes", "min_international_minutes", "max_minutes"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")
        if self.min_domestic_minutes > self.max_minutes:
            raise ValueError(
                f"min_domestic_minutes ({self.min_domestic_minutes}) must be "
                f"<= max_minutes ({self.max_minutes})"
            )
        if self.min_international_minutes > self.max_minutes:
            raise ValueError(
                f"min_international_minutes ({self.min_international_minutes}) must be "
                f"<= max_minutes ({self.max_minutes})"
            )

    def min_minutes(self, domestic: bool) -> int:
        """Minimum layover for the given connection classification."""
        return self.min_domestic_minutes if domestic else self.min_international_minutes

    @property
    def widest_min_minutes(self) -> int:
        """Smallest minimum layover any connection can be held to."""
        return min(self.min_domestic_minutes, self.min_international_minutes)


@dataclass(frozen=True)
class RouteClassification:
    """
    Whole-route classification.

    Attributes:
        is_domestic: Origin and destination share a country.
        max_stops: Intermediate stop ceiling for the search.
        domestic_country: Country intermediates must be in, or None when
            the search is international.
    """

    is_domestic: bool
    max_stops: int
    domestic_country: Optional[str] = None

    @property
    def label(self) -> str:
        return "domestic" if self.is_domestic else "international"
