"""
Configuration module for the itinerary search engine.

Loads environment variables (optionally from a .env file) and provides
centralized settings for the dataset location, layover rules, stop
ceilings, query strategy and request handling.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Tuple

from dotenv import load_dotenv

from src.itinerary_search.schemas.route import (
    DOMESTIC_MAX_STOPS,
    INTERNATIONAL_MAX_STOPS,
    MAX_LAYOVER_MINUTES,
    MIN_DOMESTIC_LAYOVER_MINUTES,
    MIN_INTERNATIONAL_LAYOVER_MINUTES,
    LayoverRules,
)
from src.itinerary_search.schemas.search import WindowStrategy

DEFAULT_DATA_FILE = "data/flights.json"
DEFAULT_CORS_ORIGINS = ("http://localhost:3000", "http://127.0.0.1:3000")


def _int_setting(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _float_setting(env: Mapping[str, str], name: str) -> Optional[float]:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be > 0, got {value}")
    return value


@dataclass(frozen=True)
class SearchSettings:
    """
    Application settings.

    Attributes:
        data_file: JSON dataset path.
        layover_rules: Connection thresholds.
        domestic_max_stops: Stop ceiling for domestic routes.
        international_max_stops: Stop ceiling for international routes.
        window_strategy: How the traversal queries onward flights.
        search_timeout_seconds: Per-search deadline (None = no deadline).
        cors_origins: Origins allowed by the HTTP layer.
    """

    data_file: Path = Path(DEFAULT_DATA_FILE)
    layover_rules: LayoverRules = field(default_factory=LayoverRules)
    domestic_max_stops: int = DOMESTIC_MAX_STOPS
    international_max_stops: int = INTERNATIONAL_MAX_STOPS
    window_strategy: WindowStrategy = WindowStrategy.LOCAL_DATE
    search_timeout_seconds: Optional[float] = None
    cors_origins: Tuple[str, ...] = DEFAULT_CORS_ORIGINS

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.domestic_max_stops < 0:
            raise ValueError(f"domestic_max_stops must be >= 0, got {self.domestic_max_stops}")
        if self.international_max_stops < 0:
            raise ValueError(
                f"international_max_stops must be >= 0, got {self.international_max_stops}"
            )

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "SearchSettings":
        """
        Build settings from environment variables.

        Reads a .env file first when ``env`` is not given.

        Args:
            env: Mapping to read instead of ``os.environ`` (for tests).

        Returns:
            Validated SearchSettings.

        Raises:
            ValueError: If a variable holds an invalid value.
        """
        if env is None:
            load_dotenv()
            env = os.environ

        strategy_raw = env.get("ITINERARY_WINDOW_STRATEGY", WindowStrategy.LOCAL_DATE.value)
        try:
            strategy = WindowStrategy(strategy_raw.strip().lower())
        except ValueError:
            choices = ", ".join(s.value for s in WindowStrategy)
            raise ValueError(
                f"ITINERARY_WINDOW_STRATEGY must be one of {choices}, got {strategy_raw!r}"
            ) from None

        cors_raw = env.get("ITINERARY_CORS_ORIGINS")
        cors_origins = (
            tuple(o.strip() for o in cors_raw.split(",") if o.strip())
            if cors_raw
            else DEFAULT_CORS_ORIGINS
        )

        return cls(
            data_file=Path(env.get("ITINERARY_DATA_FILE", DEFAULT_DATA_FILE)),
            layover_rules=LayoverRules(
                min_domestic_minutes=_int_setting(
                    env, "ITINERARY_MIN_DOMESTIC_LAYOVER", MIN_DOMESTIC_LAYOVER_MINUTES
                ),
                min_international_minutes=_int_setting(
                    env,
                    "ITINERARY_MIN_INTERNATIONAL_LAYOVER",
                    MIN_INTERNATIONAL_LAYOVER_MINUTES,
                ),
                max_minutes=_int_setting(env, "ITINERARY_MAX_LAYOVER", MAX_LAYOVER_MINUTES),
            ),
            domestic_max_stops=_int_setting(
                env, "ITINERARY_DOMESTIC_MAX_STOPS", DOMESTIC_MAX_STOPS
            ),
            international_max_stops=_int_setting(
                env, "ITINERARY_INTERNATIONAL_MAX_STOPS", INTERNATIONAL_MAX_STOPS
            ),
            window_strategy=strategy,
            search_timeout_seconds=_float_setting(env, "ITINERARY_SEARCH_TIMEOUT_SECONDS"),
            cors_origins=cors_origins,
        )
