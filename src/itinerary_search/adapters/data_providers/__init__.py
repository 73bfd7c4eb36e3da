"""
Data provider adapters for loading flight datasets.
"""

from src.itinerary_search.adapters.data_providers.json_provider import (
    JsonFlightDataProvider,
)

__all__ = ["JsonFlightDataProvider"]
