"""
Application layer for the itinerary search engine.

This layer provides the public API for the engine. It acts as a facade,
handling dependency initialization and providing a simple interface for
consumers.
"""

from src.itinerary_search.application.search_itineraries import SearchItineraries

__all__ = ["SearchItineraries"]
