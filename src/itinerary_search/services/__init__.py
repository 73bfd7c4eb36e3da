"""
Domain services for the itinerary search engine.

Services hold the domain rules (time normalization, connection legality,
route classification, itinerary assembly) and orchestrate the ports.
"""

from src.itinerary_search.services.connection_validator import ConnectionValidator
from src.itinerary_search.services.itinerary_assembler import ItineraryAssembler
from src.itinerary_search.services.itinerary_search_service import ItinerarySearchService
from src.itinerary_search.services.route_classifier import RouteClassifier
from src.itinerary_search.services.time_normalizer import TimeNormalizer

__all__ = [
    "ConnectionValidator",
    "ItineraryAssembler",
    "ItinerarySearchService",
    "RouteClassifier",
    "TimeNormalizer",
]
