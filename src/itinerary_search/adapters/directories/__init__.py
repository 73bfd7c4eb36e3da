"""
Flight directory adapters.
"""

from src.itinerary_search.adapters.directories.in_memory_directory import (
    DirectorySnapshot,
    InMemoryFlightDirectory,
    build_snapshot,
)

__all__ = [
    "DirectorySnapshot",
    "InMemoryFlightDirectory",
    "build_snapshot",
]
