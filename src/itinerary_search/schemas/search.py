"""
Search execution schemas: query-window strategy and cancellation.
"""

import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from src.itinerary_search.exceptions import SearchCancelledError


class WindowStrategy(Enum):
    """
    How the traversal asks the directory for onward flights.

    Exactly one strategy is used for a whole traversal.
    """

    LOCAL_DATE = "local_date"
    """Query by local departure date (arrival day through next day)."""

    INSTANT_WINDOW = "instant_window"
    """Query by UTC instant window derived from the previous arrival."""


@dataclass(frozen=True)
class SearchCancellation:
    """
    Cancellation signal threaded through a traversal.

    Combines an externally settable event (e.g. client disconnect) with an
    optional monotonic deadline (request timeout).

    Attributes:
        event: Set to request cancellation.
        deadline: ``time.monotonic()`` value after which the search aborts.
    """

    event: threading.Event = field(default_factory=threading.Event)
    deadline: Optional[float] = None

    @classmethod
    def with_timeout(cls, seconds: Optional[float]) -> "SearchCancellation":
        """Create a cancellation that expires ``seconds`` from now."""
        if seconds is None:
            return cls()
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self) -> None:
        """Request cancellation."""
        self.event.set()

    @property
    def is_cancelled(self) -> bool:
        if self.event.is_set():
            return True
        return self.deadline is not None and time.monotonic() >= self.deadline

    def raise_if_cancelled(self) -> None:
        """
        Abort the current search if cancelled or past the deadline.

        Raises:
            SearchCancelledError: If cancellation was requested or the
                deadline has passed.
        """
        if self.event.is_set():
            raise SearchCancelledError("Search was cancelled")
        if self.deadline is not None and time.monotonic() >= self.deadline:
            raise SearchCancelledError("Search exceeded its deadline")
