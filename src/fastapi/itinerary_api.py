import asyncio
import logging
from datetime import datetime
from typing import List, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# Load environment variables from .env file
load_dotenv()

from src.itinerary_search.application import SearchItineraries
from src.itinerary_search.config import SearchSettings
from src.itinerary_search.exceptions import InvalidSearchError, SearchCancelledError
from src.itinerary_search.schemas.search import SearchCancellation

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Seconds between client-disconnect checks while a search runs
DISCONNECT_POLL_SECONDS = 0.25

settings = SearchSettings.from_env()
# Dataset loads on the first request
engine = SearchItineraries(settings=settings)

app = FastAPI(title="Itinerary Search API")

# Enable CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Pydantic Schemas (The JSON Contract) ---
# Read straight from the frozen dataclasses, serialized in camelCase.


class CamelModel(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class AirportSchema(CamelModel):
    code: str
    name: str
    city: str
    country: str
    timezone: str


class FlightSegmentSchema(CamelModel):
    flight_number: str
    airline: str
    origin_code: str
    origin_name: str
    origin_city: str
    destination_code: str
    destination_name: str
    destination_city: str
    departure_time: str
    arrival_time: str
    duration_minutes: int
    aircraft: str
    price: float


class LayoverSchema(CamelModel):
    airport_code: str
    airport_name: str
    airport_city: str
    duration_minutes: int
    type: str


class ItinerarySchema(CamelModel):
    segments: List[FlightSegmentSchema]
    layovers: List[LayoverSchema]
    stops: int
    total_duration_minutes: int
    total_price: float


class SearchResponse(CamelModel):
    origin: str
    destination: str
    date: str
    result_count: int
    itineraries: List[ItinerarySchema]


class ErrorResponse(BaseModel):
    status: int
    error: str
    message: str
    timestamp: str


def error_response(status: int, error: str, message: str) -> JSONResponse:
    body = ErrorResponse(
        status=status,
        error=error,
        message=message,
        timestamp=datetime.now().isoformat(timespec="seconds"),
    )
    return JSONResponse(status_code=status, content=body.model_dump())


# --- Error Handlers ---


@app.exception_handler(InvalidSearchError)
async def handle_invalid_search(request: Request, exc: InvalidSearchError):
    logger.warning("Invalid search: %s", exc.message)
    return error_response(400, "Bad Request", exc.message)


@app.exception_handler(SearchCancelledError)
async def handle_search_cancelled(request: Request, exc: SearchCancelledError):
    logger.warning("Search cancelled: %s", exc.message)
    return error_response(503, "Service Unavailable", exc.message)


@app.exception_handler(Exception)
async def handle_unexpected(request: Request, exc: Exception):
    logger.error("Unexpected error", exc_info=exc)
    return error_response(
        500,
        "Internal Server Error",
        "An unexpected error occurred. Please try again later.",
    )


# --- API Endpoints ---


@app.get("/api/flights/search", response_model=SearchResponse)
@app.get("/search", response_model=SearchResponse, include_in_schema=False)
async def search_flights(
    request: Request,
    origin: Optional[str] = None,
    destination: Optional[str] = None,
    date: Optional[str] = None,
):
    """
    Search for itineraries between two airports on a local date.

    Validation and search both run in the default executor; the first
    request also builds the flight directory there. A client disconnect
    cancels the running search.

    Args:
        origin: Origin IATA code (e.g., "JFK"); trimmed and upper-cased.
        destination: Destination IATA code (e.g., "LAX").
        date: Departure date, YYYY-MM-DD.

    Returns:
        SearchResponse with itineraries sorted by total duration.
    """
    cancellation = SearchCancellation.with_timeout(engine.settings.search_timeout_seconds)

    def run_search():
        origin_code, destination_code, search_date = engine.validate_request(
            origin or "", destination or "", date or ""
        )
        itineraries = engine.search_validated(
            origin_code, destination_code, search_date, cancellation=cancellation
        )
        return origin_code, destination_code, search_date, itineraries

    loop = asyncio.get_running_loop()
    future = loop.run_in_executor(None, run_search)
    await _watch_disconnect(request, future, cancellation)
    origin_code, destination_code, search_date, itineraries = await future

    return SearchResponse(
        origin=origin_code,
        destination=destination_code,
        date=search_date.isoformat(),
        result_count=len(itineraries),
        itineraries=[ItinerarySchema.model_validate(it) for it in itineraries],
    )


async def _watch_disconnect(
    request: Request,
    future: asyncio.Future,
    cancellation: SearchCancellation,
) -> None:
    """Wait for ``future``, cancelling the search if the client goes away."""
    while not future.done():
        done, _ = await asyncio.wait({future}, timeout=DISCONNECT_POLL_SECONDS)
        if not done and await request.is_disconnected():
            logger.info("Client disconnected, cancelling search")
            cancellation.cancel()
            return


@app.get("/api/airports", response_model=List[AirportSchema])
@app.get("/airports", response_model=List[AirportSchema], include_in_schema=False)
async def get_airports():
    """All airports in the loaded dataset (used for autocomplete)."""
    return engine.get_airports()
