"""
FastAPI presentation surface for the Breeze dashboard.

A single dashboard session per process: every endpoint calls one of the
orchestrator's public operations and returns the resulting view state.

Endpoints:
    GET  /health               — Health check
    GET  /state                — Current dashboard state
    POST /search               — Update the search text (debounced city search)
    POST /select               — Show a place from search results or /cities
    POST /refresh              — Show an arbitrary coordinate
    POST /current-location     — Show the device location
    POST /location-permission  — Deliver the user's location permission answer
    GET  /cities               — Static catalog of well-known cities
    GET  /ticker               — Current US AQI for every catalog city
"""

import asyncio
import logging
from typing import List, Optional, Set

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from src.api.schemas import (
    CoordinateModel,
    DashboardStateResponse,
    HealthResponse,
    PlaceModel,
    SearchRequest,
    TickerEntryModel,
    place_model,
    state_response,
    ticker_model,
)
from src.dashboard.config import DashboardConfig, build_orchestrator
from src.dashboard.orchestrator import DashboardOrchestrator
from src.data.schema import TOP_CITIES, Coordinate, Place
from src.location.provider import AuthorizationStatus

logger = logging.getLogger(__name__)

# ---- App setup ----
app = FastAPI(
    title="Breeze Dashboard API",
    description="Air quality, pollen and climate history for any place",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---- Session references ----
config: DashboardConfig = None
orchestrator: DashboardOrchestrator = None
api_version: str = "1.0.0"

# Location requests waiting on a permission answer
_pending: Set[asyncio.Task] = set()


class PermissionRequest(BaseModel):
    """Input schema for /location-permission."""
    granted: bool


def get_orchestrator() -> DashboardOrchestrator:
    global config, orchestrator
    if config is None:
        config = DashboardConfig.from_env()
    if orchestrator is None:
        orchestrator = build_orchestrator(config)
        logger.info("Dashboard session created")
    return orchestrator


def _fahrenheit() -> bool:
    return config.use_fahrenheit if config is not None else True


def _current_state() -> DashboardStateResponse:
    return state_response(get_orchestrator().state, fahrenheit=_fahrenheit())


@app.on_event("shutdown")
async def shutdown_event():
    if orchestrator is not None:
        await orchestrator.close()


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(status="healthy", version=api_version)


@app.get("/state", response_model=DashboardStateResponse)
async def get_state():
    return _current_state()


@app.post("/search", response_model=DashboardStateResponse)
async def search(request: SearchRequest):
    """
    Update the search text. Results arrive after the debounce interval;
    poll /state to read them.
    """
    get_orchestrator().set_search_query(request.query)
    return _current_state()


@app.post("/select", response_model=DashboardStateResponse)
async def select(request: PlaceModel):
    """Select a place and wait for its air quality."""
    try:
        place = Place(
            id=request.id,
            name=request.name,
            country=request.country,
            region=request.region,
            coordinate=Coordinate(request.coordinate.latitude, request.coordinate.longitude),
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    await get_orchestrator().select_place(place)
    return _current_state()


@app.post("/refresh", response_model=DashboardStateResponse)
async def refresh(request: CoordinateModel):
    """Show an arbitrary coordinate and wait for its air quality."""
    try:
        coordinate = Coordinate(request.latitude, request.longitude)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    await get_orchestrator().refresh_location(coordinate)
    return _current_state()


@app.post("/current-location", response_model=DashboardStateResponse)
async def current_location():
    """
    Show the device location.

    When permission is still undetermined the request returns immediately
    with `is_locating` set; answer via /location-permission and poll /state.
    """
    orch = get_orchestrator()
    if orch.location_provider.authorization_status is AuthorizationStatus.NOT_DETERMINED:
        task = asyncio.create_task(orch.use_current_location())
        _pending.add(task)
        task.add_done_callback(_pending.discard)
        # Let the task register its permission request before answering
        await asyncio.sleep(0)
    else:
        await orch.use_current_location()
    return _current_state()


@app.post("/location-permission", response_model=DashboardStateResponse)
async def location_permission(request: PermissionRequest):
    status = AuthorizationStatus.AUTHORIZED if request.granted else AuthorizationStatus.DENIED
    get_orchestrator().location_provider.update_authorization(status)
    return _current_state()


@app.get("/cities", response_model=List[PlaceModel])
async def cities():
    return [place_model(p) for p in TOP_CITIES]


@app.get("/ticker", response_model=List[TickerEntryModel])
async def ticker(limit: Optional[int] = Query(None, ge=1, description="Number of catalog cities")):
    entries = await get_orchestrator().load_city_ticker(TOP_CITIES[:limit] if limit else None)
    return [ticker_model(e) for e in entries]


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    uvicorn.run(app, host="0.0.0.0", port=8000)
