"""
Dashboard orchestrator: turns a location into a consolidated view of air
quality, pollen and climate history.

Sources and their failure policy:
    air quality  — primary signal; awaited, failure is user visible
    pollen       — enrichment; background task, failure degrades to empty
    climate      — enrichment; background task, failure degrades to empty
    geocoding    — search-as-you-type, debounced; failure reads as no results
    reverse geo  — best-effort place name for the device location

All state lives in one immutable ViewState that only this class replaces,
always from the event loop thread. Results of a superseded location are
dropped by comparing against the active LocationToken.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterable, List, Optional, Set

from src.data.schema import TOP_CITIES, Coordinate, Place
from src.dashboard.state import (
    ErrorInfo,
    ErrorKind,
    LoadStatus,
    SearchStatus,
    TickerEntry,
    ViewState,
    error_from_exception,
)
from src.location.errors import LocationError, LocationErrorKind
from src.location.provider import AuthorizationStatus, LocationProvider
from src.location.resolver import MIN_QUERY_LENGTH

logger = logging.getLogger(__name__)

SEARCH_DEBOUNCE_SECONDS = 0.3

CURRENT_LOCATION_NAME = "Your Location"
AIR_QUALITY_ERROR = "Unable to fetch air quality data."
LOCATION_DENIED_ERROR = "Location access denied. Please enable location access in your settings."
LOCATION_UNAVAILABLE_ERROR = "Unable to get your location."

Listener = Callable[[ViewState], None]


@dataclass(frozen=True)
class LocationToken:
    """Identity of one location load; results carrying an older token are stale."""
    sequence: int
    coordinate: Coordinate


async def _call(func: Callable, *args: Any) -> Any:
    """Await coroutine clients directly; run blocking clients on a worker thread."""
    if inspect.iscoroutinefunction(func):
        return await func(*args)
    return await asyncio.to_thread(func, *args)


def format_coordinate(coordinate: Coordinate) -> str:
    return f"{coordinate.latitude:.4f}, {coordinate.longitude:.4f}"


class DashboardOrchestrator:
    """
    Owns dashboard state and coordinates every remote call.

    Usage:
        orchestrator = build_orchestrator()
        orchestrator.subscribe(render)
        await orchestrator.select_place(place)

    Must be used from within a running asyncio event loop.
    """

    def __init__(
        self,
        geocoder,
        air_quality,
        pollen,
        climate,
        location_provider: LocationProvider,
        reverse_geocoder=None,
        search_debounce: float = SEARCH_DEBOUNCE_SECONDS,
    ):
        self._geocoder = geocoder
        self._air_quality = air_quality
        self._pollen = pollen
        self._climate = climate
        self._location_provider = location_provider
        self._reverse_geocoder = reverse_geocoder
        self._search_debounce = search_debounce

        self._state = ViewState()
        self._listeners: List[Listener] = []

        self._search_task: Optional[asyncio.Task] = None
        self._search_generation = 0

        self._token_sequence = 0
        self._active_token: Optional[LocationToken] = None
        self._background: Set[asyncio.Task] = set()

    # ---- Observation ----

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def location_provider(self) -> LocationProvider:
        return self._location_provider

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener for every new state; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _update(self, **changes: Any) -> None:
        self._state = replace(self._state, **changes)
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.exception("View state listener failed")

    # ---- Search ----

    def set_search_query(self, text: str) -> None:
        """
        Update the search text and schedule a debounced city search.

        Queries shorter than 2 characters clear the results immediately and
        never reach the network. Any pending search is superseded.
        """
        self._cancel_search()
        self._search_generation += 1

        if len(text) < MIN_QUERY_LENGTH:
            self._update(
                search_query=text,
                search_results=(),
                search_status=SearchStatus.IDLE,
            )
            return

        self._update(search_query=text, search_status=SearchStatus.SEARCHING)
        self._search_task = asyncio.create_task(
            self._run_search(text, self._search_generation)
        )

    async def _run_search(self, query: str, generation: int) -> None:
        await asyncio.sleep(self._search_debounce)
        if generation != self._search_generation:
            logger.debug("Search for '%s' superseded before request", query)
            return

        try:
            places = await _call(self._geocoder.search, query)
        except Exception as e:
            logger.warning("City search for '%s' failed: %s", query, e)
            places = []

        if generation != self._search_generation:
            logger.debug("Discarding stale search results for '%s'", query)
            return
        self._update(
            search_results=tuple(places),
            search_status=SearchStatus.RESULTS_SHOWN,
        )

    def _cancel_search(self) -> None:
        if self._search_task is not None and not self._search_task.done():
            self._search_task.cancel()
        self._search_task = None

    def _clear_search(self) -> None:
        self._cancel_search()
        self._search_generation += 1
        self._update(
            search_query="",
            search_results=(),
            search_status=SearchStatus.IDLE,
        )

    # ---- Location changes ----

    async def select_place(self, place: Place) -> Optional[LoadStatus]:
        """Show a place picked from search results or the city catalog."""
        self._clear_search()
        self._update(place=place, location_name=place.display_name)
        return await self._load(place.coordinate)

    async def refresh_location(self, coordinate: Coordinate) -> Optional[LoadStatus]:
        """
        Load all data for a coordinate.

        Awaits the air quality fetch; pollen and climate continue in the
        background and land in the state whenever they finish.

        Returns:
            LOADED or LOAD_FAILED for this request, or None if a newer
            location superseded it before air quality arrived.
        """
        current = self._state.place
        if current is None or current.coordinate != coordinate:
            self._update(place=None, location_name=format_coordinate(coordinate))
        return await self._load(coordinate)

    async def use_current_location(self) -> Optional[LoadStatus]:
        """
        Load data for the device location.

        Asks for permission when undetermined. Denial leaves the load status
        untouched and reports a permission error instead. Returns None without
        touching the view if another location was requested while waiting for
        permission or the fix.
        """
        provider = self._location_provider
        sequence = self._token_sequence
        self._update(is_locating=True, error=None)
        try:
            status = provider.authorization_status
            if status is AuthorizationStatus.NOT_DETERMINED:
                status = await provider.request_authorization()
                if self._token_sequence != sequence:
                    logger.debug("Device location superseded while awaiting permission")
                    return None

            if status in (AuthorizationStatus.DENIED, AuthorizationStatus.RESTRICTED):
                logger.info("Location permission %s", status.value)
                self._update(error=ErrorInfo(ErrorKind.PERMISSION, LOCATION_DENIED_ERROR))
                return None

            try:
                coordinate = await provider.request_one_shot_fix()
            except LocationError as e:
                if self._token_sequence != sequence:
                    logger.debug("Ignoring location fix failure for superseded request: %s", e)
                    return None
                logger.warning("Location fix failed: %s", e)
                if e.kind is LocationErrorKind.PERMISSION_DENIED:
                    error = ErrorInfo(ErrorKind.PERMISSION, LOCATION_DENIED_ERROR)
                else:
                    error = ErrorInfo(ErrorKind.UNAVAILABLE, LOCATION_UNAVAILABLE_ERROR)
                self._update(error=error)
                return None

            if self._token_sequence != sequence:
                logger.debug("Discarding device location fix for superseded request")
                return None
        finally:
            self._update(is_locating=False)

        self._update(place=None, location_name=CURRENT_LOCATION_NAME)
        return await self._load(coordinate, resolve_name=True)

    async def _load(self, coordinate: Coordinate, resolve_name: bool = False) -> Optional[LoadStatus]:
        self._token_sequence += 1
        token = LocationToken(self._token_sequence, coordinate)
        self._active_token = token

        logger.info("Loading dashboard for %s", format_coordinate(coordinate))
        self._update(
            coordinate=coordinate,
            status=LoadStatus.LOADING,
            is_locating=False,
            error=None,
            air_quality=None,
            pollen=(),
            climate=(),
            source_errors={},
        )

        self._spawn(self._load_enrichment("pollen", self._pollen.fetch, token))
        self._spawn(self._load_enrichment("climate", self._climate.fetch, token))
        if resolve_name and self._reverse_geocoder is not None:
            self._spawn(self._resolve_location_name(token))

        try:
            sample = await _call(self._air_quality.fetch, coordinate)
        except Exception as e:
            if not self._is_current(token):
                logger.debug("Ignoring air quality failure for superseded location: %s", e)
                return None
            logger.warning("Air quality fetch failed: %s", e)
            self._update(
                status=LoadStatus.LOAD_FAILED,
                error=error_from_exception(e, AIR_QUALITY_ERROR, source="air-quality"),
            )
            return LoadStatus.LOAD_FAILED

        if not self._is_current(token):
            logger.debug("Discarding air quality for superseded location")
            return None
        self._update(air_quality=sample, status=LoadStatus.LOADED)
        return LoadStatus.LOADED

    async def _load_enrichment(self, field_name: str, fetch: Callable, token: LocationToken) -> None:
        try:
            result = await _call(fetch, token.coordinate)
        except Exception as e:
            if not self._is_current(token):
                return
            logger.warning("%s fetch failed: %s", field_name.capitalize(), e)
            errors = dict(self._state.source_errors)
            errors[field_name] = str(e)
            self._update(**{field_name: (), "source_errors": errors})
            return

        if not self._is_current(token):
            logger.debug("Discarding %s data for superseded location", field_name)
            return
        self._update(**{field_name: tuple(result)})

    async def _resolve_location_name(self, token: LocationToken) -> None:
        try:
            name = await _call(self._reverse_geocoder.lookup, token.coordinate)
        except Exception as e:
            logger.warning("Reverse geocoding failed: %s", e)
            return
        if name and self._is_current(token):
            self._update(location_name=name)

    def _is_current(self, token: LocationToken) -> bool:
        return token == self._active_token

    # ---- City ticker ----

    async def load_city_ticker(self, cities: Optional[Iterable[Place]] = None) -> List[TickerEntry]:
        """Fetch the current US AQI for each catalog city in one request."""
        cities = list(cities) if cities is not None else list(TOP_CITIES)
        try:
            values = await _call(self._air_quality.fetch_many, [c.coordinate for c in cities])
        except Exception as e:
            logger.warning("City ticker fetch failed: %s", e)
            values = []
        values = list(values) + [None] * (len(cities) - len(values))

        ticker = [TickerEntry(place=city, us_aqi=aqi) for city, aqi in zip(cities, values)]
        self._update(ticker=tuple(ticker))
        return ticker

    # ---- Background tasks ----

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def wait_for_background(self) -> None:
        """Wait until every pending enrichment and lookup task has finished."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    async def close(self) -> None:
        """Cancel pending search and background work."""
        self._cancel_search()
        tasks = list(self._background)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
