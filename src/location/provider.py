"""
Device location: permission state plus a one-shot coordinate fix.

Permission changes are delivered through futures rather than a registered
delegate: `request_authorization()` suspends until the next change arrives via
`update_authorization()`, which may be called from any thread.
"""

import asyncio
import logging
from enum import Enum
from typing import Callable, List, Optional

from src.data.schema import Coordinate
from src.location.errors import DecodeError, LocationError, LocationErrorKind, SourceError
from src.location.http import DEFAULT_TIMEOUT, get_json

logger = logging.getLogger(__name__)

IPAPI_URL = "https://ipapi.co/json/"


class AuthorizationStatus(str, Enum):
    NOT_DETERMINED = "not_determined"
    AUTHORIZED = "authorized"
    DENIED = "denied"
    RESTRICTED = "restricted"


class LocationProvider:
    """
    Base location provider.

    Subclasses implement `_locate()` to produce a coordinate and may override
    `_prompt()` to ask for permission; the answer is delivered back through
    `update_authorization()`.
    """

    def __init__(self, status: AuthorizationStatus = AuthorizationStatus.NOT_DETERMINED):
        self._status = status
        self._waiters: List[asyncio.Future] = []

    @property
    def authorization_status(self) -> AuthorizationStatus:
        return self._status

    async def request_authorization(self) -> AuthorizationStatus:
        """
        Ask for location permission if it is still undetermined.

        Returns the current status immediately when already decided,
        otherwise suspends until exactly one permission change arrives.
        """
        if self._status is not AuthorizationStatus.NOT_DETERMINED:
            return self._status

        waiter = asyncio.get_running_loop().create_future()
        # Overlapping requests share the prompt already on screen
        prompt_pending = bool(self._waiters)
        self._waiters.append(waiter)
        if not prompt_pending:
            self._prompt()
        try:
            return await waiter
        finally:
            if waiter in self._waiters:
                self._waiters.remove(waiter)

    def update_authorization(self, status: AuthorizationStatus) -> None:
        """Deliver a permission change and wake every pending request once."""
        previous, self._status = self._status, status
        logger.info("Location authorization changed: %s -> %s", previous.value, status.value)
        if status is AuthorizationStatus.NOT_DETERMINED:
            return

        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            waiter.get_loop().call_soon_threadsafe(_resolve, waiter, status)

    async def request_one_shot_fix(self) -> Coordinate:
        """
        Produce a single coordinate fix.

        Raises:
            LocationError: PERMISSION_DENIED unless authorized, UNAVAILABLE
                when the fix itself fails.
        """
        if self._status is not AuthorizationStatus.AUTHORIZED:
            raise LocationError(
                LocationErrorKind.PERMISSION_DENIED,
                f"location permission is {self._status.value}",
            )
        try:
            return await self._locate()
        except LocationError:
            raise
        except (SourceError, ValueError) as e:
            raise LocationError(LocationErrorKind.UNAVAILABLE, str(e)) from e

    def _prompt(self) -> None:
        """Hook: start a permission prompt. The default waits for an external update."""

    async def _locate(self) -> Coordinate:
        raise NotImplementedError


def _resolve(waiter: asyncio.Future, status: AuthorizationStatus) -> None:
    if not waiter.done():
        waiter.set_result(status)


class IPLocationProvider(LocationProvider):
    """
    Approximate device location from the public IP address.

    Consent comes from configuration (True/False) or, when undecided, from an
    optional blocking `prompt` callable that is run on a worker thread.
    """

    source = "ip-location"

    def __init__(
        self,
        consent: Optional[bool] = None,
        prompt: Optional[Callable[[], bool]] = None,
        base_url: str = IPAPI_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        if consent is None:
            status = AuthorizationStatus.NOT_DETERMINED
        elif consent:
            status = AuthorizationStatus.AUTHORIZED
        else:
            status = AuthorizationStatus.DENIED
        super().__init__(status)
        self.prompt = prompt
        self.base_url = base_url
        self.timeout = timeout

    def _prompt(self) -> None:
        if self.prompt is None:
            return
        asyncio.get_running_loop().run_in_executor(None, self._ask)

    def _ask(self) -> None:
        try:
            granted = bool(self.prompt())
        except (KeyboardInterrupt, Exception) as e:
            logger.warning("Location prompt failed: %s", e)
            granted = False
        self.update_authorization(
            AuthorizationStatus.AUTHORIZED if granted else AuthorizationStatus.DENIED
        )

    async def _locate(self) -> Coordinate:
        data = await asyncio.to_thread(
            get_json, self.source, self.base_url, timeout=self.timeout,
        )
        if not isinstance(data, dict):
            raise DecodeError(self.source, "expected a JSON object")
        if data.get("error"):
            raise LocationError(
                LocationErrorKind.UNAVAILABLE,
                str(data.get("reason") or "IP lookup failed"),
            )
        try:
            coordinate = Coordinate(float(data["latitude"]), float(data["longitude"]))
        except (KeyError, TypeError) as e:
            raise DecodeError(self.source, f"missing coordinates: {e}") from e
        logger.info("IP location fix: %.4f, %.4f", coordinate.latitude, coordinate.longitude)
        return coordinate
