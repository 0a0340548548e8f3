"""
Error taxonomy for the remote data sources and the location provider.
"""

from enum import Enum


class SourceError(RuntimeError):
    """Base error for a remote data source."""

    def __init__(self, source: str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source
        self.message = message


class TransportError(SourceError):
    """Network unreachable, timeout, or non-success HTTP status."""


class DecodeError(SourceError):
    """Payload was not valid JSON or did not have the expected shape."""


class EmptyResultError(SourceError):
    """Payload was well-formed but carried no data."""


class LocationErrorKind(str, Enum):
    PERMISSION_DENIED = "permission_denied"
    UNAVAILABLE = "unavailable"


class LocationError(RuntimeError):
    """Raised when a one-shot location fix cannot be produced."""

    def __init__(self, kind: LocationErrorKind, message: str = ""):
        super().__init__(message or kind.value)
        self.kind = kind
