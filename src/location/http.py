"""
Shared JSON-over-HTTP helper for the data clients.

Maps every requests failure onto the source error taxonomy so callers only
deal with TransportError and DecodeError.
"""

import logging
from typing import Any, Dict, Optional

import requests

from src.location.errors import DecodeError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


def get_json(
    source: str,
    url: str,
    params: Optional[Any] = None,
    timeout: float = DEFAULT_TIMEOUT,
    headers: Optional[Dict[str, str]] = None,
) -> Any:
    """
    GET a URL and decode the JSON body.

    Args:
        source: Source name used in errors and log lines
        url: Endpoint URL
        params: Query parameters (dict or list of pairs)
        timeout: Request timeout in seconds
        headers: Extra request headers

    Returns:
        The decoded JSON document.

    Raises:
        TransportError: On connection failure, timeout, or HTTP error status.
        DecodeError: If the body is not valid JSON.
    """
    try:
        resp = requests.get(url, params=params, timeout=timeout, headers=headers)
        resp.raise_for_status()
    except requests.exceptions.RequestException as e:
        logger.warning("%s request failed: %s", source, e)
        raise TransportError(source, str(e)) from e

    try:
        return resp.json()
    except ValueError as e:
        logger.warning("%s returned invalid JSON: %s", source, e)
        raise DecodeError(source, "invalid JSON payload") from e


def require_float(source: str, data: Dict, key: str) -> float:
    """Read a numeric field from a payload dict or raise DecodeError."""
    value = data.get(key)
    if value is None or isinstance(value, bool):
        raise DecodeError(source, f"missing field '{key}'")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise DecodeError(source, f"field '{key}' is not numeric: {value!r}") from e
