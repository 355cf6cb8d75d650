"""
URL paths of the Yamaha Extended Control API.
"""

from enum import Enum
from typing import Any, Optional

DEFAULT_API_PREFIX = "/YamahaExtendedControl/v1"

# Zone-scoped endpoints, keyed by the name used in the rest of the bridge
ZONE_ENDPOINTS = {
    "volume": "setVolume",
    "status": "getStatus",
    "power": "setPower",
    "mute": "setMute",
}

FEATURES_PATH = "system/getFeatures"
PLAY_INFO_PATH = "netusb/getPlayInfo"
SET_PLAYBACK_PATH = "netusb/setPlayback"

# Query parameters forwarded to the receiver, in URL order
QUERY_KEYS = ("volume", "power", "mute", "enable", "playback")


def zone_path(zone: str, endpoint: str, prefix: str = DEFAULT_API_PREFIX) -> str:
    """
    Build the path of a zone endpoint.

    Args:
        zone: Zone name (main, zone2, ...)
        endpoint: One of the keys of ZONE_ENDPOINTS

    Returns:
        Path like "/YamahaExtendedControl/v1/main/setVolume"
    """
    try:
        method = ZONE_ENDPOINTS[endpoint]
    except KeyError:
        raise ValueError(f"Unknown zone endpoint: {endpoint}") from None
    return f"{prefix.rstrip('/')}/{zone}/{method}"


def api_path(path: str, prefix: str = DEFAULT_API_PREFIX) -> str:
    """Build the path of a non-zone endpoint such as netusb/getPlayInfo."""
    return f"{prefix.rstrip('/')}/{path.lstrip('/')}"


def build_query(data: Optional[dict[str, Any]]) -> dict[str, str]:
    """
    Select the request parameters the receiver understands.

    Unknown keys and None values are dropped; booleans become "true"/"false".
    """
    if not data:
        return {}

    params: dict[str, str] = {}
    for key in QUERY_KEYS:
        value = data.get(key)
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        elif isinstance(value, Enum):
            value = value.value
        params[key] = str(value)
    return params
