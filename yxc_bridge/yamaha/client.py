"""
Yamaha Extended Control (YXC) client.

Issues plain HTTP GET requests with query-string parameters against the
receiver and parses the JSON responses. Every request is bounded by a
fixed timeout; there is no retry.
"""

import json
import logging
from typing import Any, Optional

import httpx

from ..config import YamahaConfig
from ..errors import YamahaApiError, YamahaRequestError, YamahaTimeoutError
from ..models import PowerState, Speaker, VolumeRange, YamahaResponse, ZoneStatus
from . import endpoints

logger = logging.getLogger("yxc.bridge.yamaha.client")


class YamahaClient:
    """
    Async client for the YXC HTTP API.

    Provides:
    - Raw GET requests with the receiver's query parameters
    - Zone status, volume, power and mute control
    - Network/USB playback control
    - Volume range discovery from system features
    """

    def __init__(
        self,
        timeout: float = 5.0,
        user_agent: str = "Flic-Hub-Studio/1.0",
        api_prefix: str = endpoints.DEFAULT_API_PREFIX,
        default_ranges: Optional[dict[str, VolumeRange]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            timeout: Per-request timeout in seconds
            user_agent: User-Agent header value
            api_prefix: YXC path prefix
            default_ranges: Volume ranges returned when discovery fails
            transport: Optional httpx transport (used by tests)
        """
        self.timeout = timeout
        self.user_agent = user_agent
        self.api_prefix = api_prefix
        if default_ranges is None:
            fallback = YamahaConfig()
            default_ranges = {
                zone: VolumeRange(min=fallback.default_volume_min, max=fallback.default_volume_max)
                for zone in ("main", "zone2")
            }
        self.default_ranges = default_ranges
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def connect(self) -> None:
        """Create the underlying HTTP client."""
        if self._client is not None:
            return

        self._client = httpx.AsyncClient(
            headers={
                "Content-Type": "application/x-www-form-urlencoded",
                "User-Agent": self.user_agent,
            },
            timeout=self.timeout,
            transport=self._transport,
        )
        logger.debug("HTTP client ready (timeout=%.1fs)", self.timeout)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "YamahaClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # ---------- raw requests ----------

    async def request(
        self,
        ip: str,
        path: str,
        data: Optional[dict[str, Any]] = None,
    ) -> YamahaResponse:
        """
        Send a GET request to a receiver.

        Args:
            ip: Receiver network address
            path: Absolute API path
            data: Request data; only volume, power, mute, enable and
                playback are forwarded as query parameters

        Returns:
            YamahaResponse with status, body and headers

        Raises:
            YamahaTimeoutError: No answer within the timeout
            YamahaRequestError: Transport failure or HTTP error status
            YamahaApiError: JSON body with a non-zero response_code
        """
        if self._client is None:
            await self.connect()

        url = f"http://{ip}{path}"
        params = endpoints.build_query(data)
        logger.debug("GET %s %s", url, params)

        try:
            resp = await self._client.get(url, params=params)
        except httpx.TimeoutException as e:
            raise YamahaTimeoutError() from e
        except httpx.HTTPError as e:
            raise YamahaRequestError(f"HTTP request failed: {e}") from e

        response = YamahaResponse(
            status=resp.status_code,
            body=resp.text,
            headers=dict(resp.headers),
            status_message=resp.reason_phrase or "OK",
        )

        if not response.success:
            raise YamahaRequestError(
                f"HTTP request failed: {response.status} {response.status_message}"
            )

        self._check_response_code(path, response)
        return response

    @staticmethod
    def _check_response_code(path: str, response: YamahaResponse) -> None:
        """Raise YamahaApiError when the body reports a YXC error."""
        try:
            payload = response.json()
        except (json.JSONDecodeError, ValueError):
            return
        if not isinstance(payload, dict):
            return
        code = payload.get("response_code", 0)
        if code not in (0, None):
            raise YamahaApiError(path, int(code))

    async def request_json(
        self,
        ip: str,
        path: str,
        data: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """Send a request and parse the body as a JSON object."""
        response = await self.request(ip, path, data)
        payload = response.json()
        if not isinstance(payload, dict):
            raise YamahaRequestError(f"Unexpected response from {path}: {response.body!r}")
        return payload

    def _zone_path(self, speaker: Speaker, endpoint: str) -> str:
        return endpoints.zone_path(speaker.zone, endpoint, self.api_prefix)

    def _api_path(self, path: str) -> str:
        return endpoints.api_path(path, self.api_prefix)

    # ---------- zone control ----------

    async def get_status(self, speaker: Speaker) -> ZoneStatus:
        """Read power, volume and mute of a speaker's zone."""
        payload = await self.request_json(speaker.ip, self._zone_path(speaker, "status"))
        return ZoneStatus.from_dict(payload)

    async def set_volume(self, speaker: Speaker, volume: int) -> YamahaResponse:
        """Set the zone volume."""
        return await self.request(
            speaker.ip,
            self._zone_path(speaker, "volume"),
            {"volume": int(volume)},
        )

    async def set_power(self, speaker: Speaker, power: PowerState) -> YamahaResponse:
        """Switch the zone on or to standby."""
        return await self.request(
            speaker.ip,
            self._zone_path(speaker, "power"),
            {"power": PowerState(power)},
        )

    async def set_mute(self, speaker: Speaker, muted: bool) -> YamahaResponse:
        """Mute or unmute the zone."""
        return await self.request(
            speaker.ip,
            self._zone_path(speaker, "mute"),
            {"enable": bool(muted)},
        )

    # ---------- network/USB playback ----------

    async def get_play_info(self, speaker: Speaker) -> dict[str, Any]:
        """Read playback information of the network/USB source."""
        return await self.request_json(speaker.ip, self._api_path(endpoints.PLAY_INFO_PATH))

    async def set_playback(self, speaker: Speaker, playback: str) -> YamahaResponse:
        """Send a playback command (play, pause, next, ...)."""
        return await self.request(
            speaker.ip,
            self._api_path(endpoints.SET_PLAYBACK_PATH),
            {"playback": playback},
        )

    # ---------- discovery ----------

    async def get_features(self, ip: str) -> dict[str, Any]:
        """Read the system feature list of a receiver."""
        return await self.request_json(ip, self._api_path(endpoints.FEATURES_PATH))

    async def discover_volume_ranges(self, ip: str) -> dict[str, VolumeRange]:
        """
        Discover per-zone volume ranges from a receiver.

        Looks for the actual_volume_numeric entry in each zone's range_step
        list. Falls back to the default ranges when nothing is found or the
        request fails.

        Args:
            ip: Receiver network address

        Returns:
            Mapping of zone id to VolumeRange
        """
        try:
            features = await self.get_features(ip)
            discovered = self.parse_volume_ranges(features)
            if discovered:
                logger.info(
                    "Discovered volume ranges: %s",
                    {zone: r.to_dict() for zone, r in discovered.items()},
                )
                return discovered
        except Exception as e:
            logger.error("Error discovering volume ranges: %s", e)

        return dict(self.default_ranges)

    @staticmethod
    def parse_volume_ranges(features: dict[str, Any]) -> dict[str, VolumeRange]:
        """Extract actual_volume_numeric ranges from a getFeatures payload."""
        discovered: dict[str, VolumeRange] = {}

        zones = features.get("zone")
        if not isinstance(zones, list):
            return discovered

        for zone in zones:
            zone_id = zone.get("id")
            range_step = zone.get("range_step")
            if not zone_id or not isinstance(range_step, list):
                continue
            for item in range_step:
                if item.get("id") != "actual_volume_numeric":
                    continue
                if item.get("min") is not None and item.get("max") is not None:
                    discovered[zone_id] = VolumeRange(min=item["min"], max=item["max"])
                break

        return discovered
