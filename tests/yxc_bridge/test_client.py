"""
Tests for the YXC HTTP client.

Requests are answered by FakeReceiver through httpx.MockTransport.
"""

import httpx
import pytest

from yxc_bridge.errors import YamahaApiError, YamahaRequestError, YamahaTimeoutError
from yxc_bridge.models import PowerState, Speaker, VolumeRange
from yxc_bridge.yamaha.client import YamahaClient

LIVING = Speaker(id="living", ip="10.0.0.5", name="Living Room", zone="main")
KITCHEN = Speaker(id="kitchen", ip="10.0.0.5", name="Kitchen", zone="zone2")


class TestRequest:
    """Tests for the raw request wrapper."""

    @pytest.mark.asyncio
    async def test_builds_url_and_headers(self, client, receiver):
        await client.request("10.0.0.5", "/YamahaExtendedControl/v1/main/setVolume", {"volume": 42})

        request = receiver.requests[-1]
        assert request.method == "GET"
        assert str(request.url) == "http://10.0.0.5/YamahaExtendedControl/v1/main/setVolume?volume=42"
        assert request.headers["User-Agent"] == "Flic-Hub-Studio/1.0"
        assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"

    @pytest.mark.asyncio
    async def test_response_fields(self, client):
        response = await client.request("10.0.0.5", "/YamahaExtendedControl/v1/main/getStatus")
        assert response.status == 200
        assert response.success is True
        assert response.json()["volume"] == 50

    @pytest.mark.asyncio
    async def test_timeout(self, client, receiver):
        receiver.fail_methods["getStatus"] = httpx.ReadTimeout
        with pytest.raises(YamahaTimeoutError, match="Request timeout"):
            await client.get_status(LIVING)

    @pytest.mark.asyncio
    async def test_transport_failure(self, client, receiver):
        receiver.fail_methods["getStatus"] = httpx.ConnectError
        with pytest.raises(YamahaRequestError, match="HTTP request failed"):
            await client.get_status(LIVING)

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(500, text="boom"))
        async with YamahaClient(transport=transport) as yamaha:
            with pytest.raises(YamahaRequestError):
                await yamaha.request("10.0.0.5", "/YamahaExtendedControl/v1/main/getStatus")

    @pytest.mark.asyncio
    async def test_response_code_error(self, client):
        with pytest.raises(YamahaApiError) as exc_info:
            await client.request("10.0.0.5", "/YamahaExtendedControl/v1/zone4/getStatus")
        assert exc_info.value.response_code == 3

    @pytest.mark.asyncio
    async def test_non_json_body_accepted(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="OK"))
        async with YamahaClient(transport=transport) as yamaha:
            response = await yamaha.request("10.0.0.5", "/YamahaExtendedControl/v1/main/setPower")
        assert response.body == "OK"

    @pytest.mark.asyncio
    async def test_context_manager_closes(self, receiver):
        yamaha = YamahaClient(transport=httpx.MockTransport(receiver.handler))
        async with yamaha:
            assert yamaha.is_connected
        assert not yamaha.is_connected


class TestZoneControl:
    """Tests for the typed zone calls."""

    @pytest.mark.asyncio
    async def test_get_status(self, client):
        status = await client.get_status(KITCHEN)
        assert status.power == "standby"
        assert status.volume == 30
        assert status.mute is True
        assert status.is_on is False

    @pytest.mark.asyncio
    async def test_set_volume(self, client, receiver):
        await client.set_volume(LIVING, 65)
        assert receiver.zones["main"]["volume"] == 65

    @pytest.mark.asyncio
    async def test_set_power(self, client, receiver):
        await client.set_power(KITCHEN, PowerState.ON)
        assert receiver.calls("setPower")[-1].url.params["power"] == "on"
        assert receiver.zones["zone2"]["power"] == "on"

    @pytest.mark.asyncio
    async def test_set_mute_uses_enable(self, client, receiver):
        await client.set_mute(LIVING, True)
        assert receiver.calls("setMute")[-1].url.params["enable"] == "true"
        assert receiver.zones["main"]["mute"] is True

    @pytest.mark.asyncio
    async def test_playback(self, client, receiver):
        info = await client.get_play_info(LIVING)
        assert info["playback"] == "play"

        await client.set_playback(LIVING, "pause")
        request = receiver.calls("setPlayback")[-1]
        assert request.url.path == "/YamahaExtendedControl/v1/netusb/setPlayback"
        assert request.url.params["playback"] == "pause"


class TestVolumeRangeDiscovery:
    """Tests for discover_volume_ranges."""

    @pytest.mark.asyncio
    async def test_discovers_actual_volume_numeric(self, client):
        ranges = await client.discover_volume_ranges("10.0.0.5")
        assert ranges == {
            "main": VolumeRange(min=-80.5, max=16.5),
            "zone2": VolumeRange(min=-80.5, max=0.0),
        }

    @pytest.mark.asyncio
    async def test_falls_back_when_missing(self, client, receiver):
        receiver.features = {"response_code": 0, "zone": [{"id": "main", "range_step": []}]}
        ranges = await client.discover_volume_ranges("10.0.0.5")
        assert ranges == client.default_ranges

    @pytest.mark.asyncio
    async def test_falls_back_on_error(self, client, receiver):
        receiver.fail_methods["getFeatures"] = httpx.ConnectError
        ranges = await client.discover_volume_ranges("10.0.0.5")
        assert ranges["main"] == VolumeRange(min=-80, max=-10)
        assert ranges["zone2"] == VolumeRange(min=-80, max=-10)

    def test_parse_skips_incomplete_entries(self):
        features = {
            "zone": [
                {"id": "main", "range_step": [{"id": "actual_volume_numeric", "min": -80}]},
                {"id": "zone2"},
                {"id": "zone3", "range_step": [{"id": "actual_volume_numeric", "min": -60, "max": 0}]},
            ]
        }
        assert YamahaClient.parse_volume_ranges(features) == {"zone3": VolumeRange(min=-60, max=0)}

    def test_parse_without_zone_list(self):
        assert YamahaClient.parse_volume_ranges({"system": {}}) == {}

    def test_parse_skips_zone_without_id(self):
        features = {
            "zone": [
                {"range_step": [{"id": "actual_volume_numeric", "min": -80, "max": 0}]},
                {"id": "main", "range_step": [{"id": "actual_volume_numeric", "min": -70, "max": 10}]},
            ]
        }
        assert YamahaClient.parse_volume_ranges(features) == {"main": VolumeRange(min=-70, max=10)}

    def test_default_ranges_follow_config(self, monkeypatch):
        monkeypatch.setenv("YXC_YAMAHA_DEFAULT_VOLUME_MIN", "-60")
        yamaha = YamahaClient()
        assert yamaha.default_ranges == {
            "main": VolumeRange(min=-60, max=-10),
            "zone2": VolumeRange(min=-60, max=-10),
        }
