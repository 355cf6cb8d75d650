"""
Shared fixtures for YXC bridge tests.

FakeReceiver answers YXC requests through httpx.MockTransport and keeps
per-zone state, so the controller can be tested end to end without a
network.
"""

import httpx
import pytest
import pytest_asyncio

from yxc_bridge.config import BridgeConfig
from yxc_bridge.controller import SpeakerController
from yxc_bridge.cooldown import PlaybackCooldown
from yxc_bridge.hub import InMemoryHub
from yxc_bridge.models import Speaker
from yxc_bridge.yamaha.client import YamahaClient


LIVING = Speaker(id="living", ip="10.0.0.5", name="Living Room", zone="main")
KITCHEN = Speaker(id="kitchen", ip="10.0.0.5", name="Kitchen", zone="zone2")


FEATURES = {
    "response_code": 0,
    "zone": [
        {
            "id": "main",
            "range_step": [
                {"id": "volume", "min": 0, "max": 161, "step": 1},
                {"id": "actual_volume_numeric", "min": -80.5, "max": 16.5, "step": 0.5},
            ],
        },
        {
            "id": "zone2",
            "range_step": [
                {"id": "actual_volume_numeric", "min": -80.5, "max": 0.0, "step": 0.5},
            ],
        },
    ],
}


class FakeReceiver:
    """In-memory Yamaha receiver speaking the YXC GET API."""

    def __init__(self):
        self.zones = {
            "main": {"power": "on", "volume": 50, "mute": False},
            "zone2": {"power": "standby", "volume": 30, "mute": True},
        }
        self.playback = "play"
        self.features = FEATURES
        self.requests: list[httpx.Request] = []
        self.fail_methods: dict[str, type[httpx.RequestError]] = {}
        self.fail_hosts: set[str] = set()

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        parts = request.url.path.strip("/").split("/")
        group, method = parts[2], parts[3]
        params = request.url.params

        if request.url.host in self.fail_hosts:
            raise httpx.ConnectError("connection refused", request=request)
        if method in self.fail_methods:
            raise self.fail_methods[method]("simulated failure", request=request)

        if group == "system" and method == "getFeatures":
            return httpx.Response(200, json=self.features)

        if group == "netusb":
            if method == "getPlayInfo":
                return httpx.Response(200, json={"response_code": 0, "playback": self.playback})
            if method == "setPlayback":
                command = params["playback"]
                if command in ("play", "pause", "stop"):
                    self.playback = command
                return httpx.Response(200, json={"response_code": 0})

        zone = self.zones.get(group)
        if zone is None:
            return httpx.Response(200, json={"response_code": 3})

        if method == "getStatus":
            return httpx.Response(200, json={"response_code": 0, **zone})
        if method == "setVolume":
            zone["volume"] = int(params["volume"])
        elif method == "setPower":
            zone["power"] = params["power"]
        elif method == "setMute":
            zone["mute"] = params["enable"] == "true"
        else:
            return httpx.Response(404)
        return httpx.Response(200, json={"response_code": 0})

    def calls(self, method: str) -> list[httpx.Request]:
        """Requests whose path ends with the given YXC method."""
        return [r for r in self.requests if r.url.path.endswith("/" + method)]


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture
def receiver() -> FakeReceiver:
    return FakeReceiver()


@pytest_asyncio.fixture
async def client(receiver: FakeReceiver):
    yamaha = YamahaClient(transport=httpx.MockTransport(receiver.handler))
    yield yamaha
    await yamaha.close()


@pytest.fixture
def config() -> BridgeConfig:
    return BridgeConfig(speakers=[LIVING, KITCHEN])


@pytest.fixture
def hub() -> InMemoryHub:
    return InMemoryHub()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cooldown(clock: FakeClock) -> PlaybackCooldown:
    return PlaybackCooldown(cooldown_ms=2500, clock=clock)


@pytest.fixture
def controller(config, client, hub, cooldown) -> SpeakerController:
    return SpeakerController(config, client, hub, cooldown)
