"""
Dataclasses and enums for the YXC bridge.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class PowerState(str, Enum):
    """Zone power values accepted by setPower."""

    ON = "on"
    STANDBY = "standby"


class PlaybackState(str, Enum):
    """Playback state of the network/USB source."""

    PLAY = "play"
    PAUSE = "pause"
    STOP = "stop"
    OFF = "off"
    UNKNOWN = "unknown"

    @classmethod
    def from_value(cls, value: Any) -> "PlaybackState":
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class Speaker:
    """A receiver zone exposed as a controllable speaker."""

    id: str
    ip: str
    name: str
    zone: str = "main"


@dataclass
class VolumeRange:
    """Volume bounds reported for one zone."""

    min: float
    max: float

    def to_dict(self) -> dict[str, float]:
        return {"min": self.min, "max": self.max}


@dataclass
class ZoneStatus:
    """Parsed getStatus payload for a zone."""

    power: str = ""
    volume: int = 0
    mute: bool = False
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def is_on(self) -> bool:
        return self.power == PowerState.ON.value

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ZoneStatus":
        """Create from a getStatus JSON body."""
        return cls(
            power=data.get("power", ""),
            volume=int(data.get("volume", 0)),
            mute=bool(data.get("mute", False)),
            raw=data,
        )


@dataclass
class YamahaResponse:
    """Result of a single YXC request."""

    status: int
    body: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    status_message: str = "OK"

    @property
    def success(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> dict[str, Any]:
        """Parse the body as JSON; an empty body yields an empty dict."""
        if not self.body:
            return {}
        return json.loads(self.body)
