"""
Configuration management for the YXC bridge.

Uses Pydantic Settings for environment variable parsing.
"""

from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import Speaker, VolumeRange


def _default_speakers() -> list[Speaker]:
    return [
        Speaker(
            id="id1main",
            ip="RECEIVER1_IP_ADDRESS",
            name="Name Receiver 1 Main Zone",
            zone="main",
        ),
        Speaker(
            id="id1zone2",
            ip="RECEIVER1_IP_ADDRESS",
            name="Name Receiver 1 Zone 2",
            zone="zone2",
        ),
    ]


class YamahaConfig(BaseSettings):
    """Yamaha Extended Control HTTP API configuration."""

    model_config = SettingsConfigDict(
        env_prefix="YXC_YAMAHA_",
        env_file=".env",
        extra="ignore",
    )

    request_timeout: float = Field(
        default=5.0,
        description="Seconds before a single request is abandoned",
    )
    user_agent: str = Field(
        default="Flic-Hub-Studio/1.0",
        description="User-Agent header sent with every request",
    )
    api_prefix: str = Field(
        default="/YamahaExtendedControl/v1",
        description="Path prefix of the YXC API",
    )
    default_volume_min: int = Field(
        default=-80,
        description="Fallback minimum volume when discovery fails",
    )
    default_volume_max: int = Field(
        default=-10,
        description="Fallback maximum volume when discovery fails",
    )


class ControlConfig(BaseSettings):
    """Button and twist controller behaviour."""

    model_config = SettingsConfigDict(
        env_prefix="YXC_CONTROL_",
        env_file=".env",
        extra="ignore",
    )

    playback_cooldown_ms: int = Field(
        default=2500,
        description="Milliseconds after a playback command during which volume changes are ignored",
    )
    volume_step: int = Field(
        default=10,
        description="Volume change for a single volume up/down press",
    )
    volume_floor: int = Field(default=0, description="Lowest volume a button press can set")
    volume_ceiling: int = Field(default=100, description="Highest volume a button press can set")
    skip_device_id: str = Field(
        default="skip",
        description="Virtual device id used for playback control",
    )
    skip_center: float = Field(
        default=0.5,
        description="Resting position of the skip device",
    )
    skip_threshold: float = Field(
        default=0.1,
        description="Minimum distance from centre that counts as a playback command",
    )
    dimmable_type: str = Field(
        default="Speaker",
        description="Virtual device type handled by the bridge",
    )


class BridgeConfig(BaseSettings):
    """Main bridge configuration."""

    model_config = SettingsConfigDict(
        env_prefix="YXC_BRIDGE_",
        env_file=".env",
        extra="ignore",
    )

    log_level: str = Field(
        default="INFO",
        description="Root logging level",
    )
    speakers: list[Speaker] = Field(
        default_factory=_default_speakers,
        description="Configured speakers (JSON list in the environment)",
    )

    # Sub-configs
    yamaha: YamahaConfig = Field(default_factory=YamahaConfig)
    control: ControlConfig = Field(default_factory=ControlConfig)

    def get_speaker(self, speaker_id: str) -> Optional[Speaker]:
        """Find a configured speaker by id."""
        for speaker in self.speakers:
            if speaker.id == speaker_id:
                return speaker
        return None

    def speakers_in_zone(self, zone: str) -> list[Speaker]:
        """Return all speakers configured for a zone."""
        return [s for s in self.speakers if s.zone == zone]

    def default_volume_ranges(self) -> dict[str, VolumeRange]:
        """Fallback volume range for every configured zone."""
        zones = {"main", "zone2"} | {s.zone for s in self.speakers}
        return {
            zone: VolumeRange(
                min=self.yamaha.default_volume_min,
                max=self.yamaha.default_volume_max,
            )
            for zone in sorted(zones)
        }


def load_env_files(root: Path) -> None:
    """
    Load .env and .env.local from a directory into the environment.

    .env.local overrides .env for machine-specific settings (receiver addresses, etc.)
    """
    load_dotenv(root / ".env", override=True)
    load_dotenv(root / ".env.local", override=True)


# Must run before the global settings are built
load_env_files(Path(__file__).parent.parent)

# Global settings instance
_settings: Optional[BridgeConfig] = None


def get_settings() -> BridgeConfig:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = BridgeConfig()
    return _settings


settings = get_settings()
