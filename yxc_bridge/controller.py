"""
Speaker controller.

Implements the button actions (volume, mute, power), twist controller
handling (volume and playback via the skip device) and mirroring of the
receiver volume back into the virtual devices.
"""

import logging
import math
from typing import Any, Optional

from .config import BridgeConfig
from .cooldown import PlaybackCooldown
from .errors import SpeakerNotFoundError
from .hub import VirtualDeviceHub
from .models import PlaybackState, PowerState, Speaker, VolumeRange
from .yamaha.client import YamahaClient

logger = logging.getLogger("yxc.bridge.controller")


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded toward +inf (like JS Math.round)."""
    return int(math.floor(value + 0.5))


class SpeakerController:
    """
    Translates bridge events into receiver requests.

    Holds the only mutable state of the bridge:
    - the shared playback cooldown
    - the last known volume per receiver zone
    - the last volume applied from a twist controller
    """

    def __init__(
        self,
        config: BridgeConfig,
        client: YamahaClient,
        hub: VirtualDeviceHub,
        cooldown: Optional[PlaybackCooldown] = None,
    ):
        self.config = config
        self.client = client
        self.hub = hub
        self.cooldown = cooldown or PlaybackCooldown(config.control.playback_cooldown_ms)

        self.volume_ranges: dict[str, VolumeRange] = config.default_volume_ranges()
        self.zone_volumes: dict[tuple[str, str], int] = {}
        self.current_volume: Optional[int] = None

    @property
    def speakers(self) -> list[Speaker]:
        return self.config.speakers

    def find_speaker(self, speaker_id: str) -> Optional[Speaker]:
        return self.config.get_speaker(speaker_id)

    def last_volume(self, speaker: Speaker) -> Optional[int]:
        """Last volume read from the speaker's zone, if any."""
        return self.zone_volumes.get((speaker.ip, speaker.zone))

    def _cooldown_blocks(self, what: str) -> bool:
        now = self.cooldown.now()
        if self.cooldown.is_active(now):
            logger.info(
                "%s ignored - playback cooldown active (%ds remaining)",
                what,
                self.cooldown.remaining_seconds(now),
            )
            return True
        return False

    # ---------- receiver operations (raise on failure) ----------

    async def set_volume(self, speaker_id: str, volume: float):
        """
        Set the volume of a speaker and mirror the actual result.

        Raises:
            SpeakerNotFoundError: Unknown speaker id
            YamahaError: The receiver request failed
        """
        speaker = self.find_speaker(speaker_id)
        if speaker is None:
            raise SpeakerNotFoundError(speaker_id)

        value = round_half_up(volume)
        try:
            response = await self.client.set_volume(speaker, value)
            # Read back what the receiver actually applied
            await self.get_current_volume_and_update(speaker)
            return response
        except Exception as e:
            logger.error("Error setting volume for %s: %s", speaker.name, e)
            raise

    async def set_power(self, speaker_id: str, power_on: bool):
        """
        Switch a speaker on or to standby.

        Raises:
            SpeakerNotFoundError: Unknown speaker id
            YamahaError: The receiver request failed
        """
        speaker = self.find_speaker(speaker_id)
        if speaker is None:
            raise SpeakerNotFoundError(speaker_id)

        state = PowerState.ON if power_on else PowerState.STANDBY
        logger.info("Setting power for %s (%s zone) to %s", speaker.name, speaker.zone, state.value)
        try:
            response = await self.client.set_power(speaker, state)
            logger.info("Successfully set power for %s", speaker.name)
            return response
        except Exception as e:
            logger.error("Error setting power for %s: %s", speaker.name, e)
            raise

    async def set_mute(self, speaker_id: str, muted: bool):
        """
        Mute or unmute a speaker.

        Raises:
            SpeakerNotFoundError: Unknown speaker id
            YamahaError: The receiver request failed
        """
        speaker = self.find_speaker(speaker_id)
        if speaker is None:
            raise SpeakerNotFoundError(speaker_id)

        logger.info(
            "Setting mute for %s (%s zone) to %s",
            speaker.name,
            speaker.zone,
            "true" if muted else "false",
        )
        try:
            response = await self.client.set_mute(speaker, muted)
            logger.info("Successfully set mute for %s", speaker.name)
            return response
        except Exception as e:
            logger.error("Error setting mute for %s: %s", speaker.name, e)
            raise

    # ---------- button actions (log on failure) ----------

    async def volume_up(self, speaker_id: str) -> None:
        """Raise the volume by one step."""
        await self._step_volume(speaker_id, self.config.control.volume_step, "up")

    async def volume_down(self, speaker_id: str) -> None:
        """Lower the volume by one step."""
        await self._step_volume(speaker_id, -self.config.control.volume_step, "down")

    async def _step_volume(self, speaker_id: str, delta: int, direction: str) -> None:
        if self._cooldown_blocks(f"Volume {direction} command"):
            return

        speaker = self.find_speaker(speaker_id)
        if speaker is None:
            logger.error("Device not found: %s", speaker_id)
            return

        control = self.config.control
        try:
            status = await self.client.get_status(speaker)
            new_volume = max(control.volume_floor, min(control.volume_ceiling, status.volume + delta))
            await self.set_volume(speaker_id, new_volume)
        except Exception as e:
            verb = "increasing" if delta > 0 else "decreasing"
            logger.error("Error %s volume for %s: %s", verb, speaker.name, e)

    async def toggle_mute(self, speaker_id: str) -> None:
        """Invert the current mute state."""
        speaker = self.find_speaker(speaker_id)
        if speaker is None:
            logger.error("Device not found: %s", speaker_id)
            return

        try:
            status = await self.client.get_status(speaker)
            muted = not status.mute
            await self.set_mute(speaker_id, muted)
            logger.info("%s %s", speaker.name, "muted" if muted else "unmuted")
        except Exception as e:
            logger.error("Error toggling mute for %s: %s", speaker.name, e)

    async def toggle_power(self, speaker_id: str) -> None:
        """Switch on from standby, or to standby when on."""
        speaker = self.find_speaker(speaker_id)
        if speaker is None:
            logger.error("Device not found: %s", speaker_id)
            return

        try:
            status = await self.client.get_status(speaker)
            power_on = not status.is_on
            await self.set_power(speaker_id, power_on)
            logger.info("%s turned %s", speaker.name, "on" if power_on else "off")
        except Exception as e:
            logger.error("Error toggling power for %s: %s", speaker.name, e)

    async def power_on(self, speaker_id: str) -> None:
        await self._switch_power(speaker_id, True)

    async def power_off(self, speaker_id: str) -> None:
        await self._switch_power(speaker_id, False)

    async def _switch_power(self, speaker_id: str, power_on: bool) -> None:
        speaker = self.find_speaker(speaker_id)
        if speaker is None:
            logger.error("Device not found: %s", speaker_id)
            return

        label = "on" if power_on else "off"
        try:
            await self.set_power(speaker_id, power_on)
            logger.info("%s turned %s", speaker.name, label)
        except Exception as e:
            logger.error("Error turning %s %s: %s", label, speaker.name, e)

    # ---------- playback ----------

    async def get_playback_status(self, speaker: Speaker) -> PlaybackState:
        """
        Read the playback state of a speaker.

        Returns:
            OFF when the zone is not powered on, the netusb playback state
            otherwise, UNKNOWN when anything fails
        """
        try:
            status = await self.client.get_status(speaker)
            if not status.is_on:
                return PlaybackState.OFF

            play_info = await self.client.get_play_info(speaker)
            return PlaybackState.from_value(play_info.get("playback"))
        except Exception as e:
            logger.error("Error getting playback status for %s: %s", speaker.name, e)
            return PlaybackState.UNKNOWN

    async def _send_playback(self, speaker: Speaker, playback: str, done: str, verb: str) -> None:
        try:
            await self.client.set_playback(speaker, playback)
            logger.info("%s %s", speaker.name, done)
        except Exception as e:
            logger.error("Error %s %s: %s", verb, speaker.name, e)

    async def pause_playback(self, speaker: Speaker) -> None:
        await self._send_playback(speaker, "pause", "playback paused", "pausing")

    async def resume_playback(self, speaker: Speaker) -> None:
        await self._send_playback(speaker, "play", "playback resumed", "resuming")

    async def skip_to_next_track(self, speaker: Speaker) -> None:
        await self._send_playback(speaker, "next", "skipped to next track", "skipping track on")

    # ---------- twist controllers ----------

    def _reset_skip_device(self) -> None:
        control = self.config.control
        self.hub.update_state(
            control.dimmable_type,
            control.skip_device_id,
            {"volume": control.skip_center},
        )

    async def handle_skip_update(self, device_id: str, values: dict[str, Any]) -> bool:
        """
        Turn a skip device movement into a playback command.

        Turning left pauses playing speakers; turning right resumes paused
        speakers and skips to the next track on playing ones. The skip
        device is always returned to its centre position.

        Returns:
            True when a playback command was issued
        """
        control = self.config.control
        if device_id != control.skip_device_id:
            return False

        volume = values.get("volume")
        change = volume - control.skip_center if volume is not None else 0.0

        if abs(change) <= control.skip_threshold:
            self._reset_skip_device()
            return False

        now = self.cooldown.now()
        if self.cooldown.is_active(now):
            logger.info(
                "Playback command ignored - cooldown active (%ds remaining)",
                self.cooldown.remaining_seconds(now),
            )
            self._reset_skip_device()
            return False

        for speaker in self.speakers:
            try:
                state = await self.get_playback_status(speaker)

                if change < 0:
                    if state == PlaybackState.PLAY:
                        await self.pause_playback(speaker)
                elif state == PlaybackState.PAUSE:
                    await self.resume_playback(speaker)
                elif state == PlaybackState.PLAY:
                    await self.skip_to_next_track(speaker)
            except Exception as e:
                logger.error("Error handling playback control for %s: %s", speaker.name, e)

        # Only playback commands start the cooldown
        self.cooldown.mark(now)
        self._reset_skip_device()
        return True

    async def handle_speaker_update(self, device_id: str, values: dict[str, Any]) -> None:
        """Apply a twist controller volume (0.0-1.0) to a speaker."""
        volume = values.get("volume")
        if volume is None:
            return

        if self._cooldown_blocks("Volume change"):
            return

        percentage = round_half_up(volume * 100)
        try:
            await self.set_volume(device_id, percentage)
            self.current_volume = percentage
        except Exception as e:
            logger.error("Failed to update Yamaha speaker %s: %s", device_id, e)

    # ---------- virtual device state ----------

    def update_zone_virtual_device_states(
        self,
        zone: str,
        volume: float,
        ip: Optional[str] = None,
    ) -> None:
        """
        Push a volume (0.0-1.0) to every speaker of a zone.

        Args:
            zone: Zone name
            volume: Virtual device volume
            ip: Restrict to speakers of one receiver
        """
        for speaker in self.config.speakers_in_zone(zone):
            if ip is not None and speaker.ip != ip:
                continue
            self.hub.update_state(self.config.control.dimmable_type, speaker.id, {"volume": volume})

    async def get_current_volume_and_update(self, speaker: Speaker) -> Optional[int]:
        """
        Read the zone volume and mirror it into the virtual devices.

        Returns:
            Current volume, or None when the status could not be read
        """
        try:
            status = await self.client.get_status(speaker)
        except Exception as e:
            logger.error("Error getting current volume for %s: %s", speaker.name, e)
            return None

        self.zone_volumes[(speaker.ip, speaker.zone)] = status.volume
        self.update_zone_virtual_device_states(speaker.zone, status.volume / 100, ip=speaker.ip)
        return status.volume

    async def discover_volume_ranges(self) -> dict[str, VolumeRange]:
        """Discover volume ranges from the first configured receiver."""
        if not self.speakers:
            return self.volume_ranges
        self.volume_ranges = await self.client.discover_volume_ranges(self.speakers[0].ip)
        return self.volume_ranges

    async def initialize_virtual_device_states(self) -> None:
        """Mirror every speaker's volume and create the skip device."""
        for speaker in self.speakers:
            await self.get_current_volume_and_update(speaker)

        control = self.config.control
        self.hub.create_virtual_device(
            control.skip_device_id,
            control.dimmable_type,
            {"volume": control.skip_center},
        )
