"""
Action message parsing.

Buttons send plain-text action messages of the form "{device-id} {action}",
for example "livingroom volume up".
"""

import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger("yxc.bridge.actions")

VOLUME_UP = "volume up"
VOLUME_DOWN = "volume down"
MUTE = "mute"
POWER = "power"
ON = "on"
OFF = "off"

KNOWN_ACTIONS = (VOLUME_UP, VOLUME_DOWN, MUTE, POWER, ON, OFF)

ACTION_HELP = {
    VOLUME_UP: "Increase volume by 10%",
    VOLUME_DOWN: "Decrease volume by 10%",
    MUTE: "Toggle mute",
    POWER: "Toggle power on/off",
    ON: "Turn device on",
    OFF: "Turn device off",
}


@dataclass
class ActionMessage:
    """A parsed "{device-id} {action}" message."""

    device_id: str
    action: str
    raw: str = ""

    @classmethod
    def parse(cls, message: str) -> Optional["ActionMessage"]:
        """
        Parse an action message.

        The message is lowercased; the first token is the device id and
        the remaining tokens, joined by single spaces, form the action.

        Returns:
            ActionMessage, or None when fewer than two tokens are present
        """
        parts = (message or "").lower().split()
        if len(parts) < 2:
            logger.warning(
                'Invalid action message format. Expected: "{device-id} {action}", got %r',
                message,
            )
            return None
        return cls(device_id=parts[0], action=" ".join(parts[1:]), raw=message)

    @property
    def is_known(self) -> bool:
        return self.action in KNOWN_ACTIONS
