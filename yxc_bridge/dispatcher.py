"""
Action dispatcher for the YXC bridge.

Routes button action messages and virtual device updates to the
speaker controller.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from . import actions
from .actions import ActionMessage
from .controller import SpeakerController
from .hub import VirtualDeviceMeta

logger = logging.getLogger("yxc.bridge.dispatcher")

ActionHandler = Callable[[str], Awaitable[None]]


@dataclass
class ActionResult:
    """Result from dispatching an action message."""

    handled: bool
    device_id: Optional[str] = None
    action: str = ""
    error: Optional[str] = None


class ActionDispatcher:
    """
    Dispatches bridge events.

    Handles:
    - "{device-id} {action}" messages from buttons
    - Virtual device updates from twist controllers
    """

    def __init__(self, controller: SpeakerController):
        self.controller = controller
        self._handlers: dict[str, ActionHandler] = {
            actions.VOLUME_UP: controller.volume_up,
            actions.VOLUME_DOWN: controller.volume_down,
            actions.MUTE: controller.toggle_mute,
            actions.POWER: controller.toggle_power,
            actions.ON: controller.power_on,
            actions.OFF: controller.power_off,
        }

    @property
    def actions(self) -> list[str]:
        return list(self._handlers)

    async def handle_action_message(self, message: str) -> ActionResult:
        """
        Handle a button action message.

        Args:
            message: Text like "livingroom volume up"

        Returns:
            ActionResult describing whether a handler ran
        """
        logger.info("Received action message: %s", message)

        parsed = ActionMessage.parse(message)
        if parsed is None:
            return ActionResult(handled=False, error="invalid_format")

        if self.controller.find_speaker(parsed.device_id) is None:
            logger.info("Unknown device: %s", parsed.device_id)
            return ActionResult(
                handled=False,
                device_id=parsed.device_id,
                action=parsed.action,
                error="unknown_device",
            )

        handler = self._handlers.get(parsed.action)
        if handler is None:
            logger.info("Unknown action for device %s: %s", parsed.device_id, parsed.action)
            return ActionResult(
                handled=False,
                device_id=parsed.device_id,
                action=parsed.action,
                error="unknown_action",
            )

        await handler(parsed.device_id)
        return ActionResult(handled=True, device_id=parsed.device_id, action=parsed.action)

    async def handle_virtual_device_update(
        self,
        meta: VirtualDeviceMeta,
        values: dict[str, Any],
    ) -> bool:
        """
        Handle a twist controller update.

        Only virtual devices of the configured dimmable type are handled;
        the skip device controls playback, all others control volume.

        Returns:
            True when the update was routed to a handler
        """
        control = self.controller.config.control
        if meta.dimmable_type != control.dimmable_type:
            return False

        if meta.virtual_device_id == control.skip_device_id:
            await self.controller.handle_skip_update(meta.virtual_device_id, values)
        else:
            await self.controller.handle_speaker_update(meta.virtual_device_id, values)
        return True
