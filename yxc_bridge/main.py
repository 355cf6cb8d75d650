"""
YXC bridge - main entry point.

Connects button action messages and twist controller updates to Yamaha
receivers:
- Volume, mute and power from buttons
- Volume from twist controllers
- Playback control from the skip twist device
"""

import asyncio
import logging
import signal
from typing import Any, Optional

from .actions import ACTION_HELP
from .config import BridgeConfig, settings
from .controller import SpeakerController
from .dispatcher import ActionDispatcher
from .hub import InMemoryHub, VirtualDeviceHub, VirtualDeviceMeta
from .yamaha.client import YamahaClient

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("yxc.bridge.main")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

FEATURES = (
    "Volume control via buttons",
    "Volume control via twist controllers",
    "Playback control via twist (skip device)",
    "Multi-speaker synchronization",
)


def parse_twist_command(
    text: str,
    dimmable_type: str = "Speaker",
) -> Optional[tuple[VirtualDeviceMeta, dict[str, Any]]]:
    """
    Parse an interactive "twist <device-id> <value>" line.

    Returns:
        (meta, values) for the virtual device update, or None when the line
        is not a twist command
    """
    parts = text.strip().split()
    if len(parts) != 3 or parts[0].lower() != "twist":
        return None
    try:
        value = float(parts[2])
    except ValueError:
        return None
    meta = VirtualDeviceMeta(dimmable_type=dimmable_type, virtual_device_id=parts[1].lower())
    return meta, {"volume": value}


class BridgeApplication:
    """
    Main bridge application.

    Manages:
    - Receiver HTTP client
    - Virtual device hub
    - Action dispatch
    - Graceful shutdown
    """

    def __init__(
        self,
        config: Optional[BridgeConfig] = None,
        hub: Optional[VirtualDeviceHub] = None,
        client: Optional[YamahaClient] = None,
    ):
        self.config = config or settings
        self.hub = hub or InMemoryHub()
        self.client = client or YamahaClient(
            timeout=self.config.yamaha.request_timeout,
            user_agent=self.config.yamaha.user_agent,
            api_prefix=self.config.yamaha.api_prefix,
            default_ranges=self.config.default_volume_ranges(),
        )
        self.controller = SpeakerController(self.config, self.client, self.hub)
        self.dispatcher = ActionDispatcher(self.controller)
        self._running = False
        self._shutdown_event = asyncio.Event()

    def log_configuration(self) -> None:
        """Log speakers and the available commands."""
        logger.info("Loading Yamaha configuration...")
        logger.info("Configured speakers: %s", [s.name for s in self.config.speakers])
        logger.info("Available features: %s", ", ".join(FEATURES))
        for action, description in ACTION_HELP.items():
            logger.info('Action message "{device-id} %s" - %s', action, description)

    async def startup(self) -> None:
        """Discover receiver capabilities and mirror the current state."""
        logger.info("Yamaha Speaker Integration starting up...")
        self.log_configuration()

        await self.client.connect()
        await self.controller.discover_volume_ranges()
        await self.controller.initialize_virtual_device_states()

        logger.info("Yamaha Speaker Integration ready")
        self._running = True

    async def shutdown(self) -> None:
        """Close the receiver client."""
        logger.info("Yamaha Speaker Integration shutting down...")
        self._running = False
        await self.client.close()
        logger.info("Yamaha Speaker Integration stopped")

    async def handle_line(self, text: str) -> None:
        """Route one interactive line to the dispatcher."""
        twist = parse_twist_command(text, self.config.control.dimmable_type)
        if twist is not None:
            meta, values = twist
            await self.dispatcher.handle_virtual_device_update(meta, values)
            return
        await self.dispatcher.handle_action_message(text)

    async def run_interactive(self) -> None:
        """Run in interactive text mode (for testing)."""
        await self.startup()

        print("\nYXC Bridge Interactive Mode")
        print('Type "{device-id} {action}" or "twist {device-id} {0.0-1.0}", or "quit" to exit\n')

        try:
            while self._running:
                try:
                    text = await asyncio.get_event_loop().run_in_executor(
                        None, input, "> "
                    )
                except EOFError:
                    break

                if text.lower().strip() in ("quit", "exit", "q"):
                    break

                if not text.strip():
                    continue

                await self.handle_line(text)

        except KeyboardInterrupt:
            print("\nInterrupted")

        finally:
            await self.shutdown()

    async def run_service(self) -> None:
        """Run until SIGINT/SIGTERM."""
        await self.startup()

        loop = asyncio.get_event_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, self._shutdown_event.set)

        try:
            await self._shutdown_event.wait()
        finally:
            await self.shutdown()


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Yamaha YXC bridge for buttons and twist controllers")
    parser.add_argument(
        "--mode",
        choices=["service", "interactive"],
        default="interactive",
        help="Running mode (default: interactive)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        type=str.upper,
        choices=LOG_LEVELS,
        help="Override the configured log level",
    )
    args = parser.parse_args()

    if args.log_level:
        logging.getLogger().setLevel(args.log_level)

    app = BridgeApplication()

    if args.mode == "interactive":
        asyncio.run(app.run_interactive())
    else:
        asyncio.run(app.run_service())


if __name__ == "__main__":
    main()
