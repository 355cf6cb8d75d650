"""
YXC Bridge - button and twist controller bridge for Yamaha receivers.

Translates action messages ("{device-id} {action}") and twist controller
values into Yamaha Extended Control HTTP requests, and mirrors receiver
volume back into the virtual devices.

Architecture:
- config: Pydantic Settings configuration (speakers, timeouts, cooldown)
- yamaha/: YXC HTTP client and endpoint paths
- controller: Speaker actions, playback control and state mirroring
- dispatcher: Action message and virtual device routing
- hub: Virtual device hub interface
"""

__version__ = "0.1.0"

from .config import settings, BridgeConfig
from .main import BridgeApplication, main

__all__ = [
    "settings",
    "BridgeConfig",
    "BridgeApplication",
    "main",
]
