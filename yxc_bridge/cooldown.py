"""
Shared cooldown after playback commands.

A single timestamp is recorded whenever the skip device issues a playback
command. Until the cooldown elapses, further playback commands and all
volume changes are refused, so the twist gesture that triggered a skip is
not also read as a volume change.
"""

import math
import time
from typing import Callable, Optional


def _now_ms() -> float:
    return time.time() * 1000.0


class PlaybackCooldown:
    """Single last-command timestamp compared against a fixed window."""

    def __init__(
        self,
        cooldown_ms: int = 2500,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Args:
            cooldown_ms: Cooldown window in milliseconds
            clock: Returns the current time in milliseconds
        """
        self.cooldown_ms = cooldown_ms
        self._clock = clock or _now_ms
        self.last_command_ms: float = 0.0

    def now(self) -> float:
        return self._clock()

    def remaining_ms(self, now: Optional[float] = None) -> float:
        """Milliseconds left in the cooldown window (0 when inactive)."""
        if now is None:
            now = self.now()
        elapsed = now - self.last_command_ms
        if elapsed >= self.cooldown_ms:
            return 0.0
        return self.cooldown_ms - elapsed

    def remaining_seconds(self, now: Optional[float] = None) -> int:
        """Remaining cooldown rounded up to whole seconds."""
        return math.ceil(self.remaining_ms(now) / 1000)

    def is_active(self, now: Optional[float] = None) -> bool:
        return self.remaining_ms(now) > 0

    def mark(self, now: Optional[float] = None) -> None:
        """Record a playback command."""
        self.last_command_ms = self.now() if now is None else now

    def reset(self) -> None:
        self.last_command_ms = 0.0
