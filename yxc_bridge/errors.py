"""
Exceptions raised by the YXC bridge.
"""

from typing import Optional


class YamahaError(Exception):
    """Base class for receiver communication errors."""


class YamahaRequestError(YamahaError):
    """The HTTP request could not be completed."""


class YamahaTimeoutError(YamahaRequestError):
    """The receiver did not answer within the request timeout."""

    def __init__(self, message: str = "Request timeout"):
        super().__init__(message)


class YamahaApiError(YamahaError):
    """The receiver answered with a non-zero YXC response_code."""

    def __init__(self, path: str, response_code: int, message: Optional[str] = None):
        self.path = path
        self.response_code = response_code
        super().__init__(message or f"{path} returned response_code {response_code}")


class SpeakerNotFoundError(YamahaError):
    """No speaker is configured with the requested id."""

    def __init__(self, speaker_id: str):
        self.speaker_id = speaker_id
        super().__init__(f"Speaker {speaker_id} not found")
