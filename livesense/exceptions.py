"""
Exceptions
==========

Error hierarchy for live detection.

All failures here are terminal to one feature (a listening session, a
video loop), never to the process:

    from livesense.exceptions import DeviceUnavailableError, LivesenseError

    try:
        await session.start("mic-1")
    except DeviceUnavailableError as e:
        logger.error(f"Microphone unavailable: {e}")
"""


class LivesenseError(Exception):
    """Base exception for all livesense errors."""
    pass


class ConfigValidationError(LivesenseError, ValueError):
    """Error in configuration validation."""
    pass


class DeviceUnavailableError(LivesenseError):
    """
    Input device could not be enumerated or opened.

    Raised when:
    - The requested microphone/camera does not exist
    - The audio/video backend refuses to open the stream
    """

    def __init__(self, device: str, message: str = None, original_error: Exception = None):
        self.device = device
        self.original_error = original_error
        msg = f"Device unavailable: {device}"
        if message:
            msg += f" ({message})"
        if original_error:
            msg += f" (caused by: {type(original_error).__name__}: {original_error})"
        super().__init__(msg)


class ModelLoadError(LivesenseError):
    """Model could not be loaded. Not retried."""

    def __init__(self, model: str, original_error: Exception = None):
        self.model = model
        self.original_error = original_error
        msg = f"Failed to load model {model}"
        if original_error:
            msg += f": {type(original_error).__name__}: {original_error}"
        super().__init__(msg)


class SessionStateError(LivesenseError):
    """Listening session transition requested from the wrong state."""
    pass


class ScoreVectorError(LivesenseError, ValueError):
    """Score vector does not line up with the label vocabulary."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Score vector has {actual} entries, label vocabulary has {expected}"
        )
