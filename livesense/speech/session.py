"""
Listening Session
=================

Owned handle for the active recognizer session on one logical input.

States::

    IDLE --start()--> STARTING --ok--> ACTIVE --stop()--> STOPPING --> IDLE
                         |
                         +--error--> IDLE

Device switches are serialized and always await the old session's teardown
before the new one starts, so two sessions never hold the same input.
"""

import asyncio
from enum import Enum
from typing import Optional

from livesense.exceptions import SessionStateError
from livesense.interfaces import ResultCallback, SpeechRecognizer
from livesense.logging_utils import generate_trace_id, get_component_logger, trace_context
from livesense.speech.config import ListenOptions

logger = get_component_logger(__name__, "session")


class SessionState(str, Enum):
    IDLE = "idle"
    STARTING = "starting"
    ACTIVE = "active"
    STOPPING = "stopping"


class ListeningSession:
    """
    State machine around ``SpeechRecognizer.listen`` / ``stop_listening``.

    Args:
        recognizer: Speech recognizer (inference provider)
        callback: Receives every RecognitionResult
        options: Base listen options; ``device_id`` is replaced per start

    Example:
        >>> session = ListeningSession(recognizer, detector.on_result, ListenOptions())
        >>> await session.start("1")
        >>> await session.switch_device("3")   # stop "1", then start "3"
        >>> await session.stop()
    """

    def __init__(self, recognizer: SpeechRecognizer, callback: ResultCallback, options: ListenOptions):
        self.recognizer = recognizer
        self.callback = callback
        self.options = options

        self._state = SessionState.IDLE
        self._device_id: Optional[str] = options.device_id
        self._trace_id: Optional[str] = None
        self._switch_lock = asyncio.Lock()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def device_id(self) -> Optional[str]:
        return self._device_id

    @property
    def trace_id(self) -> Optional[str]:
        return self._trace_id

    async def start(self, device_id: Optional[str] = None) -> None:
        """
        Start listening on ``device_id`` (or the configured device).

        Raises:
            SessionStateError: If the session is not IDLE
            DeviceUnavailableError: If the recognizer cannot open the device
        """
        if self._state is not SessionState.IDLE:
            raise SessionStateError(f"Cannot start session in state {self._state.value}")

        target = device_id if device_id is not None else self._device_id
        options = self.options.with_device(target)

        self._state = SessionState.STARTING
        trace_id = generate_trace_id("session")

        with trace_context(trace_id):
            logger.info(
                "Starting listening session",
                extra={"event": "session_starting", "device_id": target},
            )
            try:
                await self.recognizer.listen(self.callback, options)
            except asyncio.CancelledError:
                self._state = SessionState.IDLE
                logger.warning(
                    "Listening session start cancelled",
                    extra={"event": "session_start_cancelled", "device_id": target},
                )
                raise
            except Exception as e:
                self._state = SessionState.IDLE
                logger.error(
                    "Failed to start listening session",
                    extra={
                        "event": "session_start_failed",
                        "device_id": target,
                        "error_type": type(e).__name__,
                        "error_message": str(e),
                    },
                )
                raise

            self._state = SessionState.ACTIVE
            self._device_id = target
            self._trace_id = trace_id
            logger.info(
                "Listening session active",
                extra={"event": "session_active", "device_id": target},
            )

    async def stop(self) -> None:
        """
        Stop listening and wait for the recognizer teardown.

        Waits for an in-flight device switch to finish first, then tears
        down whatever session it left. No-op when IDLE.

        Raises:
            SessionStateError: If a start or stop is in progress
        """
        async with self._switch_lock:
            await self._stop()

    async def switch_device(self, device_id: Optional[str]) -> None:
        """
        Move the session to another input device.

        Stops the current session (awaiting teardown) before starting the new
        one. Concurrent switches run one after another.
        """
        async with self._switch_lock:
            logger.info(
                "Switching input device",
                extra={"event": "device_switch", "from_device": self._device_id, "to_device": device_id},
            )
            if self._state is SessionState.ACTIVE:
                await self._stop()
            await self.start(device_id)

    async def _stop(self) -> None:
        if self._state is SessionState.IDLE:
            return
        if self._state is not SessionState.ACTIVE:
            raise SessionStateError(f"Cannot stop session in state {self._state.value}")

        self._state = SessionState.STOPPING
        try:
            await self.recognizer.stop_listening()
        finally:
            # a failed teardown may still hold the device
            self._state = SessionState.ACTIVE if self.recognizer.is_listening() else SessionState.IDLE

        logger.info(
            "Listening session stopped",
            extra={"event": "session_stopped", "device_id": self._device_id, "trace_id": self._trace_id},
        )
        self._trace_id = None
