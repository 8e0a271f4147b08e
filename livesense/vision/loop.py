"""
Video Detection Loop
====================

Self-rescheduling detection loop paced at the display refresh rate.

Each cycle runs to completion (including inference) before the next one is
scheduled. Between cycles the loop yields to the event loop and checks an
explicit stop flag, so tearing down the hosting context ends the loop.
There is no change detection here: every detection of every frame is drawn.
"""

import asyncio
from enum import Enum
from typing import Awaitable, Callable, Optional

from livesense.interfaces import FramePresenter, FrameSource, ObjectDetector
from livesense.logging_utils import generate_trace_id, get_component_logger, trace_context

logger = get_component_logger(__name__, "video_loop")


class CycleOutcome(str, Enum):
    MODEL_NOT_READY = "model_not_ready"
    NO_FRAME = "no_frame"
    RENDERED = "rendered"
    FAILED = "failed"


class VideoDetectionLoop:
    """
    Args:
        detector: Object detector (inference provider)
        source: Frame source (camera)
        presenter: Draws and shows detections
        target_fps: Cycles per second

    Example:
        >>> loop = VideoDetectionLoop(detector, CameraFrameSource(0), presenter)
        >>> task = asyncio.create_task(loop.run(model_loader=detector.load))
        >>> # ...
        >>> loop.stop()
        >>> await task
    """

    def __init__(
        self,
        detector: ObjectDetector,
        source: FrameSource,
        presenter: FramePresenter,
        target_fps: float = 60.0,
    ):
        self.detector = detector
        self.source = source
        self.presenter = presenter
        self.frame_interval = 1.0 / target_fps

        self._stop_event = asyncio.Event()
        self._load_error: Optional[BaseException] = None

        self.cycles = 0
        self.frames_rendered = 0

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def stop(self) -> None:
        """Request the loop to end at the next cycle boundary."""
        self._stop_event.set()

    async def detect_objects(self) -> CycleOutcome:
        """
        Run one cycle. Never raises for a missing model or frame.
        """
        if not self.detector.is_ready():
            return CycleOutcome.MODEL_NOT_READY

        loop = asyncio.get_running_loop()
        frame = await loop.run_in_executor(None, self.source.read)
        if frame is None:
            return CycleOutcome.NO_FRAME

        try:
            detections = await self.detector.detect(frame)
        except Exception as e:
            logger.error(
                f"Detection failed: {e}",
                extra={"event": "detect_failed", "error_type": type(e).__name__},
            )
            return CycleOutcome.FAILED

        self.presenter.present(frame, detections)
        self.frames_rendered += 1
        return CycleOutcome.RENDERED

    async def run(self, model_loader: Optional[Callable[[], Awaitable[None]]] = None) -> None:
        """
        Run cycles until ``stop()``.

        Args:
            model_loader: Loads the model concurrently with the loop. Until it
                completes, cycles skip inference. If it fails the loop stops
                and the error is re-raised here.

        Raises:
            ModelLoadError: If ``model_loader`` failed
        """
        with trace_context(generate_trace_id("video")):
            logger.info(
                "Video loop started",
                extra={"event": "video_loop_started", "model_id": getattr(self.detector, "model_id", None)},
            )

            load_task = None
            if model_loader is not None:
                load_task = asyncio.ensure_future(model_loader())
                load_task.add_done_callback(self._on_model_loaded)

            try:
                while not self._stop_event.is_set():
                    await self.detect_objects()
                    self.cycles += 1
                    await self._yield_until_next_cycle()
            finally:
                if load_task is not None and not load_task.done():
                    load_task.cancel()
                self.source.release()
                logger.info(
                    "Video loop stopped",
                    extra={"event": "video_loop_stopped", "cycles": self.cycles, "frames_rendered": self.frames_rendered},
                )

            if self._load_error is not None:
                raise self._load_error

    async def _yield_until_next_cycle(self) -> None:
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=self.frame_interval)
        except asyncio.TimeoutError:
            pass

    def _on_model_loaded(self, task: "asyncio.Future") -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self._load_error = error
            self.stop()
