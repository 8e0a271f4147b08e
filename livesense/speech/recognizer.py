"""
Streaming Speech Recognizer
===========================

Microphone capture (sounddevice) feeding an opaque speech-commands
classifier, delivering score batches to a callback on the event loop.

Threading:
- PortAudio calls ``_audio_callback`` on its own thread. It only slices the
  sliding window and hands it to the event loop (``call_soon_threadsafe``).
- Classification runs on a single-worker executor so results arrive in
  order and the audio thread never blocks.
- The result callback always runs on the event loop thread.
"""

import asyncio
import contextvars
import inspect
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence, Set

import numpy as np

from livesense.exceptions import DeviceUnavailableError, ModelLoadError, SessionStateError
from livesense.interfaces import RecognitionResult, ResultCallback, SpeechClassifier
from livesense.logging_utils import get_component_logger
from livesense.speech.config import ListenOptions

logger = get_component_logger(__name__, "recognizer")

BACKGROUND_NOISE_LABEL = "_background_noise_"
UNKNOWN_WORD_LABEL = "_unknown_"
NOISE_AND_UNKNOWN_LABELS = frozenset({BACKGROUND_NOISE_LABEL, UNKNOWN_WORD_LABEL})


def hop_length(window_samples: int, overlap_factor: float) -> int:
    """
    Samples between the starts of consecutive windows.

    Examples:
        >>> hop_length(16000, 0.5)
        8000
        >>> hop_length(16000, 0.0)
        16000
    """
    return max(1, int(round(window_samples * (1 - overlap_factor))))


def should_deliver(scores: Sequence[float], labels: Sequence[str], options: ListenOptions) -> bool:
    """
    Apply the recognizer's delivery rules to one score vector.

    - Best score below ``probability_threshold`` is suppressed.
    - Best label is background noise or unknown: suppressed unless
      ``invoke_callback_on_noise_and_unknown`` is set.
    """
    if len(scores) == 0:
        return False

    best = int(np.argmax(scores))
    if scores[best] < options.probability_threshold:
        return False

    if not options.invoke_callback_on_noise_and_unknown and best < len(labels):
        if labels[best] in NOISE_AND_UNKNOWN_LABELS:
            return False

    return True


def _default_stream_factory(**kwargs) -> Any:
    try:
        import sounddevice as sd
    except (ImportError, OSError) as e:
        raise ImportError(
            f"Microphone capture requires 'sounddevice' and PortAudio: {e}. "
            "Install with: pip install livesense[audio]"
        ) from e
    return sd.InputStream(**kwargs)


class StreamingSpeechRecognizer:
    """
    SpeechRecognizer backed by a live microphone stream.

    Args:
        classifier: Opaque model scoring one window of ``window_samples``
        sample_rate: Microphone sample rate (must match the model)
        stream_factory: Builds the input stream, ``sounddevice.InputStream``
            by default. Receives samplerate/channels/dtype/device/blocksize/callback.

    Example:
        >>> classifier = load_speech_classifier("speech.tflite", "labels.txt")
        >>> recognizer = StreamingSpeechRecognizer(classifier)
        >>> await recognizer.listen(on_result, ListenOptions(device_id="2"))
        >>> # ...
        >>> await recognizer.stop_listening()
    """

    def __init__(
        self,
        classifier: SpeechClassifier,
        sample_rate: int = 16000,
        stream_factory: Optional[Callable[..., Any]] = None,
    ):
        self.classifier = classifier
        self.sample_rate = sample_rate
        self.stream_factory = stream_factory or _default_stream_factory

        self._stream: Optional[Any] = None
        self._executor: Optional[ThreadPoolExecutor] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._context: Optional[contextvars.Context] = None
        self._callback: Optional[ResultCallback] = None
        self._options: Optional[ListenOptions] = None

        self._listening = False
        self._busy = False
        self._buffer = np.zeros(0, dtype=np.float32)
        self._pending_samples = 0
        self._hop = classifier.window_samples

        self._tasks: Set[asyncio.Task] = set()

        self.dropped_windows = 0

    def word_labels(self) -> List[str]:
        return list(self.classifier.labels)

    def is_listening(self) -> bool:
        return self._listening

    async def listen(self, callback: ResultCallback, options: ListenOptions) -> None:
        """
        Open the microphone and start delivering results.

        Raises:
            SessionStateError: If already listening
            DeviceUnavailableError: If the device cannot be opened
        """
        if self._listening:
            raise SessionStateError("Recognizer is already listening")

        self._loop = asyncio.get_running_loop()
        # Results are delivered in the caller's context (keeps the session trace id)
        self._context = contextvars.copy_context()
        self._callback = callback
        self._options = options
        self._hop = hop_length(self.classifier.window_samples, options.overlap_factor)
        self._buffer = np.zeros(0, dtype=np.float32)
        self._pending_samples = 0
        self._busy = False
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="speech-classifier")

        device = self._resolve_device(options.device_id)

        opening = self._loop.run_in_executor(None, self._open_stream, device)
        try:
            self._stream = await asyncio.shield(opening)
        except asyncio.CancelledError:
            # the open keeps running in its thread; close the stream once it lands
            opening.add_done_callback(self._close_abandoned_stream)
            self._release_executor()
            raise
        except Exception as e:
            self._release_executor()
            raise DeviceUnavailableError(str(options.device_id or "default"), original_error=e) from e

        self._listening = True

        logger.info(
            "Microphone stream started",
            extra={
                "event": "stream_started",
                "device_id": options.device_id,
                "sample_rate": self.sample_rate,
                "window_samples": self.classifier.window_samples,
                "hop_samples": self._hop,
            },
        )

    async def stop_listening(self) -> None:
        """Stop the stream, drain the classifier worker and release the device."""
        if not self._listening and self._stream is None:
            return

        self._listening = False
        loop = asyncio.get_running_loop()

        stream, self._stream = self._stream, None
        executor, self._executor = self._executor, None

        if stream is not None:
            await loop.run_in_executor(None, self._close_stream, stream)
        if executor is not None:
            await loop.run_in_executor(None, executor.shutdown, True)

        self._buffer = np.zeros(0, dtype=np.float32)
        self._pending_samples = 0

        logger.info(
            "Microphone stream stopped",
            extra={"event": "stream_stopped", "dropped_windows": self.dropped_windows},
        )

    # ========================================================================
    # Private: stream lifecycle (executor threads)
    # ========================================================================

    def _open_stream(self, device: Any) -> Any:
        stream = self.stream_factory(
            samplerate=self.sample_rate,
            channels=1,
            dtype="float32",
            device=device,
            blocksize=self._hop,
            callback=self._audio_callback,
        )
        stream.start()
        return stream

    @staticmethod
    def _close_stream(stream: Any) -> None:
        stream.stop()
        stream.close()

    def _release_executor(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None

    def _close_abandoned_stream(self, opening: "asyncio.Future") -> None:
        if opening.cancelled() or opening.exception() is not None:
            return
        try:
            self._close_stream(opening.result())
        except Exception as e:
            logger.error(
                f"Failed to close abandoned stream: {e}",
                extra={"event": "stream_close_failed", "error_type": type(e).__name__},
            )

    @staticmethod
    def _resolve_device(device_id: Optional[str]) -> Any:
        """sounddevice accepts an index or a name substring."""
        if device_id is None:
            return None
        if device_id.isdigit():
            return int(device_id)
        return device_id

    # ========================================================================
    # Private: audio thread
    # ========================================================================

    def _audio_callback(self, indata, frames, time_info, status) -> None:
        if status:
            logger.debug(f"Audio status: {status}", extra={"event": "audio_status"})

        window_samples = self.classifier.window_samples
        chunk = np.asarray(indata, dtype=np.float32)
        if chunk.ndim > 1:
            chunk = chunk[:, 0]

        self._buffer = np.concatenate([self._buffer, chunk])[-window_samples:]
        self._pending_samples += len(chunk)

        if len(self._buffer) < window_samples or self._pending_samples < self._hop:
            return

        self._pending_samples = 0
        window = self._buffer.copy()
        self._loop.call_soon_threadsafe(self._on_window, window, context=self._context)

    # ========================================================================
    # Private: event loop thread
    # ========================================================================

    def _on_window(self, window: np.ndarray) -> None:
        if not self._listening:
            return
        if self._busy:
            self.dropped_windows += 1
            return
        self._busy = True
        task = self._loop.create_task(self._classify_and_deliver(window))
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: "asyncio.Task") -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(
                f"Result delivery failed: {error}",
                extra={"event": "deliver_failed", "error_type": type(error).__name__},
            )

    async def _classify_and_deliver(self, window: np.ndarray) -> None:
        executor = self._executor
        try:
            if executor is None:
                return
            result = await self._loop.run_in_executor(executor, self.classifier.classify, window)
        except Exception as e:
            logger.error(
                f"Classification failed: {e}",
                extra={"event": "classify_failed", "error_type": type(e).__name__},
            )
            return
        finally:
            self._busy = False

        if not self._listening:
            return

        if not should_deliver(result.scores, self.classifier.labels, self._options):
            return

        if not self._options.include_spectrogram:
            result = RecognitionResult(scores=list(result.scores))

        outcome = self._callback(result)
        if inspect.isawaitable(outcome):
            await outcome


class TFLiteSpeechClassifier:
    """
    SpeechClassifier running a TFLite speech-commands model.

    The model takes a raw waveform ``[1, window_samples]`` and returns class
    probabilities ``[1, len(labels)]``. A second output, when the model has
    one, is passed through as the spectrogram.

    Args:
        interpreter: Allocated ``tf.lite.Interpreter``
        labels: Label vocabulary aligned with the model output
    """

    def __init__(self, interpreter: Any, labels: List[str]):
        self.interpreter = interpreter
        self.labels = labels

        self._input = interpreter.get_input_details()[0]
        outputs = interpreter.get_output_details()
        self._scores_output = outputs[0]
        self._spectrogram_output = outputs[1] if len(outputs) > 1 else None

        self.window_samples = int(np.prod(self._input["shape"][1:]))

        n_classes = int(self._scores_output["shape"][-1])
        if n_classes != len(labels):
            raise ModelLoadError(
                "speech classifier",
                original_error=ValueError(
                    f"model has {n_classes} outputs but {len(labels)} labels were given"
                ),
            )

    def classify(self, window: np.ndarray) -> RecognitionResult:
        data = np.asarray(window, dtype=self._input["dtype"]).reshape(tuple(self._input["shape"]))
        self.interpreter.set_tensor(self._input["index"], data)
        self.interpreter.invoke()

        scores = self.interpreter.get_tensor(self._scores_output["index"])[0]
        spectrogram = None
        if self._spectrogram_output is not None:
            spectrogram = self.interpreter.get_tensor(self._spectrogram_output["index"])

        return RecognitionResult(scores=[float(s) for s in scores], spectrogram=spectrogram)


def read_labels(labels_path: str) -> List[str]:
    """One label per line; blank lines are skipped."""
    lines = Path(labels_path).read_text(encoding="utf-8").splitlines()
    return [line.strip() for line in lines if line.strip()]


def load_speech_classifier(model_path: str, labels_path: str) -> TFLiteSpeechClassifier:
    """
    Load a TFLite speech-commands model and its labels.

    Raises:
        ModelLoadError: If TensorFlow is missing or the files cannot be loaded
    """
    logger.info(
        "Loading speech classifier",
        extra={"event": "model_load_start", "model_path": model_path},
    )

    try:
        import tensorflow as tf

        labels = read_labels(labels_path)
        interpreter = tf.lite.Interpreter(model_path=model_path)
        interpreter.allocate_tensors()
        classifier = TFLiteSpeechClassifier(interpreter, labels)
    except ModelLoadError:
        raise
    except Exception as e:
        logger.error(
            "Failed to load speech classifier",
            extra={"event": "model_load_failed", "error_type": type(e).__name__, "error_message": str(e)},
        )
        raise ModelLoadError(model_path, original_error=e) from e

    logger.info(
        "Speech classifier loaded",
        extra={"event": "model_loaded", "labels": len(classifier.labels)},
    )
    return classifier
