"""
CLI entry point for livesense
"""

import asyncio
import os
import signal
import sys

import click

from livesense.logging_utils import get_component_logger, setup_structured_logging

JSON_LOGS = os.getenv("JSON_LOGS", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

setup_structured_logging(
    level=LOG_LEVEL,
    json_format=JSON_LOGS,
    output_file=os.getenv("LOG_FILE"),
)

logger = get_component_logger(__name__, "cli")


def _install_stop_handlers(stop):
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop)


@click.group()
def main():
    """livesense - live speech-command and object detection"""
    pass


@main.command()
@click.option("--max-cameras", type=int, default=5, help="Camera indices to probe")
def devices(max_cameras):
    """List microphones and cameras"""
    from livesense.devices import list_cameras, list_microphones
    from livesense.exceptions import DeviceUnavailableError

    click.echo("Microphones:")
    try:
        for dev in list_microphones():
            marker = "*" if dev.is_default else " "
            click.echo(f" {marker} {dev.device_id:>3}  {dev.name}")
    except (DeviceUnavailableError, ImportError) as e:
        click.echo(f"   unavailable: {e}")

    click.echo("Cameras:")
    for dev in list_cameras(max_index=max_cameras):
        marker = "*" if dev.is_default else " "
        click.echo(f" {marker} {dev.device_id:>3}  {dev.name}")


@main.command()
@click.option("--model", "model_path", required=True, type=click.Path(exists=True, dir_okay=False), help="TFLite speech-commands model")
@click.option("--labels", "labels_path", required=True, type=click.Path(exists=True, dir_okay=False), help="Label file, one label per line")
@click.option("--device", "device_id", default=None, help="Microphone id from 'livesense devices' (default: system default)")
@click.option("--sample-rate", type=int, default=16000, help="Microphone sample rate in Hz")
@click.option("--threshold", type=float, default=0.75, help="Minimum top score for a result to be delivered")
@click.option("--overlap", type=float, default=0.5, help="Overlap factor between analysis windows [0, 1)")
@click.option("--include-spectrogram", is_flag=True, default=False, help="Attach model spectrograms to results")
@click.option("--noise-and-unknown", is_flag=True, default=False, help="Deliver background-noise/unknown results")
@click.option("--notify-baseline", is_flag=True, default=False, help="Also notify the first top prediction")
@click.option("--mqtt-host", default=None, help="MQTT broker host (default: $LIVESENSE_MQTT_HOST or localhost)")
@click.option("--mqtt-port", type=int, default=1883, help="MQTT broker port")
@click.option("--topic-prefix", default="livesense/detections", help="MQTT topic prefix")
@click.option("--no-notify", is_flag=True, default=False, help="Do not connect to MQTT, only print predictions")
@click.option("--json-logs", is_flag=True, default=False, help="Output logs in JSON format")
def listen(model_path, labels_path, device_id, sample_rate, threshold, overlap, include_spectrogram,
           noise_and_unknown, notify_baseline, mqtt_host, mqtt_port, topic_prefix, no_notify, json_logs):
    """Classify microphone audio and relay top-prediction changes over MQTT"""
    from livesense.exceptions import LivesenseError
    from livesense.speech import ListenOptions, SpeechDetectorConfig

    if json_logs:
        setup_structured_logging(level=LOG_LEVEL, json_format=True)

    if mqtt_host is None:
        mqtt_host = os.getenv("LIVESENSE_MQTT_HOST", "localhost")

    try:
        config = SpeechDetectorConfig(
            model_path=model_path,
            labels_path=labels_path,
            sample_rate=sample_rate,
            listen=ListenOptions(
                include_spectrogram=include_spectrogram,
                probability_threshold=threshold,
                invoke_callback_on_noise_and_unknown=noise_and_unknown,
                overlap_factor=overlap,
                device_id=device_id,
            ),
            notify_on_baseline=notify_baseline,
            mqtt_host=mqtt_host,
            mqtt_port=mqtt_port,
            mqtt_topic_prefix=topic_prefix,
        )
        asyncio.run(_run_listen(config, notify=not no_notify))
    except LivesenseError as e:
        raise click.ClickException(str(e))


async def _run_listen(config, notify: bool):
    from livesense.notify import sink_from_config
    from livesense.speech import PredictionBoard, SpeechDetector, StreamingSpeechRecognizer, load_speech_classifier

    logger.info("Starting speech detector", extra={"event": "speech_start", **config.to_status_dict()})

    classifier = await asyncio.to_thread(load_speech_classifier, config.model_path, config.labels_path)
    recognizer = StreamingSpeechRecognizer(classifier, sample_rate=config.sample_rate)

    sink = sink_from_config(config) if notify else None
    board = PredictionBoard(listener=lambda b: click.echo(b.format_table() + "\n"))
    detector = SpeechDetector(recognizer, config, sink=sink, board=board)

    stop_event = asyncio.Event()
    _install_stop_handlers(stop_event.set)
    loop = asyncio.get_running_loop()
    tasks = set()

    def on_line(requested):
        _spawn(loop, _switch(detector, requested), tasks)

    watching = False
    try:
        await detector.start()
        watching = _watch_stdin(loop, on_line)
        if watching:
            click.echo("Listening. Type a microphone id and press Enter to switch, Ctrl+C to exit.")
        else:
            click.echo("Listening. Ctrl+C to exit.")
        await stop_event.wait()
    finally:
        if watching:
            loop.remove_reader(sys.stdin)
        # waits for an in-flight switch, then releases the microphone
        await detector.stop()
        if sink is not None:
            sink.close()
        click.echo(f"Notifications sent: {detector.notifications_sent}")


def _watch_stdin(loop, on_line) -> bool:
    """
    Call ``on_line`` with every non-empty line typed on stdin.

    Returns:
        False when stdin is not an interactive terminal (pipe, file) and is
        not watched
    """
    if not sys.stdin.isatty():
        return False

    def on_readable():
        line = sys.stdin.readline()
        if not line:
            loop.remove_reader(sys.stdin)
            return
        requested = line.strip()
        if requested:
            on_line(requested)

    try:
        loop.add_reader(sys.stdin, on_readable)
    except (PermissionError, NotImplementedError) as e:
        logger.warning(
            f"Cannot watch stdin for device switches: {e}",
            extra={"event": "stdin_unavailable", "error_type": type(e).__name__},
        )
        return False
    return True


def _spawn(loop, coro, tasks: set) -> "asyncio.Task":
    """Run ``coro`` in the background, keeping a reference and logging failures."""
    task = loop.create_task(coro)
    tasks.add(task)

    def on_done(finished):
        tasks.discard(finished)
        if finished.cancelled():
            return
        error = finished.exception()
        if error is not None:
            logger.error(
                f"Background task failed: {error}",
                extra={"event": "task_failed", "error_type": type(error).__name__},
            )

    task.add_done_callback(on_done)
    return task


async def _switch(detector, device_id):
    from livesense.exceptions import LivesenseError

    try:
        await detector.switch_device(device_id)
        click.echo(f"Switched to microphone {device_id or 'default'}")
    except LivesenseError as e:
        click.echo(f"Could not switch microphone: {e}", err=True)


@main.command()
@click.option("--model", "model_id", default="yolov8n-640", help="Roboflow model ID")
@click.option("--camera", "camera_index", type=int, default=0, help="Camera index from 'livesense devices'")
@click.option("--fps", "target_fps", type=float, default=60.0, help="Loop cycles per second")
@click.option("--confidence", type=float, default=0.5, help="Minimum detection confidence")
@click.option("--window-name", default="livesense", help="Window title")
@click.option("--json-logs", is_flag=True, default=False, help="Output logs in JSON format")
def watch(model_id, camera_index, target_fps, confidence, window_name, json_logs):
    """Detect objects on the webcam and draw bounding boxes (press q to quit)"""
    from livesense.exceptions import LivesenseError
    from livesense.vision import ObjectDetectorConfig

    if json_logs:
        setup_structured_logging(level=LOG_LEVEL, json_format=True)

    try:
        config = ObjectDetectorConfig(
            model_id=model_id,
            camera_index=camera_index,
            target_fps=target_fps,
            confidence_threshold=confidence,
            window_name=window_name,
        )
        asyncio.run(_run_watch(config))
    except LivesenseError as e:
        raise click.ClickException(str(e))


async def _run_watch(config):
    from livesense.vision import (
        CameraFrameSource,
        DetectionRenderer,
        RoboflowObjectDetector,
        VideoDetectionLoop,
        WindowPresenter,
    )

    logger.info("Starting video detector", extra={"event": "video_start", **config.to_status_dict()})

    detector = RoboflowObjectDetector(config.model_id, config.confidence_threshold)
    presenter = WindowPresenter(DetectionRenderer(config), window_name=config.window_name)
    video_loop = VideoDetectionLoop(
        detector, CameraFrameSource(config.camera_index), presenter, target_fps=config.target_fps
    )
    presenter.on_quit = video_loop.stop
    _install_stop_handlers(video_loop.stop)

    try:
        await video_loop.run(model_loader=detector.load)
    finally:
        presenter.close()


if __name__ == "__main__":
    main()
