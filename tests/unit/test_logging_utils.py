"""
Tests for structured logging helpers
"""

import json
import logging

from livesense.logging_utils import (
    generate_trace_id,
    get_component_logger,
    get_trace_id,
    setup_structured_logging,
    trace_context,
)


def test_generate_trace_id_prefix():
    trace_id = generate_trace_id("session")
    assert trace_id.startswith("session-")
    assert len(trace_id) == len("session-") + 8
    assert generate_trace_id("session") != trace_id


def test_trace_context_binds_and_resets():
    assert get_trace_id() is None

    with trace_context("session-1") as tid:
        assert tid == "session-1"
        assert get_trace_id() == "session-1"
        with trace_context("session-2"):
            assert get_trace_id() == "session-2"
        assert get_trace_id() == "session-1"

    assert get_trace_id() is None


def test_component_logger_stamps_component_and_trace(caplog):
    logger = get_component_logger("livesense.test", "session")

    with caplog.at_level(logging.INFO, logger="livesense.test"):
        with trace_context("session-abc"):
            logger.info("Session active", extra={"event": "session_active"})

    record = caplog.records[-1]
    assert record.component == "session"
    assert record.trace_id == "session-abc"
    assert record.event == "session_active"


def test_call_site_extra_overrides_component(caplog):
    logger = get_component_logger("livesense.test", "session")

    with caplog.at_level(logging.INFO, logger="livesense.test"):
        logger.info("x", extra={"component": "other"})

    assert caplog.records[-1].component == "other"
    assert not hasattr(caplog.records[-1], "trace_id")


def test_json_log_file(tmp_path):
    log_file = tmp_path / "logs" / "livesense.log"
    root = logging.getLogger()
    previous = list(root.handlers), root.level

    try:
        setup_structured_logging(level="INFO", json_format=True, output_file=str(log_file))
        logger = get_component_logger("livesense.test", "video_loop")
        with trace_context("video-1"):
            logger.info("Video loop started", extra={"event": "video_loop_started"})
        for handler in root.handlers:
            handler.flush()
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = previous[0]
        root.setLevel(previous[1])

    entry = json.loads(log_file.read_text().strip().splitlines()[-1])
    assert entry["message"] == "Video loop started"
    assert entry["level"] == "INFO"
    assert entry["component"] == "video_loop"
    assert entry["trace_id"] == "video-1"
