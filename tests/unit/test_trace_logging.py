"""Unit tests for very-verbose trace logging."""

import logging

import pytest
import structlog

from ecstrace.utils import logging as trace


@pytest.fixture
def trace_file(tmp_path):
    """Enable trace logging into a temporary file."""
    path = tmp_path / "logs" / "trace.log"
    trace.enable_trace_logging(path)
    yield path
    trace.disable_trace_logging()


def test_disabled_by_default():
    """Test tracing is off until enabled."""
    assert trace.is_trace_enabled() is False
    assert trace.get_trace_file_path() is None


def test_helpers_are_noops_when_disabled(tmp_path):
    """Test logging calls do nothing while disabled."""
    trace.log_api_call("ecs", "describe_tasks", {"cluster": "prod"})
    trace.log_info("nothing")

    assert list(tmp_path.iterdir()) == []


def test_enable_creates_parent_directory(trace_file):
    """Test the log directory is created."""
    assert trace.is_trace_enabled() is True
    assert trace.get_trace_file_path() == trace_file
    assert trace_file.exists()


def test_api_call_logged(trace_file):
    """Test AWS calls are written with their parameters."""
    trace.log_api_call("logs", "get_log_events", {"logStreamName": "ecs/app/0a1b2c3d"})

    content = trace_file.read_text()
    assert "AWS CALL | logs.get_log_events" in content
    assert "ecs/app/0a1b2c3d" in content


def test_page_logged(trace_file):
    """Test paging decisions are written."""
    trace.log_page("ecs/app/0a1b2c3d", 3, 50, "f/003", "capped")

    assert "PAGE | ecs/app/0a1b2c3d | iteration=3 records=50 state=capped token=f/003" in trace_file.read_text()


def test_levels_logged(trace_file):
    """Test messages keep their level."""
    trace.log_debug("debug message")
    trace.log_warning("warning message")
    trace.log_error("error message")

    content = trace_file.read_text()
    assert "DEBUG    | debug message" in content
    assert "WARNING  | warning message" in content
    assert "ERROR    | error message" in content


def test_disable_resets_state(trace_file):
    """Test disabling stops writing."""
    trace.disable_trace_logging()
    trace.log_info("after disable")

    assert trace.is_trace_enabled() is False
    assert "after disable" not in trace_file.read_text()


def test_configure_logging_filters_by_level(capsys):
    """Test module loggers print to stderr at or above the configured level."""
    trace.configure_logging(logging.INFO)
    try:
        logger = structlog.get_logger("ecstrace.tests")
        logger.debug("hidden detail")
        logger.info("stream capped", stream="ecs/app/0a1b2c3d")
    finally:
        structlog.reset_defaults()

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "stream capped" in captured.err
    assert "stream=ecs/app/0a1b2c3d" in captured.err
    assert "hidden detail" not in captured.err
