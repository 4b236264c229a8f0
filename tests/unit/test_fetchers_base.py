"""Unit tests for base fetcher interface."""

import pytest
from datetime import datetime, timezone
from typing import Any

from ecstrace.fetchers.base import (
    BaseFetcher,
    FetchResult,
    FetchError,
    LogFetchError,
    ServiceEventsError,
    DiscoveryError,
    DataSourceNotFoundError,
    ClusterNotFoundError,
    TaskNotFoundError,
    ServiceNotFoundError,
)
from ecstrace.timeline import Event, Timeline


# Mock concrete fetcher implementation for testing
class MockFetcher(BaseFetcher):
    """Mock fetcher for testing base class."""

    def __init__(self, client: Any, should_fail: bool = False):
        self.should_fail = should_fail
        super().__init__(client)

    def fetch(self, timeline: Timeline) -> FetchResult:
        """Mock fetch implementation."""
        if self.should_fail:
            raise FetchError("Mock fetch failed", context="mock-stream")

        timeline.add(Event(datetime(2024, 3, 1, tzinfo=timezone.utc), "mock", "hello"))
        return FetchResult(source="mock", count=1, metadata={"client": self.client})

    def describe(self) -> str:
        return "mock-stream"


# Test FetchResult dataclass


def test_fetch_result_defaults():
    """Test FetchResult defaults to one request, not capped, no metadata."""
    result = FetchResult(source="app", count=3)

    assert result.iterations == 1
    assert result.stopped_early is False
    assert result.metadata == {}


def test_fetch_result_to_dict():
    """Test FetchResult can be serialized to dict."""
    result = FetchResult(
        source="app",
        count=30,
        iterations=10,
        stopped_early=True,
        metadata={"log_stream": "ecs/app/0a1b2c3d"},
    )

    assert result.to_dict() == {
        "source": "app",
        "count": 30,
        "iterations": 10,
        "stopped_early": True,
        "metadata": {"log_stream": "ecs/app/0a1b2c3d"},
    }


# Test exception hierarchy


def test_fetch_error_context_in_message():
    """Test FetchError shows its context."""
    error = FetchError("GetLogEvents failed", context="ecs/app/0a1b2c3d")

    assert error.context == "ecs/app/0a1b2c3d"
    assert str(error) == "GetLogEvents failed [ecs/app/0a1b2c3d]"


def test_fetch_error_without_context():
    """Test FetchError without context is a plain message."""
    with pytest.raises(FetchError, match="^test error$"):
        raise FetchError("test error")


@pytest.mark.parametrize(
    "error_class",
    [LogFetchError, ServiceEventsError, DiscoveryError, DataSourceNotFoundError],
)
def test_errors_are_fetch_errors(error_class):
    """Test every error type can be caught as FetchError."""
    with pytest.raises(FetchError):
        raise error_class("failed", context="x")


@pytest.mark.parametrize(
    "error_class",
    [ClusterNotFoundError, TaskNotFoundError, ServiceNotFoundError],
)
def test_not_found_errors(error_class):
    """Test not-found conditions share DataSourceNotFoundError."""
    with pytest.raises(DataSourceNotFoundError):
        raise error_class("not found")


def test_log_fetch_error_is_not_not_found():
    """Test transport errors and not-found errors stay distinct."""
    assert not issubclass(LogFetchError, DataSourceNotFoundError)
    assert not issubclass(ServiceEventsError, DataSourceNotFoundError)


# Test BaseFetcher


def test_base_fetcher_is_abstract():
    """Test BaseFetcher cannot be instantiated."""
    with pytest.raises(TypeError):
        BaseFetcher(client=None)  # type: ignore[abstract]


def test_mock_fetcher_appends():
    """Test a concrete fetcher appends to the timeline."""
    timeline = Timeline()

    result = MockFetcher(client="logs").fetch(timeline)

    assert len(timeline) == 1
    assert result.metadata == {"client": "logs"}


def test_mock_fetcher_failure():
    """Test a concrete fetcher can raise FetchError."""
    with pytest.raises(FetchError, match="mock-stream"):
        MockFetcher(client="logs", should_fail=True).fetch(Timeline())


def test_fetcher_repr():
    """Test repr uses describe()."""
    assert repr(MockFetcher(client="logs")) == "MockFetcher(mock-stream)"
