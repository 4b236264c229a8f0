"""Base fetcher interface for timeline producers.

This module defines the abstract base class, the per-fetch result and the
exception hierarchy shared by the CloudWatch Logs and ECS service-event
fetchers.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ecstrace.timeline import Timeline


@dataclass
class FetchResult:
    """Result from a fetch operation.

    Attributes:
        source: Source label of the events (container name or "SERVICE")
        count: Number of events added to the timeline
        iterations: Number of API requests performed
        stopped_early: True when the iteration cap ended the fetch
        metadata: Additional metadata about the fetch operation
    """

    source: str
    count: int
    iterations: int = 1
    stopped_early: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert FetchResult to dictionary for serialization.

        Returns:
            Dictionary representation of the FetchResult
        """
        return {
            "source": self.source,
            "count": self.count,
            "iterations": self.iterations,
            "stopped_early": self.stopped_early,
            "metadata": self.metadata,
        }


class FetchError(Exception):
    """Base exception for fetch operations.

    Attributes:
        context: Identifier the failure belongs to (log stream, service or
            cluster name)
    """

    def __init__(self, message: str, context: Optional[str] = None):
        super().__init__(message)
        self.context = context

    def __str__(self) -> str:
        message = super().__str__()
        if self.context:
            return f"{message} [{self.context}]"
        return message


class LogFetchError(FetchError):
    """Raised when reading a CloudWatch Logs stream fails."""

    pass


class ServiceEventsError(FetchError):
    """Raised when reading ECS service events fails."""

    pass


class DiscoveryError(FetchError):
    """Raised when listing or describing ECS resources fails."""

    pass


class DataSourceNotFoundError(FetchError):
    """Raised when the requested resource does not exist.

    Distinct from an empty result: it points at bad input (wrong cluster,
    task or service name), not at a quiet source.
    """

    pass


class ClusterNotFoundError(DataSourceNotFoundError):
    """Raised when no ECS cluster is available."""

    pass


class TaskNotFoundError(DataSourceNotFoundError):
    """Raised when a task cannot be found in the cluster."""

    pass


class ServiceNotFoundError(DataSourceNotFoundError):
    """Raised when DescribeServices returns no matching service."""

    pass


class BaseFetcher(ABC):
    """Abstract base class for timeline producers.

    Fetchers read one remote source and append what they find to a
    Timeline. They never sort or read the timeline.

    Subclasses must implement:
        - fetch(): Append events to the timeline and report the outcome
        - describe(): Identifier used in logs and error messages
    """

    def __init__(self, client: Any):
        """Initialize the fetcher with a boto3 client.

        Args:
            client: boto3 client for the fetcher's AWS service
        """
        self.client = client

    @abstractmethod
    def fetch(self, timeline: Timeline) -> FetchResult:
        """Fetch events from the source into the timeline.

        Args:
            timeline: Timeline receiving the events

        Returns:
            FetchResult describing what was added

        Raises:
            FetchError: If the fetch operation fails
        """
        pass

    @abstractmethod
    def describe(self) -> str:
        """Return the identifier of the source being fetched."""
        pass

    def __repr__(self) -> str:
        """Return string representation of the fetcher."""
        return f"{self.__class__.__name__}({self.describe()})"
