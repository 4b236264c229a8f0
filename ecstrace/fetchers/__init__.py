"""
Timeline producers for ECS tasks.

Contains the CloudWatch Logs stream fetcher and the ECS service event
fetcher, both appending to a shared Timeline.
"""

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
from ecstrace.fetchers.cloudwatch_logs import LogStreamFetcher, LogTarget, PageCursor, PageState
from ecstrace.fetchers.service_events import ServiceEventFetcher

__all__ = [
    "BaseFetcher",
    "FetchResult",
    "FetchError",
    "LogFetchError",
    "ServiceEventsError",
    "DiscoveryError",
    "DataSourceNotFoundError",
    "ClusterNotFoundError",
    "TaskNotFoundError",
    "ServiceNotFoundError",
    "LogStreamFetcher",
    "LogTarget",
    "PageCursor",
    "PageState",
    "ServiceEventFetcher",
]
