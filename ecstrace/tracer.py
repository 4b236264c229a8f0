"""Trace one ECS task: service events and container logs into one Timeline."""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

import structlog

from ecstrace.config import Config
from ecstrace.ecs import EcsDiscovery, log_targets, service_name_from_group
from ecstrace.fetchers.base import FetchError, FetchResult
from ecstrace.fetchers.cloudwatch_logs import LogStreamFetcher, LogTarget
from ecstrace.fetchers.service_events import ServiceEventFetcher
from ecstrace.timeline import Timeline
from ecstrace.utils.logging import log_debug, log_error, log_info

logger = structlog.get_logger(__name__)

ProgressCallback = Callable[[str], None]


@dataclass
class TraceReport:
    """Outcome of one trace.

    Attributes:
        task_arn: ARN of the traced task
        last_status: Last known status of the task
        timeline: Events collected from every source
        results: One FetchResult per successful source
        errors: Non-fatal failures of individual sources
    """

    task_arn: str
    last_status: str
    timeline: Timeline
    service: Optional[str] = None
    targets: List[LogTarget] = field(default_factory=list)
    results: List[FetchResult] = field(default_factory=list)
    errors: List[FetchError] = field(default_factory=list)

    @property
    def stopped_early(self) -> List[FetchResult]:
        return [result for result in self.results if result.stopped_early]


class TaskTracer:
    """Collects the timeline of a single ECS task.

    Describing the task and its definition must succeed; a failing log
    stream or service lookup is recorded in the report and the remaining
    sources are still read.
    """

    def __init__(
        self,
        ecs_client: Any,
        logs_client: Any,
        cluster: str,
        config: Config,
        on_progress: Optional[ProgressCallback] = None,
    ):
        """
        Args:
            ecs_client: boto3 ECS client
            logs_client: boto3 CloudWatch Logs client
            cluster: Cluster name or ARN
            config: Loaded configuration
            on_progress: Called with a short message before each source is read
        """
        self.ecs_client = ecs_client
        self.logs_client = logs_client
        self.cluster = cluster
        self.config = config
        self.on_progress = on_progress
        retry = config.get_retry_config()
        self.retries = retry["retries"]
        self.retry_delays = retry["delays"]
        self.discovery = EcsDiscovery(ecs_client, self.retries, self.retry_delays)

    def _progress(self, message: str) -> None:
        log_info(message)
        if self.on_progress:
            self.on_progress(message)

    def trace(self, task: str) -> TraceReport:
        """Build the timeline of a task.

        Args:
            task: Task id or ARN

        Returns:
            TraceReport holding the populated timeline

        Raises:
            DiscoveryError: If DescribeTasks or DescribeTaskDefinition fails
            TaskNotFoundError: If the task does not exist in the cluster
        """
        description = self.discovery.describe_task(self.cluster, task)
        task_arn = description["taskArn"]
        report = TraceReport(
            task_arn=task_arn,
            last_status=description.get("lastStatus", ""),
            timeline=Timeline(),
            service=service_name_from_group(description.get("group")),
        )

        if report.service:
            self._progress(f"Fetching service events for {report.service}")
            fetcher = ServiceEventFetcher(
                self.ecs_client, self.cluster, report.service, self.retries, self.retry_delays
            )
            self._run(fetcher, report)

        task_definition = self.discovery.describe_task_definition(description["taskDefinitionArn"])
        report.targets = log_targets(task_definition, task_arn)
        fetchers = [self._log_fetcher(target) for target in report.targets]

        if self.config.fetch_concurrency > 1 and len(fetchers) > 1:
            with ThreadPoolExecutor(max_workers=self.config.fetch_concurrency) as executor:
                list(executor.map(lambda f: self._run(f, report), fetchers))
        else:
            for fetcher in fetchers:
                self._run(fetcher, report)

        return report

    def _log_fetcher(self, target: LogTarget) -> LogStreamFetcher:
        logs = self.config.get_logs_config()
        return LogStreamFetcher(
            self.logs_client,
            target,
            page_size=logs["page_size"],
            max_iterations=logs["max_iterations"],
            start_from_head=logs["start_from_head"],
            retries=self.retries,
            retry_delays=self.retry_delays,
        )

    def _run(self, fetcher: Any, report: TraceReport) -> None:
        if isinstance(fetcher, LogStreamFetcher):
            self._progress(f"Fetching logs for container {fetcher.target.source} ({fetcher.target.stream})")
        try:
            result = fetcher.fetch(report.timeline)
        except FetchError as e:
            log_error(f"TaskTracer::trace::{fetcher!r} failed: {e}")
            logger.info(f"Skipping {fetcher!r}: {e}")
            report.errors.append(e)
            return
        log_debug(f"TaskTracer::trace::{fetcher!r} done: {result.to_dict()}")
        report.results.append(result)
