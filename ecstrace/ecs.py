"""ECS discovery: clusters, tasks, task definitions and their log streams."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import structlog
from botocore.exceptions import BotoCoreError, ClientError

from ecstrace.fetchers.base import ClusterNotFoundError, DiscoveryError, TaskNotFoundError
from ecstrace.fetchers.cloudwatch_logs import LogTarget
from ecstrace.utils.logging import log_api_call, log_debug
from ecstrace.utils.retry import call_with_retry

logger = structlog.get_logger(__name__)

SERVICE_GROUP_PREFIX = "service:"
AWSLOGS_DRIVER = "awslogs"
TASK_STATUSES = ("RUNNING", "PENDING", "STOPPED")

# DescribeTasks accepts at most 100 tasks per call
_DESCRIBE_BATCH = 100


def arn_to_name(arn: str) -> str:
    """Return the last slash-separated element of an ARN.

    >>> arn_to_name("arn:aws:ecs:eu-west-1:123456789012:task/prod/0a1b2c")
    '0a1b2c'
    """
    return arn[arn.rfind("/") + 1:]


def is_awslogs_driver(log_configuration: Optional[Dict[str, Any]]) -> bool:
    """Check whether a container log configuration writes to CloudWatch Logs."""
    return bool(log_configuration) and log_configuration.get("logDriver") == AWSLOGS_DRIVER


def service_name_from_group(group: Optional[str]) -> Optional[str]:
    """Return the service name of a task group such as ``service:orders-svc``.

    Tasks started outside a service (``family:...`` groups or none) return None.
    """
    if group and group.startswith(SERVICE_GROUP_PREFIX):
        return group[len(SERVICE_GROUP_PREFIX):]
    return None


def log_targets(task_definition: Dict[str, Any], task_arn: str) -> List[LogTarget]:
    """Derive the CloudWatch Logs streams of every awslogs container.

    The stream name follows the awslogs driver convention
    ``<awslogs-stream-prefix>/<container-name>/<task-id>``.

    Args:
        task_definition: ``taskDefinition`` from DescribeTaskDefinition
        task_arn: ARN of the task whose streams are wanted

    Returns:
        One LogTarget per awslogs container, in definition order
    """
    task_id = arn_to_name(task_arn)
    targets = []
    for container in task_definition.get("containerDefinitions", []):
        log_configuration = container.get("logConfiguration")
        if not is_awslogs_driver(log_configuration):
            continue
        options = log_configuration.get("options", {})
        name = container.get("name", "")
        targets.append(LogTarget(
            group=options.get("awslogs-group", ""),
            stream=f"{options.get('awslogs-stream-prefix', '')}/{name}/{task_id}",
            source=name,
        ))
    return targets


@dataclass
class TaskSummary:
    """A task as shown in the task selection menu."""

    task_id: str
    arn: str
    definition: str = ""
    last_status: str = ""

    @property
    def label(self) -> str:
        if self.definition:
            return f"{self.task_id}: {self.definition}"
        return self.task_id


class EcsDiscovery:
    """Read-only ECS queries used to locate a task and its log streams.

    Every failure here is fatal to a trace, so API errors surface as
    DiscoveryError.
    """

    def __init__(self, client: Any, retries: int = 0, retry_delays: Optional[Sequence[float]] = None):
        """
        Args:
            client: boto3 ECS client
            retries: Retries for transient connection errors
            retry_delays: Delay before each retry
        """
        self.client = client
        self.retries = retries
        self.retry_delays = retry_delays

    def _call(self, operation: str, context: str, **params: Any) -> Dict[str, Any]:
        log_api_call("ecs", operation, params)
        try:
            return call_with_retry(
                getattr(self.client, operation), self.retries, self.retry_delays, **params
            )
        except (ClientError, BotoCoreError) as e:
            raise DiscoveryError(f"{operation} failed: {e}", context=context) from e

    def _paginate(self, operation: str, key: str, context: str, **params: Any) -> List[str]:
        log_api_call("ecs", operation, params)
        items: List[str] = []
        try:
            for page in self.client.get_paginator(operation).paginate(**params):
                items.extend(page.get(key, []))
        except (ClientError, BotoCoreError) as e:
            raise DiscoveryError(f"{operation} failed: {e}", context=context) from e
        return items

    def list_clusters(self) -> List[str]:
        """List cluster names, sorted.

        Raises:
            ClusterNotFoundError: If the account has no clusters
        """
        arns = self._paginate("list_clusters", "clusterArns", context="clusters")
        clusters = sorted(arn_to_name(arn) for arn in arns)
        if not clusters:
            raise ClusterNotFoundError("no ECS clusters found")
        return clusters

    def list_tasks(self, cluster: str) -> List[TaskSummary]:
        """List running, pending and stopped tasks of a cluster, sorted by task id.

        Raises:
            TaskNotFoundError: If the cluster has no tasks
        """
        arns: List[str] = []
        for status in TASK_STATUSES:
            arns.extend(self._paginate(
                "list_tasks", "taskArns", context=cluster, cluster=cluster, desiredStatus=status
            ))
        if not arns:
            raise TaskNotFoundError(f"no tasks found in cluster {cluster}", context=cluster)

        tasks = []
        for start in range(0, len(arns), _DESCRIBE_BATCH):
            response = self._call(
                "describe_tasks", context=cluster, cluster=cluster, tasks=arns[start:start + _DESCRIBE_BATCH]
            )
            for task in response.get("tasks", []):
                tasks.append(TaskSummary(
                    task_id=arn_to_name(task["taskArn"]),
                    arn=task["taskArn"],
                    definition=arn_to_name(task.get("taskDefinitionArn", "")),
                    last_status=task.get("lastStatus", ""),
                ))
        log_debug(f"EcsDiscovery::list_tasks::{len(tasks)} tasks in {cluster}")
        return sorted(tasks, key=lambda task: task.task_id)

    def describe_task(self, cluster: str, task: str) -> Dict[str, Any]:
        """Describe one task by id or ARN.

        Raises:
            TaskNotFoundError: If the cluster does not know the task
        """
        response = self._call("describe_tasks", context=task, cluster=cluster, tasks=[task])
        tasks = response.get("tasks", [])
        if not tasks:
            logger.debug(f"DescribeTasks returned no task for {task}", failures=response.get("failures", []))
            raise TaskNotFoundError(f"task not found: {task}", context=cluster)
        return tasks[0]

    def describe_task_definition(self, task_definition_arn: str) -> Dict[str, Any]:
        """Return the ``taskDefinition`` of a task definition ARN."""
        response = self._call(
            "describe_task_definition", context=task_definition_arn, taskDefinition=task_definition_arn
        )
        return response["taskDefinition"]
