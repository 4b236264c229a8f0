"""ECS service lifecycle events fetcher."""

from typing import Any, Optional, Sequence

import structlog
from botocore.exceptions import BotoCoreError, ClientError

from ecstrace.fetchers.base import BaseFetcher, FetchResult, ServiceEventsError, ServiceNotFoundError
from ecstrace.timeline import SERVICE_SOURCE, Event, Timeline
from ecstrace.utils.logging import log_api_call, log_debug, log_error
from ecstrace.utils.retry import call_with_retry

logger = structlog.get_logger(__name__)


class ServiceEventFetcher(BaseFetcher):
    """Fetcher for the event history ECS keeps on a service.

    DescribeServices returns the whole retained history at once, so there
    is no paging.
    """

    def __init__(
        self,
        client: Any,
        cluster: str,
        service: str,
        retries: int = 0,
        retry_delays: Optional[Sequence[float]] = None,
    ):
        """Initialize the service event fetcher.

        Args:
            client: boto3 ECS client
            cluster: Cluster name or ARN
            service: Service name
            retries: Retries for transient connection errors
            retry_delays: Delay before each retry
        """
        super().__init__(client)
        self.cluster = cluster
        self.service = service
        self.retries = retries
        self.retry_delays = retry_delays

    def describe(self) -> str:
        return f"{self.cluster}/{self.service}"

    def fetch(self, timeline: Timeline) -> FetchResult:
        """Add every service event to the timeline with the SERVICE label.

        Raises:
            ServiceNotFoundError: If the service does not exist in the cluster
            ServiceEventsError: If DescribeServices fails
        """
        params = {"cluster": self.cluster, "services": [self.service]}
        log_api_call("ecs", "describe_services", params)
        try:
            response = call_with_retry(
                self.client.describe_services, self.retries, self.retry_delays, **params
            )
        except (ClientError, BotoCoreError) as e:
            log_error(f"ServiceEventFetcher::fetch::{self.describe()} failed", e)
            raise ServiceEventsError(
                f"failed to fetch service events: {e}", context=self.service
            ) from e

        services = response.get("services", [])
        if not services:
            logger.info(f"Service {self.service} not found in {self.cluster}", failures=response.get("failures", []))
            raise ServiceNotFoundError(
                f"no services found for {self.service}", context=self.service
            )

        events = [
            Event(
                timestamp=service_event["createdAt"],
                source=SERVICE_SOURCE,
                message=service_event.get("message", ""),
            )
            for service_event in services[0].get("events", [])
        ]
        timeline.extend(events)
        log_debug(f"ServiceEventFetcher::fetch::Added {len(events)} events for {self.describe()}")

        return FetchResult(
            source=SERVICE_SOURCE,
            count=len(events),
            metadata={
                "cluster": self.cluster,
                "service": self.service,
                "status": services[0].get("status"),
            },
        )
