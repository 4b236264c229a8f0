"""CloudWatch Logs fetcher for ECS container log streams.

GetLogEvents pages are walked with a forward token until the token stops
moving or a fixed number of requests has been made. The paging decisions
live in pure functions (``initial_cursor``, ``build_request``, ``advance``)
so they can be exercised with scripted responses; ``LogStreamFetcher`` only
adds the network calls and the timeline writes.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

import structlog
from botocore.exceptions import BotoCoreError, ClientError

from ecstrace.fetchers.base import BaseFetcher, FetchResult, LogFetchError
from ecstrace.timeline import Event, Timeline, from_epoch_millis
from ecstrace.utils.logging import log_api_call, log_debug, log_error, log_page, log_warning
from ecstrace.utils.retry import call_with_retry

logger = structlog.get_logger(__name__)

DEFAULT_PAGE_SIZE = 50
DEFAULT_MAX_ITERATIONS = 10


class PageState(Enum):
    """Paging state of one log stream."""

    AWAITING_PAGE = "awaiting-page"
    DRAINING = "draining"
    DONE = "done"
    CAPPED = "capped"


@dataclass(frozen=True)
class PageCursor:
    """Position in a paginated log stream.

    Attributes:
        state: Current paging state
        token: Forward token for the next request, None before the first page
        iteration: Number of requests already performed
    """

    state: PageState = PageState.AWAITING_PAGE
    token: Optional[str] = None
    iteration: int = 0

    @property
    def finished(self) -> bool:
        return self.state in (PageState.DONE, PageState.CAPPED)


@dataclass(frozen=True)
class LogTarget:
    """A CloudWatch Logs stream to drain and the label its events get.

    Attributes:
        group: Log group name (awslogs-group)
        stream: Full stream name, ``<prefix>/<container>/<task-id>``
        source: Source label of the events, the container name
    """

    group: str
    stream: str
    source: str


def initial_cursor() -> PageCursor:
    return PageCursor()


def build_request(
    cursor: PageCursor,
    target: LogTarget,
    page_size: int = DEFAULT_PAGE_SIZE,
    start_from_head: bool = True,
) -> Dict[str, Any]:
    """Build GetLogEvents parameters for the cursor's next page.

    The first request reads from the head (or tail) of the stream; later
    requests carry the forward token instead.
    """
    request: Dict[str, Any] = {
        "logGroupName": target.group,
        "logStreamName": target.stream,
        "limit": page_size,
    }
    if cursor.token is None:
        request["startFromHead"] = start_from_head
    else:
        request["nextToken"] = cursor.token
    return request


def advance(
    cursor: PageCursor,
    response: Dict[str, Any],
    source: str,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> Tuple[PageCursor, List[Event]]:
    """Apply one GetLogEvents response to the cursor.

    Args:
        cursor: Cursor the request was built from
        response: GetLogEvents response
        source: Source label for the produced events
        max_iterations: Request cap for the stream

    Returns:
        Tuple of (next cursor, events contained in the page)

    Raises:
        ValueError: If the cursor is already finished
    """
    if cursor.finished:
        raise ValueError(f"cursor already finished ({cursor.state.value})")

    events = [
        Event(
            timestamp=from_epoch_millis(record["timestamp"]),
            source=source,
            message=record.get("message", ""),
        )
        for record in response.get("events", [])
    ]

    next_token = response.get("nextForwardToken")
    iteration = cursor.iteration + 1

    # Same token back means the stream has no newer records.
    if cursor.token is not None and next_token == cursor.token:
        return PageCursor(PageState.DONE, next_token, iteration), events
    if next_token is None:
        return PageCursor(PageState.DONE, None, iteration), events
    if iteration >= max_iterations:
        return PageCursor(PageState.CAPPED, next_token, iteration), events
    return PageCursor(PageState.DRAINING, next_token, iteration), events


class LogStreamFetcher(BaseFetcher):
    """Fetcher for one ECS container log stream via GetLogEvents."""

    def __init__(
        self,
        client: Any,
        target: LogTarget,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        start_from_head: bool = True,
        retries: int = 0,
        retry_delays: Optional[Sequence[float]] = None,
    ):
        """Initialize the log stream fetcher.

        Args:
            client: boto3 CloudWatch Logs client
            target: Stream to read
            page_size: Records per request
            max_iterations: Maximum requests before giving up on the stream
            start_from_head: Read from the oldest record first
            retries: Retries for transient connection errors
            retry_delays: Delay before each retry
        """
        super().__init__(client)
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        self.target = target
        self.page_size = page_size
        self.max_iterations = max_iterations
        self.start_from_head = start_from_head
        self.retries = retries
        self.retry_delays = retry_delays

    def describe(self) -> str:
        return f"{self.target.group}:{self.target.stream}"

    def fetch(self, timeline: Timeline) -> FetchResult:
        """Drain the stream into the timeline.

        Events of every page are added as soon as the page arrives, so a
        failure keeps what was already read.

        Raises:
            LogFetchError: If any GetLogEvents request fails
        """
        log_debug(f"LogStreamFetcher::fetch::Starting {self.describe()}")

        cursor = initial_cursor()
        count = 0
        while not cursor.finished:
            request = build_request(cursor, self.target, self.page_size, self.start_from_head)
            log_api_call("logs", "get_log_events", request)
            try:
                response = call_with_retry(
                    self.client.get_log_events, self.retries, self.retry_delays, **request
                )
            except (ClientError, BotoCoreError) as e:
                log_error(f"LogStreamFetcher::fetch::{self.describe()} failed", e)
                logger.debug(f"GetLogEvents failed for {self.target.stream} after {count} events: {e}")
                raise LogFetchError(
                    f"failed to fetch logs for container={self.target.source}: {e}",
                    context=self.target.stream,
                ) from e

            cursor, events = advance(cursor, response, self.target.source, self.max_iterations)
            timeline.extend(events)
            count += len(events)
            log_page(self.target.stream, cursor.iteration, len(events), cursor.token, cursor.state.value)

        stopped_early = cursor.state is PageState.CAPPED
        if stopped_early:
            logger.info(f"Stream {self.target.stream} capped after {cursor.iteration} requests")
            log_warning(
                f"LogStreamFetcher::fetch::Reached max iteration ({self.max_iterations}) "
                f"for {self.describe()}, stopped early"
            )

        return FetchResult(
            source=self.target.source,
            count=count,
            iterations=cursor.iteration,
            stopped_early=stopped_early,
            metadata={
                "log_group": self.target.group,
                "log_stream": self.target.stream,
                "last_token": cursor.token,
            },
        )
