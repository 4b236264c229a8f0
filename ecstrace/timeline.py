"""Timeline of ECS service events and container log records.

Events from every source are appended in whatever order the fetchers
produce them; ordering happens only when the timeline is read.
"""

import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, Iterator, List

SERVICE_SOURCE = "SERVICE"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True, eq=False)
class Event:
    """A single timeline entry.

    Attributes:
        timestamp: Timezone-aware instant the event happened
        source: "SERVICE" for lifecycle events, the container name for logs
        message: Event text as returned by AWS
    """

    timestamp: datetime
    source: str
    message: str


def from_epoch_millis(millis: int) -> datetime:
    """Convert a CloudWatch Logs epoch-millisecond timestamp to a UTC datetime."""
    return _EPOCH + timedelta(milliseconds=millis)


class Timeline:
    """Append-only collection of events from any number of producers.

    ``add`` is safe to call from several fetcher threads; reads are expected
    only after every producer has finished.
    """

    def __init__(self) -> None:
        self._events: List[Event] = []
        self._lock = threading.Lock()

    def add(self, event: Event) -> None:
        with self._lock:
            self._events.append(event)

    def extend(self, events: Iterable[Event]) -> None:
        with self._lock:
            self._events.extend(events)

    def sorted_events(self, descending: bool = False) -> List[Event]:
        """Return the events ordered by timestamp.

        The sort is stable in both directions: events sharing a timestamp
        keep the order in which they were added.

        Args:
            descending: Most recent event first

        Returns:
            A new list; the insertion order kept by the timeline is unchanged
        """
        with self._lock:
            events = list(self._events)
        return sorted(events, key=lambda event: event.timestamp, reverse=descending)

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(list(self._events))

    def __repr__(self) -> str:
        return f"Timeline(events={len(self._events)})"
