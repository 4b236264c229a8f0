"""
Timeline styling.

Column widths, colours and timestamp format are carried by an explicit
TimelineStyle value handed to the presenters, so rendering can be checked
against a recording Console without a live terminal.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable

from rich.table import Table
from rich.text import Text

from ecstrace.config import Config
from ecstrace.timeline import Event

TIMESTAMP_WIDTH = 25


@dataclass(frozen=True)
class TimelineStyle:
    """How timeline rows are formatted."""

    timestamp_format: str = "%Y-%m-%d %H:%M:%S"
    utc: bool = False
    source_width: int = 25
    message_width: int = 100
    timestamp_color: str = "#f5f5f5"
    source_color: str = "#00bfff"
    message_color: str = "#f5f5f5"
    header_color: str = "#00bfff"
    footer_color: str = "#808080"

    @classmethod
    def from_config(cls, config: Config) -> TimelineStyle:
        return cls(**config.get_style_config())

    def format_timestamp(self, timestamp: datetime) -> str:
        """Render a timestamp in UTC or in the local timezone."""
        if self.utc:
            return timestamp.astimezone(timezone.utc).strftime(self.timestamp_format)
        return timestamp.astimezone().strftime(self.timestamp_format)


def timeline_table(
    events: Iterable[Event],
    style: TimelineStyle,
    truncate: bool = True,
) -> Table:
    """
    Build the timeline table: TIME, Log Source, Message.

    Args:
        events: Events in display order
        style: Styling to apply
        truncate: Cut messages to one line (pager) instead of wrapping them

    Returns:
        Rich table ready to print
    """
    table = Table(box=None, show_header=True, pad_edge=False, header_style=f"bold {style.header_color}")
    table.add_column("TIME", style=style.timestamp_color, width=TIMESTAMP_WIDTH, no_wrap=True)
    table.add_column(
        "Log Source", style=style.source_color, width=style.source_width,
        no_wrap=True, overflow="ellipsis",
    )
    if truncate:
        table.add_column(
            "Message", style=style.message_color, max_width=style.message_width,
            no_wrap=True, overflow="ellipsis",
        )
    else:
        table.add_column("Message", style=style.message_color, overflow="fold")

    for event in events:
        message = event.message.rstrip("\n")
        if truncate:
            message = message.replace("\n", " ")
        # Text() keeps square brackets in log lines from being read as markup
        table.add_row(style.format_timestamp(event.timestamp), Text(event.source), Text(message))

    return table
