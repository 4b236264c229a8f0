"""
Interactive, terminal-height-aware timeline pager.

The page arithmetic and the reaction to one line of input are plain
functions; TimelinePager only adds rendering and the blocking read.
"""

from __future__ import annotations
from typing import Callable, List, Optional, Sequence

from rich.console import Console

from ecstrace.timeline import Event
from ecstrace.ui.styles import TimelineStyle, timeline_table

QUIT = "q"
BACK = "b"
DEFAULT_RESERVED_LINES = 5


def compute_page_size(height: int, reserved_lines: int = DEFAULT_RESERVED_LINES) -> int:
    """Events per page for a terminal of the given height (at least one)."""
    return max(1, height - reserved_lines)


def count_pages(total: int, page_size: int) -> int:
    """Number of pages needed for ``total`` events, ``ceil(total / page_size)``."""
    if page_size < 1:
        raise ValueError("page_size must be at least 1")
    return (total + page_size - 1) // page_size


def page_slice(events: Sequence[Event], page: int, page_size: int) -> Sequence[Event]:
    """Events shown on a zero-based page."""
    start = page * page_size
    return events[start:start + page_size]


def next_page(line: str, current: int, total: int) -> Optional[int]:
    """
    Decide the page to show after one line of input.

    Args:
        line: The line typed by the user, without the newline
        current: Zero-based page being shown
        total: Total number of pages

    Returns:
        The next zero-based page, or None to quit
    """
    if line == QUIT:
        return None
    if line == "":
        # Enter on the last page keeps it on screen
        return min(current + 1, max(total - 1, 0))
    if line == BACK:
        return max(current - 1, 0)
    return current


class TimelinePager:
    """Shows a sorted timeline one screen at a time."""

    def __init__(
        self,
        console: Optional[Console] = None,
        style: Optional[TimelineStyle] = None,
        reserved_lines: int = DEFAULT_RESERVED_LINES,
        read_line: Optional[Callable[[], str]] = None,
    ):
        """
        Initialize the pager.

        Args:
            console: Rich console instance (creates new one if not provided)
            style: Row styling (defaults to TimelineStyle())
            reserved_lines: Terminal lines kept for header and footer
            read_line: Blocking line reader; raises EOFError when input ends
        """
        self.console = console or Console()
        self.style = style or TimelineStyle()
        self.reserved_lines = reserved_lines
        self.read_line = read_line or self._read_line

    def _read_line(self) -> str:
        return self.console.input()

    def page_size(self) -> int:
        return compute_page_size(self.console.size.height, self.reserved_lines)

    def render_page(self, events: Sequence[Event], current_page: int, total_pages: int) -> None:
        """
        Print the header row, one page of events and the footer.

        Args:
            events: Events of the page
            current_page: Zero-based page index
            total_pages: Total number of pages
        """
        self.console.print(timeline_table(events, self.style, truncate=True))
        self.console.print(
            f"Page {current_page + 1}/{total_pages} (Next: Enter, Back: {BACK}, Quit: {QUIT})",
            style=self.style.footer_color,
        )

    def run(self, events: List[Event]) -> int:
        """
        Page through the events until the user quits or input ends.

        Args:
            events: Events already in display order

        Returns:
            Zero-based index of the page shown last (0 for an empty timeline)
        """
        if not events:
            self.console.print("[yellow]No events to display[/yellow]")
            return 0

        size = self.page_size()
        total_pages = count_pages(len(events), size)
        current = 0

        while True:
            self.render_page(page_slice(events, current, size), current, total_pages)

            try:
                line = self.read_line()
            except EOFError:
                return current

            following = next_page(line.rstrip("\r\n"), current, total_pages)
            if following is None:
                return current
            current = following


def create_pager(
    console: Optional[Console] = None,
    style: Optional[TimelineStyle] = None,
    reserved_lines: int = DEFAULT_RESERVED_LINES,
) -> TimelinePager:
    """
    Factory function to create a TimelinePager instance.

    Args:
        console: Optional Rich console instance
        style: Optional row styling
        reserved_lines: Terminal lines kept for header and footer

    Returns:
        TimelinePager instance
    """
    return TimelinePager(console, style, reserved_lines)
