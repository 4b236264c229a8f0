"""
Rich-based output formatting for terminal display.

Provides progress indicators, status symbols, headers and the flat
(non-interactive) timeline print.
"""

from __future__ import annotations
from typing import Optional, List, Sequence
from contextlib import contextmanager
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from ecstrace.fetchers.base import FetchError, FetchResult
from ecstrace.timeline import Event
from ecstrace.ui.styles import TimelineStyle, timeline_table

PREFIX = "[bold cyan][ecstrace][/bold cyan]"


class OutputFormatter:
    """Formats output with Rich styling."""

    # Status indicators
    SUCCESS = "✅"
    ERROR = "❌"
    WARNING = "⚠️"
    INFO = "ℹ️"
    PROGRESS = "⏳"

    def __init__(self, console: Optional[Console] = None, verbose: bool = False):
        """
        Initialize output formatter.

        Args:
            console: Rich console instance (creates new one if not provided)
            verbose: Enable verbose output (show each fetch step)
        """
        self.console = console or Console()
        self.verbose = verbose

    def print_header(self, text: str, level: int = 1) -> None:
        """
        Print a section header.

        Args:
            text: Header text
            level: Header level (1-3, affects styling)
        """
        if level == 1:
            self.console.print(f"\n[bold cyan]{'=' * 80}[/bold cyan]")
            self.console.print(f"[bold cyan]{text.upper()}[/bold cyan]")
            self.console.print(f"[bold cyan]{'=' * 80}[/bold cyan]\n")
        elif level == 2:
            self.console.print(f"\n[bold yellow]{text}[/bold yellow]")
            self.console.print(f"[yellow]{'-' * len(text)}[/yellow]\n")
        else:
            self.console.print(f"\n[bold]{text}[/bold]\n")

    def print_status(self, message: str, status: str = "info") -> None:
        """
        Print a status message with indicator.

        Args:
            message: Status message
            status: Status type (success, error, warning, info, progress)
        """
        icons = {
            "success": self.SUCCESS,
            "error": self.ERROR,
            "warning": self.WARNING,
            "info": self.INFO,
            "progress": self.PROGRESS
        }
        icon = icons.get(status, self.INFO)

        self.console.print(f"{PREFIX} {icon} {message}")

    def print_step(self, message: str) -> None:
        """
        Print a fetch step (verbose mode only).

        Args:
            message: Step description
        """
        if self.verbose:
            self.console.print(f"{PREFIX} [dim]{escape(message)}[/dim]")

    def print_error(self, message: str, details: Optional[str] = None) -> None:
        """
        Print an error message with optional details.

        Args:
            message: Error message
            details: Optional detailed error information
        """
        self.console.print(f"\n[bold red]{self.ERROR} {escape(message)}[/bold red]")

        if details:
            self.console.print(f"[red]Error: {escape(details)}[/red]")

    def print_warning(self, message: str, details: Optional[str] = None) -> None:
        """
        Print a warning message.

        Args:
            message: Warning message
            details: Optional detailed information
        """
        self.console.print(f"\n[bold yellow]{self.WARNING} {escape(message)}[/bold yellow]")
        if details:
            self.console.print(f"[yellow]{escape(details)}[/yellow]")

    def print_task_summary(self, task_arn: str, last_status: str) -> None:
        """Print the traced task and its last known status."""
        self.console.print(f"[bold]Task ARN:[/bold] {escape(task_arn)}")
        self.console.print(f"[bold]Last Status:[/bold] {escape(last_status)}")

    def print_fetch_errors(self, errors: Sequence[FetchError]) -> None:
        """
        Report sources that could not be read.

        Args:
            errors: Non-fatal fetch failures collected during the trace
        """
        for error in errors:
            self.print_warning(
                f"Skipped {error.context or 'source'}",
                details=str(error),
            )

    def print_stopped_early(self, results: Sequence[FetchResult]) -> None:
        """
        Report log streams whose retrieval hit the iteration cap.

        Args:
            results: Fetch results with stopped_early set
        """
        for result in results:
            stream = result.metadata.get("log_stream", result.source)
            self.print_status(
                f"Reached max iteration for {escape(stream)} after {result.iterations} pages, "
                f"older or newer records may be missing",
                status="warning",
            )

    def print_timeline(self, events: List[Event], style: Optional[TimelineStyle] = None) -> None:
        """
        Print every event at once, messages wrapped.

        Args:
            events: Events already in display order
            style: Row styling (defaults to TimelineStyle())
        """
        self.print_header("Timeline (Service Events & Logs)", level=1)
        if not events:
            self.console.print("[yellow]No events to display[/yellow]")
            return
        self.console.print(timeline_table(events, style or TimelineStyle(), truncate=False))

    @contextmanager
    def progress_context(
        self,
        description: str,
        show_elapsed: bool = True
    ):
        """
        Context manager for showing progress during long operations.

        Args:
            description: Description of the operation
            show_elapsed: Whether to show elapsed time

        Yields:
            Progress task for updating status
        """
        columns = [
            SpinnerColumn(),
            TextColumn(PREFIX),
            TextColumn("[progress.description]{task.description}"),
        ]

        if show_elapsed:
            columns.append(TimeElapsedColumn())

        with Progress(*columns, console=self.console, transient=True) as progress:
            task = progress.add_task(description, total=None)
            yield progress, task


def create_output_formatter(
    console: Optional[Console] = None,
    verbose: bool = False
) -> OutputFormatter:
    """
    Factory function to create an OutputFormatter instance.

    Args:
        console: Optional Rich console instance
        verbose: Enable verbose output

    Returns:
        OutputFormatter instance
    """
    return OutputFormatter(console, verbose)
