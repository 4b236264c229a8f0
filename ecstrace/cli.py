"""
Command-line interface for ecstrace.

Main entry point for the ecstrace CLI application.
"""
import logging
from typing import Optional

import boto3
import typer
from botocore.exceptions import BotoCoreError, NoRegionError, ProfileNotFound
from pydantic import ValidationError

from ecstrace import __version__
from ecstrace.config import Config, load_config
from ecstrace.console import get_console_wrapper
from ecstrace.ecs import EcsDiscovery
from ecstrace.fetchers.base import FetchError
from ecstrace.tracer import TaskTracer
from ecstrace.ui import (
    Menu,
    MenuItem,
    TimelineStyle,
    create_menu,
    create_pager,
    create_output_formatter,
)
from ecstrace.utils import enable_trace_logging
from ecstrace.utils.logging import configure_logging, log_debug


app = typer.Typer(
    name="ecstrace",
    help="Merge ECS service events and container logs into one timeline",
    add_completion=False,
)

console = get_console_wrapper().get_console()


def _create_session(config: Config) -> boto3.Session:
    """Create the boto3 session for the configured profile and region."""
    return boto3.Session(**config.get_aws_config())


def select_cluster(menu: Menu, discovery: EcsDiscovery) -> str:
    """Ask the user to pick one of the account's clusters."""
    console.print("[#808080]Listing ECS Clusters...[/#808080]")
    clusters = discovery.list_clusters()
    return menu.show_simple("Select a cluster:", clusters)


def select_task(menu: Menu, discovery: EcsDiscovery, cluster: str) -> str:
    """Ask the user to pick a task of the cluster; returns the task ARN."""
    console.print("[#808080]Listing Tasks...[/#808080]")
    tasks = discovery.list_tasks(cluster)
    items = [MenuItem(task.label, task.arn, task.last_status) for task in tasks]
    return menu.show("Select a Task:", items)


@app.command()
def version() -> None:
    """Display the version of ecstrace."""
    typer.echo(f"ecstrace version {__version__}")


@app.command()
def trace(
    cluster: Optional[str] = typer.Option(None, "--cluster", "-c", help="ECS cluster name or ARN"),
    task: Optional[str] = typer.Option(None, "--task", "-t", help="ECS task ID or ARN"),
    profile: Optional[str] = typer.Option(None, "--profile", "-p", help="Use a specific AWS CLI profile"),
    region: Optional[str] = typer.Option(None, "--region", "-r", help="AWS region"),
    flat: bool = typer.Option(False, "--flat", help="Print the whole timeline at once instead of paging"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show every fetch step"),
    very_verbose: bool = typer.Option(False, "--very-verbose", "-vv", help="Write a trace log of every AWS call"),
) -> None:
    """Show the service events and container logs of one ECS task as a timeline."""
    # Enable very-verbose mode (implies verbose)
    if very_verbose:
        verbose = True

    try:
        config = load_config(aws_profile=profile, aws_region=region)
    except ValidationError as e:
        typer.echo(f"Error: invalid configuration: {e}", err=True)
        raise typer.Exit(1) from e

    if very_verbose:
        log_path = config.get_trace_log_path()
        enable_trace_logging(log_path)
        console.print(f"[dim]Very-verbose mode (-vv) enabled - trace log at {log_path}[/dim]\n")

    configure_logging(logging.DEBUG if very_verbose else logging.INFO if verbose else logging.WARNING)
    output = create_output_formatter(console, verbose)

    try:
        session = _create_session(config)
        ecs_client = session.client("ecs")
        logs_client = session.client("logs")
    except (ProfileNotFound, NoRegionError) as e:
        output.print_error("Failed to load AWS config", details=str(e))
        raise typer.Exit(1) from e

    retry = config.get_retry_config()
    discovery = EcsDiscovery(ecs_client, retry["retries"], retry["delays"])
    menu = create_menu(console)

    try:
        chosen_cluster = cluster or select_cluster(menu, discovery)
        chosen_task = task or select_task(menu, discovery, chosen_cluster)
        log_debug(f"cli::trace::cluster={chosen_cluster} task={chosen_task}")

        tracer = TaskTracer(ecs_client, logs_client, chosen_cluster, config, on_progress=output.print_step)
        with output.progress_context("Collecting service events and logs..."):
            report = tracer.trace(chosen_task)
    except FetchError as e:
        output.print_error("Failed to trace task", details=str(e))
        raise typer.Exit(1) from e
    except BotoCoreError as e:
        # Missing credentials or region surface before any API answer
        output.print_error("AWS client error", details=str(e))
        raise typer.Exit(1) from e
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled[/yellow]")
        raise typer.Exit(130)

    output.print_task_summary(report.task_arn, report.last_status)
    output.print_fetch_errors(report.errors)
    output.print_stopped_early(report.stopped_early)

    style = TimelineStyle.from_config(config)
    if flat:
        events = report.timeline.sorted_events(descending=config.flat_order == "descending")
        output.print_timeline(events, style)
    else:
        events = report.timeline.sorted_events(descending=config.pager_order == "descending")
        pager = create_pager(console, style, config.pager_reserved_lines)
        try:
            pager.run(events)
        except KeyboardInterrupt:
            console.print()

    console.print("Done.")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
