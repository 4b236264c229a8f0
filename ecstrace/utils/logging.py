"""Trace logging for very-verbose mode (-vv).

When enabled with -vv, every AWS request issued during a trace is written
to a log file together with paging decisions and non-fatal fetch errors:
- API calls with their parameters
- Page results (record count, continuation token, cursor state)
- Fetch failures with tracebacks

Logs are written to: ~/.ecstrace/ecstrace_trace.log (or ECSTRACE_LOG_FILE)

Module loggers (structlog) are configured separately by configure_logging
and print to stderr.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Any, Dict
from datetime import datetime
from rich.console import Console
import structlog


# Global state for trace logging
_TRACE_ENABLED = False
_TRACE_LOGGER: Optional[logging.Logger] = None
_TRACE_FILE_PATH: Optional[Path] = None
_console = Console(stderr=True)


def enable_trace_logging(log_path: Path) -> None:
    """Enable trace logging to file.

    Args:
        log_path: Path of the trace log file; parent directories are created
    """
    global _TRACE_ENABLED, _TRACE_LOGGER, _TRACE_FILE_PATH

    log_path.parent.mkdir(parents=True, exist_ok=True)

    _TRACE_ENABLED = True
    _TRACE_FILE_PATH = log_path

    _TRACE_LOGGER = logging.getLogger("ecstrace.trace")
    _TRACE_LOGGER.setLevel(logging.DEBUG)
    _TRACE_LOGGER.propagate = False

    _TRACE_LOGGER.handlers.clear()

    file_handler = logging.FileHandler(_TRACE_FILE_PATH, mode='a', encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)

    # Format: timestamp | level | message
    formatter = logging.Formatter(
        '%(asctime)s | %(levelname)-8s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    file_handler.setFormatter(formatter)
    _TRACE_LOGGER.addHandler(file_handler)

    _TRACE_LOGGER.info("=" * 80)
    _TRACE_LOGGER.info("Trace logging initialized")
    _TRACE_LOGGER.info(f"Log file: {log_path}")
    _TRACE_LOGGER.info("=" * 80)


def disable_trace_logging() -> None:
    """Disable trace logging."""
    global _TRACE_ENABLED, _TRACE_LOGGER, _TRACE_FILE_PATH

    if _TRACE_LOGGER:
        _TRACE_LOGGER.info("=" * 80)
        _TRACE_LOGGER.info("Trace logging disabled")
        _TRACE_LOGGER.info("=" * 80)
        for handler in _TRACE_LOGGER.handlers:
            handler.close()
        _TRACE_LOGGER.handlers.clear()

    _TRACE_ENABLED = False
    _TRACE_LOGGER = None
    _TRACE_FILE_PATH = None


def is_trace_enabled() -> bool:
    """Check if trace logging is enabled.

    Returns:
        True if trace logging is enabled
    """
    return _TRACE_ENABLED


def get_trace_file_path() -> Optional[Path]:
    """Get the trace log file path.

    Returns:
        Path to trace log file, or None if not enabled
    """
    return _TRACE_FILE_PATH


def log_api_call(
    service: str,
    operation: str,
    params: Optional[Dict[str, Any]] = None
) -> None:
    """Log an AWS API call.

    Args:
        service: AWS service name (ecs, logs)
        operation: API operation name
        params: Request parameters
    """
    if not _TRACE_ENABLED or not _TRACE_LOGGER:
        return

    _TRACE_LOGGER.info("-" * 80)
    _TRACE_LOGGER.info(f"AWS CALL | {service}.{operation} | Timestamp: {datetime.now().isoformat()}")
    if params:
        _TRACE_LOGGER.info(f"Params: {params}")
    _TRACE_LOGGER.info("-" * 80)


def log_page(
    stream: str,
    iteration: int,
    record_count: int,
    token: Optional[str],
    state: str
) -> None:
    """Log the outcome of one CloudWatch Logs page.

    Args:
        stream: Log stream name
        iteration: Number of requests performed so far
        record_count: Records in this page
        token: Forward token returned by this page
        state: Cursor state after the page
    """
    if not _TRACE_ENABLED or not _TRACE_LOGGER:
        return

    _TRACE_LOGGER.debug(
        f"PAGE | {stream} | iteration={iteration} records={record_count} "
        f"state={state} token={token}"
    )

    _console.print(
        f"[dim]{stream}: page {iteration}, {record_count} records, {state}[/dim]"
    )


def log_debug(message: str) -> None:
    """Log a debug message.

    Args:
        message: Message to log
    """
    if not _TRACE_ENABLED or not _TRACE_LOGGER:
        return

    _TRACE_LOGGER.debug(message)


def log_info(message: str) -> None:
    """Log an informational message.

    Args:
        message: Message to log
    """
    if not _TRACE_ENABLED or not _TRACE_LOGGER:
        return

    _TRACE_LOGGER.info(message)


def log_warning(message: str) -> None:
    """Log a warning message.

    Args:
        message: Warning message
    """
    if not _TRACE_ENABLED or not _TRACE_LOGGER:
        return

    _TRACE_LOGGER.warning(message)


def log_error(message: str, exception: Optional[Exception] = None) -> None:
    """Log an error message.

    Args:
        message: Error message
        exception: Exception object (optional)
    """
    if not _TRACE_ENABLED or not _TRACE_LOGGER:
        return

    _TRACE_LOGGER.error(message)
    if exception:
        _TRACE_LOGGER.exception(exception)


def configure_logging(level: int = logging.WARNING) -> None:
    """Configure structlog module loggers.

    Args:
        level: Standard logging level (WARNING by default, INFO with -v,
            DEBUG with -vv)
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
