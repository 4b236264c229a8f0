"""
Utility functions and helpers.

Trace logging and retry logic shared by the fetchers and the CLI.
"""

from ecstrace.utils.logging import (
    enable_trace_logging,
    disable_trace_logging,
    is_trace_enabled,
    get_trace_file_path,
    log_api_call,
    log_page,
)
from ecstrace.utils.retry import retry_with_backoff, call_with_retry

__all__ = [
    "enable_trace_logging",
    "disable_trace_logging",
    "is_trace_enabled",
    "get_trace_file_path",
    "log_api_call",
    "log_page",
    "retry_with_backoff",
    "call_with_retry",
]
