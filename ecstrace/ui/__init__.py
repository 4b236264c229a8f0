"""
User interface components for ecstrace.

Provides selection menus, the interactive timeline pager and rich output
formatting.
"""

from ecstrace.ui.menu import Menu, MenuItem, create_menu
from ecstrace.ui.output import OutputFormatter, create_output_formatter
from ecstrace.ui.pager import (
    TimelinePager,
    compute_page_size,
    count_pages,
    next_page,
    page_slice,
    create_pager,
)
from ecstrace.ui.styles import TimelineStyle, timeline_table

__all__ = [
    # Menu system
    "Menu",
    "MenuItem",
    "create_menu",
    # Output formatting
    "OutputFormatter",
    "create_output_formatter",
    # Pager
    "TimelinePager",
    "compute_page_size",
    "count_pages",
    "next_page",
    "page_slice",
    "create_pager",
    # Styling
    "TimelineStyle",
    "timeline_table",
]
