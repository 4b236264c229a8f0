"""Unit tests for the timeline pager."""

import io
from datetime import datetime, timedelta, timezone

import pytest
from rich.console import Console

from ecstrace.timeline import Event
from ecstrace.ui.pager import (
    TimelinePager,
    compute_page_size,
    count_pages,
    create_pager,
    next_page,
    page_slice,
)
from ecstrace.ui.styles import TimelineStyle


BASE = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def events(count):
    return [Event(BASE + timedelta(seconds=n), "app", f"message {n:02d}") for n in range(count)]


def scripted(*lines):
    """Line reader returning the given lines, then EOF."""
    queue = list(lines)

    def read_line():
        if not queue:
            raise EOFError
        return queue.pop(0)

    return read_line


@pytest.fixture
def console():
    """Create a recording console 10 lines high."""
    return Console(file=io.StringIO(), width=200, height=10)


def make_pager(console, *lines):
    return TimelinePager(console, TimelineStyle(utc=True), reserved_lines=5, read_line=scripted(*lines))


class TestPageArithmetic:
    """Tests for the pure page functions."""

    @pytest.mark.parametrize(
        "height,reserved,expected",
        [(10, 5, 5), (40, 5, 35), (5, 5, 1), (3, 5, 1), (0, 0, 1)],
    )
    def test_compute_page_size(self, height, reserved, expected):
        """Test page size is height minus reserved lines, at least one."""
        assert compute_page_size(height, reserved) == expected

    @pytest.mark.parametrize(
        "total,size,expected",
        [(0, 5, 0), (1, 5, 1), (5, 5, 1), (12, 5, 3), (10, 1, 10)],
    )
    def test_count_pages(self, total, size, expected):
        """Test the page count is the ceiling of total over size."""
        assert count_pages(total, size) == expected

    def test_count_pages_rejects_zero_size(self):
        """Test a page size below one is rejected."""
        with pytest.raises(ValueError):
            count_pages(10, 0)

    def test_slices_cover_all_events(self):
        """Test 12 events over size 5 give pages of 5, 5 and 2 in order."""
        items = events(12)

        slices = [page_slice(items, page, 5) for page in range(count_pages(12, 5))]

        assert [len(s) for s in slices] == [5, 5, 2]
        assert [e for s in slices for e in s] == items


class TestNextPage:
    """Tests for input handling."""

    def test_enter_advances(self):
        assert next_page("", 0, 3) == 1

    def test_enter_on_last_page_stays(self):
        """Test Enter on the last page keeps it shown."""
        assert next_page("", 2, 3) == 2

    def test_enter_with_no_pages(self):
        assert next_page("", 0, 0) == 0

    def test_quit(self):
        assert next_page("q", 1, 3) is None

    def test_back(self):
        """Test b goes back one page and stops at the first."""
        assert next_page("b", 2, 3) == 1
        assert next_page("b", 0, 3) == 0

    @pytest.mark.parametrize("line", ["x", "next", "Q", "1"])
    def test_other_input_redisplays(self, line):
        """Test unknown input keeps the current page."""
        assert next_page(line, 1, 3) == 1


class TestTimelinePager:
    """Tests for the interactive loop."""

    def test_page_size_from_console_height(self, console):
        """Test the page size follows the console height."""
        assert make_pager(console).page_size() == 5

    def test_walks_to_last_page_and_stays(self, console):
        """Test Enter three times on 3 pages ends on the last page."""
        pager = make_pager(console, "", "", "", "q")

        assert pager.run(events(12)) == 2

        output = console.file.getvalue()
        assert output.count("Page 3/3") == 2
        assert "Page 1/3 (Next: Enter, Back: b, Quit: q)" in output
        assert "message 11" in output

    def test_quit_on_first_page(self, console):
        """Test q stops after the first page."""
        pager = make_pager(console, "q")

        assert pager.run(events(12)) == 0

        output = console.file.getvalue()
        assert "message 04" in output
        assert "message 05" not in output
        assert "Page 2/3" not in output

    def test_end_of_input_quits(self, console):
        """Test EOF ends the loop on the current page."""
        pager = make_pager(console, "")

        assert pager.run(events(12)) == 1

    def test_trailing_newline_is_ignored(self, console):
        """Test the line ending does not change the command."""
        pager = make_pager(console, "\n", "q\r\n")

        assert pager.run(events(12)) == 1

    def test_whitespace_line_redraws(self, console):
        """Test a line of spaces redraws the page instead of advancing."""
        pager = make_pager(console, "   ", "q")

        assert pager.run(events(12)) == 0

        output = console.file.getvalue()
        assert output.count("Page 1/3") == 2
        assert "Page 2/3" not in output

    def test_back_then_quit(self, console):
        pager = make_pager(console, "", "", "b", "q")

        assert pager.run(events(12)) == 1

    def test_empty_timeline(self, console):
        """Test an empty timeline prints a message and never reads input."""
        def fail():
            raise AssertionError("input read for empty timeline")

        pager = TimelinePager(console, read_line=fail)

        assert pager.run([]) == 0
        assert "No events to display" in console.file.getvalue()

    def test_single_page(self, console):
        """Test fewer events than a page show one page."""
        pager = make_pager(console, "", "q")

        assert pager.run(events(3)) == 0
        assert "Page 1/1" in console.file.getvalue()

    def test_create_pager(self, console):
        """Test factory function."""
        pager = create_pager(console, reserved_lines=2)

        assert isinstance(pager, TimelinePager)
        assert pager.page_size() == 8
