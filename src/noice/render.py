"""Convert the browser state into characters on the screen.

Layout::

    cwd: /mnt/path                                 1.2M

       file0
     > file1*                                     512B
       dir2/
    ...
    Permission denied

The functions avoid any business logic; they only read the state.
"""

from __future__ import annotations

import curses
from typing import TYPE_CHECKING, Optional, Tuple

from noice.colors import get_entry_color
from noice.formatting import clip, format_size, truncate
from noice.modes import InputMode
from noice.viewport import window

if TYPE_CHECKING:
    from noice.browser import Browser

# Terminal size limits
MIN_TERMINAL_HEIGHT = 5
MIN_TERMINAL_WIDTH = 24

# Header line plus blank line above the listing, blank line plus status below
HEADER_ROWS = 2
FOOTER_ROWS = 2

# Columns reserved at the right edge for sizes
SIZE_COLUMN_WIDTH = 16


def listing_rows(height: int) -> int:
    """Number of terminal rows available for entries."""
    return max(height - HEADER_ROWS - FOOTER_ROWS, 0)


def render_browser(browser: "Browser", stdscr: "curses._CursesWindow") -> None:  # type: ignore[name-defined]
    """Render the header, the visible part of the listing and the bottom line."""
    height, width = stdscr.getmaxyx()
    stdscr.erase()

    if height < MIN_TERMINAL_HEIGHT or width < MIN_TERMINAL_WIDTH:
        _put(stdscr, 0, 0, "Terminal too small for browser.", width)
        stdscr.refresh()
        return

    render_header(browser, stdscr, width)
    render_listing(browser, stdscr, listing_rows(height), width)
    cursor = render_bottom_line(browser, stdscr, height, width)

    try:
        curses.curs_set(1 if cursor is not None else 0)
    except curses.error:
        pass
    if cursor is not None:
        try:
            stdscr.move(*cursor)
        except curses.error:
            pass

    stdscr.refresh()


def render_header(browser: "Browser", stdscr: "curses._CursesWindow", width: int) -> None:  # type: ignore[name-defined]
    """Draw the current path and the total size of the regular files."""
    prefix = browser.settings.cwd_prefix
    path_width = max(width - SIZE_COLUMN_WIDTH - len(prefix) - 1, 0)
    _put(stdscr, 0, 0, prefix + clip(browser.state.current_path, path_width), width)
    total = format_size(browser.state.total_size).rjust(SIZE_COLUMN_WIDTH - 1)
    _put(stdscr, 0, width - SIZE_COLUMN_WIDTH, total, SIZE_COLUMN_WIDTH - 1)


def render_listing(
    browser: "Browser",
    stdscr: "curses._CursesWindow",  # type: ignore[name-defined]
    rows: int,
    width: int,
) -> None:
    """Draw the window of entries around the selection."""
    state = browser.state
    settings = browser.settings
    entries = state.listing.entries
    first, count = window(len(entries), state.selected_index, rows)

    for offset in range(count):
        index = first + offset
        entry = entries[index]
        y = HEADER_ROWS + offset
        active = index == state.selected_index
        marker = settings.cursor if active else settings.empty_cursor

        # No wrapping: leave room for the marker, the glyph and the size column
        max_name = width - len(settings.cursor) - SIZE_COLUMN_WIDTH - 1
        if entry.glyph:
            max_name -= 1
        name_text = clip(entry.name, max_name) + entry.glyph

        attrs = get_entry_color(entry)
        if active:
            attrs |= curses.A_REVERSE
        _put(stdscr, y, 0, marker, len(marker))
        _put(stdscr, y, len(marker), name_text, max(width - len(marker), 0), attrs)

        if entry.is_regular_like:
            size_text = entry.display_size.rjust(SIZE_COLUMN_WIDTH - 1)
            _put(stdscr, y, width - SIZE_COLUMN_WIDTH, size_text, SIZE_COLUMN_WIDTH - 1)


def render_bottom_line(
    browser: "Browser",
    stdscr: "curses._CursesWindow",  # type: ignore[name-defined]
    height: int,
    width: int,
) -> Optional[Tuple[int, int]]:
    """Draw the prompt or the status message; return the cursor position."""
    bottom = height - 1
    message = browser.status_message

    if browser.input_mode is InputMode.BROWSING:
        if message:
            _put(stdscr, bottom, 0, truncate(message, width - 1), width - 1)
        return None

    # Messages raised while typing go just above the prompt
    if message:
        _put(stdscr, bottom - 1, 0, truncate(message, width - 1), width - 1)
    prompt = browser.input_mode.prompt + browser.input_buffer
    visible = prompt[-(width - 1):] if len(prompt) >= width else prompt
    _put(stdscr, bottom, 0, visible, width - 1)
    return bottom, min(len(visible), width - 1)


def _put(
    stdscr: "curses._CursesWindow",  # type: ignore[name-defined]
    y: int,
    x: int,
    text: str,
    max_width: int,
    attrs: int = curses.A_NORMAL,
) -> None:
    if max_width <= 0 or x < 0:
        return
    try:
        stdscr.addnstr(y, x, text, max_width, attrs)
    except curses.error:
        pass


__all__ = [
    "listing_rows",
    "render_browser",
    "render_header",
    "render_listing",
    "render_bottom_line",
]
