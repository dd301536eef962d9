"""Color management for the listing."""

from __future__ import annotations

import curses
from enum import IntEnum
from typing import Dict, Optional, Tuple

from noice.listing import Entry, EntryKind


class ColorPair(IntEnum):
    """Color pair constants for curses."""
    DEFAULT = 0
    DIRECTORY = 1
    EXECUTABLE = 2
    SYMLINK = 3
    SOCKET = 4
    FIFO = 5
    OTHER = 6


KIND_TO_PAIR = {
    EntryKind.DIRECTORY: ColorPair.DIRECTORY,
    EntryKind.EXECUTABLE: ColorPair.EXECUTABLE,
    EntryKind.SYMLINK: ColorPair.SYMLINK,
    EntryKind.SOCKET: ColorPair.SOCKET,
    EntryKind.FIFO: ColorPair.FIFO,
    EntryKind.OTHER: ColorPair.OTHER,
}

COLOR_NAME_TO_CURSES = {
    "black": curses.COLOR_BLACK,
    "red": curses.COLOR_RED,
    "green": curses.COLOR_GREEN,
    "yellow": curses.COLOR_YELLOW,
    "blue": curses.COLOR_BLUE,
    "magenta": curses.COLOR_MAGENTA,
    "cyan": curses.COLOR_CYAN,
    "white": curses.COLOR_WHITE,
    "default": -1,
}

# Filled by init_colors once curses is running.
_kind_attributes: Dict[EntryKind, int] = {}


def parse_color_name(name: str) -> Tuple[int, int]:
    """Split names such as ``blue_bold`` into a curses color and attribute."""
    base, _, style = name.lower().partition("_")
    color = COLOR_NAME_TO_CURSES.get(base, -1)
    if style == "bold":
        attr = curses.A_BOLD
    elif style == "dim":
        attr = curses.A_DIM
    else:
        attr = curses.A_NORMAL
    return color, attr


def init_colors(kind_colors: Optional[Dict[str, str]] = None) -> None:
    """Initialize curses color pairs from the ``colors.kinds`` settings.

    Call this after curses initialization and before rendering.
    """
    _kind_attributes.clear()
    if not curses.has_colors():
        return

    curses.start_color()
    curses.use_default_colors()

    for kind, pair in KIND_TO_PAIR.items():
        name = (kind_colors or {}).get(kind.value)
        if not name:
            continue
        color, attr = parse_color_name(name)
        curses.init_pair(pair, color, -1)
        _kind_attributes[kind] = curses.color_pair(pair) | attr


def get_entry_color(entry: Entry) -> int:
    """Get the curses attributes used to draw ``entry``."""
    if not curses.has_colors():
        return curses.A_NORMAL
    return _kind_attributes.get(entry.kind, curses.A_NORMAL)


__all__ = ["ColorPair", "init_colors", "get_entry_color", "parse_color_name"]
