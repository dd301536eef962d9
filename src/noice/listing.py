"""Directory entry model and the listing pipeline.

``populate`` turns a directory into a :class:`Listing`: it enumerates the
children, keeps the names matching the filter pattern, stats each one without
following symlinks and sorts the result.  A listing is immutable and is only
handed out once it is complete, so callers can swap it in with a single
assignment.
"""

from __future__ import annotations

import logging
import os
import re
import stat
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from noice.errors import DirectoryUnreadable, EntryStatUnavailable, InvalidFilter
from noice.formatting import format_size

logger = logging.getLogger(__name__)


class EntryKind(Enum):
    REGULAR = "regular"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    SOCKET = "socket"
    FIFO = "fifo"
    EXECUTABLE = "executable"
    OTHER = "other"

    @property
    def glyph(self) -> str:
        """One-character type marker printed after the name."""
        return _GLYPHS.get(self, "")

    @property
    def is_regular_like(self) -> bool:
        return self in (EntryKind.REGULAR, EntryKind.EXECUTABLE)


_GLYPHS = {
    EntryKind.DIRECTORY: "/",
    EntryKind.SYMLINK: "@",
    EntryKind.SOCKET: "=",
    EntryKind.FIFO: "|",
    EntryKind.EXECUTABLE: "*",
}


def classify_mode(mode: int) -> EntryKind:
    """Map ``st_mode`` bits from ``lstat`` onto an :class:`EntryKind`."""
    if stat.S_ISDIR(mode):
        return EntryKind.DIRECTORY
    if stat.S_ISLNK(mode):
        return EntryKind.SYMLINK
    if stat.S_ISSOCK(mode):
        return EntryKind.SOCKET
    if stat.S_ISFIFO(mode):
        return EntryKind.FIFO
    if stat.S_ISREG(mode):
        if mode & stat.S_IXUSR:
            return EntryKind.EXECUTABLE
        return EntryKind.REGULAR
    return EntryKind.OTHER


@dataclass(frozen=True)
class Entry:
    name: str
    kind: EntryKind
    mode: int = 0
    modified: datetime = field(default_factory=lambda: datetime.fromtimestamp(0))
    size: int = 0

    @property
    def glyph(self) -> str:
        return self.kind.glyph

    @property
    def is_regular_like(self) -> bool:
        return self.kind.is_regular_like

    @property
    def display_size(self) -> str:
        """Return a printable size, empty for kinds without a meaningful size."""
        if not self.is_regular_like:
            return ""
        return format_size(self.size)


@dataclass(frozen=True)
class Listing:
    path: str
    entries: Tuple[Entry, ...] = ()
    total_size: int = 0

    @classmethod
    def empty(cls, path: str) -> "Listing":
        return cls(path=path)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def __getitem__(self, index: int) -> Entry:
        return self.entries[index]

    @property
    def names(self) -> List[str]:
        return [entry.name for entry in self.entries]

    def index_of_path(self, full_path: Optional[str]) -> int:
        """Return the index of the entry at ``full_path``, or 0 when absent."""
        if full_path is None:
            return 0
        for index, entry in enumerate(self.entries):
            if make_path(self.path, entry.name) == full_path:
                return index
        return 0


def make_path(directory: str, name: str) -> str:
    """Join ``name`` onto ``directory`` the way the browser shows paths."""
    if name.startswith("/"):
        return name
    if directory == "/":
        return "/" + name
    return f"{directory}/{name}"


def parent_path(path: str) -> str:
    """Return the directory part of ``path``."""
    return os.path.dirname(path) or "/"


def check_directory(path: str) -> None:
    """Raise :class:`DirectoryUnreadable` unless ``path`` can be listed."""
    try:
        with os.scandir(path):
            pass
    except OSError as err:
        raise DirectoryUnreadable.from_os_error(path, err) from err


def compile_filter(pattern: str) -> re.Pattern[str]:
    """Compile a filter pattern as a case-insensitive regular expression."""
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as err:
        raise InvalidFilter(pattern, str(err)) from err


def _name_key(entry: Entry) -> bytes:
    return os.fsencode(entry.name)


def _time_key(entry: Entry) -> Tuple[float, bytes]:
    return (-entry.modified.timestamp(), os.fsencode(entry.name))


def sort_entries(entries: List[Entry], *, sort_by_time: bool = False) -> List[Entry]:
    """Sort by byte-wise name, or newest first with name as the tie-break."""
    key = _time_key if sort_by_time else _name_key
    return sorted(entries, key=key)


def _build_entry(directory: str, name: str) -> Entry:
    full_path = make_path(directory, name)
    try:
        stat_info = os.lstat(full_path)
    except OSError as err:
        raise EntryStatUnavailable(full_path, err.strerror or str(err)) from err
    return Entry(
        name=name,
        kind=classify_mode(stat_info.st_mode),
        mode=stat_info.st_mode,
        modified=datetime.fromtimestamp(stat_info.st_mtime),
        size=stat_info.st_size,
    )


def populate(path: str, filter_pattern: str, *, sort_by_time: bool = False) -> Listing:
    """Enumerate ``path`` and return a complete, filtered and sorted listing.

    Raises:
        InvalidFilter: the pattern does not compile.
        DirectoryUnreadable: the directory cannot be opened.
        EntryStatUnavailable: a child vanished or could not be stat'ed.
    """
    regex = compile_filter(filter_pattern)

    try:
        names = os.listdir(path)
    except OSError as err:
        raise DirectoryUnreadable.from_os_error(path, err) from err

    items: List[Entry] = []
    total_size = 0
    for name in names:
        if name in (".", ".."):
            continue
        if regex.search(name) is None:
            continue
        entry = _build_entry(path, name)
        if entry.is_regular_like:
            total_size += entry.size
        items.append(entry)

    ordered = sort_entries(items, sort_by_time=sort_by_time)
    logger.debug(
        "populated %s filter=%r entries=%d total=%d", path, filter_pattern, len(ordered), total_size
    )
    return Listing(path=path, entries=tuple(ordered), total_size=total_size)


__all__ = [
    "EntryKind",
    "Entry",
    "Listing",
    "classify_mode",
    "make_path",
    "parent_path",
    "check_directory",
    "compile_filter",
    "sort_entries",
    "populate",
]
