"""Exceptions raised by the browsing engine."""

from __future__ import annotations


class NoiceError(Exception):
    """Base class for every error raised by the browser."""


class ListingError(NoiceError):
    """Raised when a directory cannot be listed; the caller keeps its old view."""


class DirectoryUnreadable(ListingError):
    """Raised when a directory cannot be opened or enumerated."""

    def __init__(self, path: str, strerror: str) -> None:
        super().__init__(strerror)
        self.path = path
        self.strerror = strerror

    @classmethod
    def from_os_error(cls, path: str, err: OSError) -> "DirectoryUnreadable":
        return cls(path, err.strerror or str(err))


class InvalidFilter(ListingError):
    """Raised when a filter pattern does not compile."""

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(reason)
        self.pattern = pattern
        self.reason = reason


class EntryStatUnavailable(NoiceError):
    """Raised when an entry cannot be stat'ed during enumeration.

    This is fatal: the listing would be inconsistent, so the browser restores
    the terminal and exits.
    """

    def __init__(self, path: str, strerror: str) -> None:
        super().__init__(f"lstat: {path}: {strerror}")
        self.path = path
        self.strerror = strerror


class BrowserError(NoiceError):
    """Raised when the browser cannot start."""


__all__ = [
    "NoiceError",
    "ListingError",
    "DirectoryUnreadable",
    "InvalidFilter",
    "EntryStatUnavailable",
    "BrowserError",
]
