"""Core browser loop: read a key, update the state, redraw."""

from __future__ import annotations

import curses
import logging
from typing import Optional, Sequence

from .colors import init_colors
from .config import Settings
from .errors import BrowserError
from .input_handlers import NO_KEY, InputHandlersMixin, Key
from .launcher import spawn_foreground
from .modes import InputMode
from .render import listing_rows, render_browser
from .state import NavigationState

logger = logging.getLogger(__name__)

# One idle tick per second without input
IDLE_TICK_MS = 1000

# Rows assumed for paging when no screen is attached
FALLBACK_LISTING_ROWS = 20


class Browser(InputHandlersMixin):
    """Show one directory in a curses interface and react to keys.

    Keyboard handling lives in :class:`InputHandlersMixin`; this class owns
    the screen, the main loop and the hand-off of the terminal to child
    processes.
    """

    def __init__(self, path: str, settings: Optional[Settings] = None,
                 *, initial_filter: Optional[str] = None) -> None:
        self.settings = settings or Settings()
        default_filter = initial_filter or self.settings.initial_filter()
        self.state = NavigationState(current_path=path, default_filter=default_filter)
        self.input_mode: InputMode = InputMode.BROWSING
        self.input_buffer: str = ""
        self.status_message: Optional[str] = None
        self.idle_ticks: int = 0
        self.quit_requested: bool = False
        self._typing_saved_filter: Optional[str] = None
        self._stdscr: Optional["curses._CursesWindow"] = None  # type: ignore[name-defined]

    def load(self) -> None:
        """Read the starting directory; failures become a status message."""
        self._run_transition(self.state.load)

    def browse(self) -> str:
        """Launch the UI and return the directory shown when the user quit."""
        try:
            return curses.wrapper(self._loop)
        except curses.error as err:
            raise BrowserError("Failed to initialise curses UI.") from err

    def _loop(self, stdscr: "curses._CursesWindow") -> str:  # type: ignore[name-defined]
        """Main curses event loop."""
        self._stdscr = stdscr
        self._init_screen()
        init_colors(self.settings.kind_colors)
        self.load()

        try:
            while not self.quit_requested:
                render_browser(self, stdscr)
                self._handle_key(self._read_key(stdscr))
        finally:
            self._stdscr = None

        return self.state.current_path

    def _read_key(self, stdscr: "curses._CursesWindow") -> Key:  # type: ignore[name-defined]
        """Read one key; prompts read whole characters rather than bytes."""
        if self.input_mode is InputMode.BROWSING:
            stdscr.timeout(IDLE_TICK_MS)
            return stdscr.getch()
        # Prompts wait for the user and do not count as idle
        stdscr.timeout(-1)
        try:
            return stdscr.get_wch()
        except curses.error:
            return NO_KEY

    def _init_screen(self) -> None:
        """Put the terminal in the mode the browser expects."""
        stdscr = self._stdscr
        if stdscr is None:
            return
        curses.cbreak()
        curses.noecho()
        curses.nonl()
        stdscr.keypad(True)
        stdscr.timeout(IDLE_TICK_MS)
        try:
            curses.curs_set(0)
        except curses.error:
            pass

    def _spawn(
        self,
        program: str,
        argument: Optional[str] = None,
        cwd: Optional[str] = None,
        extra_args: Sequence[str] = (),
    ) -> None:
        """Hand the terminal to ``program`` until it exits."""
        if self._stdscr is not None:
            curses.endwin()
        try:
            spawn_foreground(program, argument, cwd, extra_args)
        finally:
            if self._stdscr is not None:
                self._stdscr.refresh()
                self._init_screen()

    def _listing_rows(self) -> int:
        if self._stdscr is None:
            return FALLBACK_LISTING_ROWS
        height, _ = self._stdscr.getmaxyx()
        return listing_rows(height)


__all__ = ["Browser", "BrowserError"]
