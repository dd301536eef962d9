"""Input handling methods for the browser."""

from __future__ import annotations

import curses
import logging
import os
import stat
from typing import TYPE_CHECKING, Any, Callable, Optional, Union

from noice.bindings import Action, KeyBinding
from noice.errors import InvalidFilter, ListingError
from noice.launcher import program_from_env, resolve_program
from noice.listing import compile_filter
from noice.modes import InputMode
from noice.viewport import page_step

if TYPE_CHECKING:
    from noice.config import Settings
    from noice.state import NavigationState

logger = logging.getLogger(__name__)

NO_KEY = -1
ESCAPE = 27
ENTER_KEYS = (curses.KEY_ENTER, ord("\n"), ord("\r"))
BACKSPACE_KEYS = (curses.KEY_BACKSPACE, 127, 8)


# getch() yields ints; get_wch() yields a str for characters and an int for
# function keys.
Key = Union[int, str]


def _inserted_text(key: Key) -> Optional[str]:
    """Return the text a key adds to an input buffer, if any."""
    if isinstance(key, str):
        return key if key.isprintable() else None
    if 32 <= key < 127:
        return chr(key)
    return None


class InputHandlersMixin:
    """Mixin providing all keyboard input handlers.

    The host class supplies ``state``, ``settings``, the mode and buffer
    attributes, ``_spawn`` and ``_listing_rows``.
    """

    state: "NavigationState"
    settings: "Settings"
    input_mode: InputMode
    input_buffer: str
    status_message: Optional[str]
    idle_ticks: int
    quit_requested: bool
    _typing_saved_filter: Optional[str]

    def _handle_key(self, key_code: Key) -> None:
        """Route a key to the handler of the current input mode."""
        if isinstance(key_code, str) and (
            self.input_mode is InputMode.BROWSING or not key_code.isprintable()
        ):
            # Enter, Escape and Backspace arrive as control characters
            key_code = ord(key_code)
        if self.input_mode is InputMode.BROWSING:
            self._handle_browsing_key(key_code)
        elif self.input_mode.reads_line:
            self._handle_prompt_key(key_code)
        else:
            self._handle_typing_key(key_code)

    # -- browsing --------------------------------------------------------

    def _handle_browsing_key(self, key_code: int) -> None:
        """Handle one read in browsing mode, including idle timeouts."""
        if key_code == NO_KEY:
            self.idle_ticks += 1
        else:
            self.idle_ticks = 0
            if key_code != curses.KEY_RESIZE:
                self.status_message = None
                binding = self.settings.bindings.lookup(key_code)
                if binding is not None:
                    self._dispatch(binding)
        self._check_idle()

    def _dispatch(self, binding: KeyBinding) -> None:
        """Execute the action bound to a key."""
        state = self.state
        action = binding.action
        logger.debug("Action %s", action.value)
        if action is Action.QUIT:
            self.quit_requested = True
        elif action is Action.BACK:
            self._run_transition(state.go_up)
        elif action is Action.GOIN:
            self._open_selected()
        elif action is Action.FILTER:
            self._start_prompt(InputMode.PROMPT_FILTER)
        elif action is Action.TYPE:
            self._start_typing()
        elif action is Action.NEXT:
            state.move_selection(1)
        elif action is Action.PREV:
            state.move_selection(-1)
        elif action is Action.PAGE_DOWN:
            state.move_selection(page_step(self._listing_rows()))
        elif action is Action.PAGE_UP:
            state.move_selection(-page_step(self._listing_rows()))
        elif action is Action.HOME:
            state.select_first()
        elif action is Action.END:
            state.select_last()
        elif action is Action.CD:
            self._start_prompt(InputMode.PROMPT_CHDIR)
        elif action is Action.CD_HOME:
            self._run_transition(state.go_home, os.environ.get("HOME"))
        elif action is Action.MTIME:
            self._run_transition(state.toggle_sort)
        elif action is Action.REDRAW:
            self._run_transition(state.refresh)
        elif action is Action.TOGGLE_DOT:
            self._run_transition(state.toggle_dotfiles)
        elif action is Action.RUN:
            self._run_bound_program(binding, with_selection=False)
        elif action is Action.RUN_ARG:
            self._run_bound_program(binding, with_selection=True)

    def _run_transition(self, transition: Callable[..., Any], *args: Any) -> bool:
        """Apply a state transition, turning listing errors into a warning."""
        try:
            transition(*args)
        except ListingError as err:
            logger.debug("Transition %s failed: %s", transition.__name__, err)
            self.status_message = str(err)
            return False
        return True

    def _open_selected(self) -> None:
        """Enter the highlighted directory or open the highlighted file."""
        entry = self.state.selected_entry()
        if entry is None:
            return
        target = self.state.path_of(entry.name)
        try:
            # Follow symlinks: a link to a directory is entered like one
            target_mode = os.stat(target).st_mode
        except OSError as err:
            self.status_message = err.strerror or str(err)
            return

        if stat.S_ISDIR(target_mode):
            self._run_transition(self.state.enter_directory, entry.name)
        elif stat.S_ISREG(target_mode):
            program = resolve_program(target, self.settings.associations)
            if program is None:
                self.status_message = "No association"
                return
            self._spawn(program, target, cwd=self.state.current_path)
        else:
            self.status_message = "Unsupported file"

    def _run_bound_program(self, binding: KeyBinding, *, with_selection: bool) -> None:
        """Run the binding's program in the current directory."""
        argument = None
        if with_selection:
            entry = self.state.selected_entry()
            if entry is None:
                return
            argument = entry.name
        program = program_from_env(binding.run, binding.env)
        if not program:
            self.status_message = "No program configured"
            return
        self._spawn(program, argument, cwd=self.state.current_path, extra_args=binding.args)

    def _check_idle(self) -> None:
        """Run the idle command once enough idle ticks have piled up."""
        threshold = self.settings.idle_timeout
        if threshold and self.idle_ticks >= threshold:
            self.idle_ticks = 0
            self._spawn(self.settings.idle_command)

    # -- line prompts ----------------------------------------------------

    def _start_prompt(self, mode: InputMode) -> None:
        """Switch to a line prompt for a filter or a directory."""
        self.input_mode = mode
        self.input_buffer = ""
        self.status_message = None

    def _handle_prompt_key(self, key_code: Key) -> None:
        """Handle key presses while a line prompt is open."""
        if key_code in (NO_KEY, curses.KEY_RESIZE):
            return
        if key_code == ESCAPE:
            self._submit_prompt("")
        elif key_code in ENTER_KEYS:
            self._submit_prompt(self.input_buffer)
        elif key_code in BACKSPACE_KEYS:
            self.input_buffer = self.input_buffer[:-1]
        else:
            self.input_buffer += _inserted_text(key_code) or ""

    def _submit_prompt(self, text: str) -> None:
        mode = self.input_mode
        self.input_mode = InputMode.BROWSING
        self.input_buffer = ""
        if mode is InputMode.PROMPT_FILTER:
            self._run_transition(self.state.apply_filter, text or None)
        elif mode is InputMode.PROMPT_CHDIR and text:
            self._run_transition(self.state.change_directory, text)

    # -- filter as you type ----------------------------------------------

    def _start_typing(self) -> None:
        """Switch to incremental filtering."""
        self.input_mode = InputMode.TYPING_FILTER
        self.input_buffer = ""
        self.status_message = None
        self._typing_saved_filter = self.state.filter_pattern

    def _handle_typing_key(self, key_code: Key) -> None:
        """Edit the filter one key at a time, re-filtering after each key."""
        if key_code in (NO_KEY, curses.KEY_RESIZE):
            return
        if key_code == ESCAPE:
            self._cancel_typing()
            return

        finished = False
        if key_code in ENTER_KEYS:
            finished = True
        elif key_code in BACKSPACE_KEYS:
            self.input_buffer = self.input_buffer[:-1]
        else:
            text = _inserted_text(key_code)
            if not text:
                return
            self.input_buffer += text

        pattern = self.input_buffer
        if finished:
            self.input_mode = InputMode.BROWSING
            self.input_buffer = ""
            self._typing_saved_filter = None

        if pattern:
            try:
                compile_filter(pattern)
            except InvalidFilter as err:
                self.status_message = err.reason
                return
        self.status_message = None
        try:
            self.state.apply_filter(pattern or None)
        except ListingError as err:
            if finished:
                self.status_message = str(err)

    def _cancel_typing(self) -> None:
        """Leave typing mode and put back the filter we started with."""
        saved = self._typing_saved_filter
        self.input_mode = InputMode.BROWSING
        self.input_buffer = ""
        self._typing_saved_filter = None
        if saved is not None and saved != self.state.filter_pattern:
            self._run_transition(self.state.apply_filter, saved)


__all__ = ["InputHandlersMixin"]
