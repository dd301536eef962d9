"""Key binding table: which key triggers which browser action."""

from __future__ import annotations

import curses
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)


class Action(Enum):
    QUIT = "quit"
    BACK = "back"
    GOIN = "goin"
    FILTER = "filter"
    TYPE = "type"
    NEXT = "next"
    PREV = "prev"
    PAGE_DOWN = "page_down"
    PAGE_UP = "page_up"
    HOME = "home"
    END = "end"
    CD = "cd"
    CD_HOME = "cd_home"
    MTIME = "mtime"
    REDRAW = "redraw"
    RUN = "run"
    RUN_ARG = "run_arg"
    TOGGLE_DOT = "toggle_dot"


@dataclass(frozen=True)
class KeyBinding:
    key: int
    action: Action
    run: Optional[str] = None
    env: Optional[str] = None
    args: Tuple[str, ...] = ()


def control(char: str) -> int:
    """Key code produced by Ctrl+``char``."""
    return ord(char.upper()) ^ 0x40


def meta(char: str) -> int:
    """Key code produced by Meta+``char`` on terminals that set the high bit."""
    return ord(char) ^ 0x80


def parse_key(name: str) -> int:
    """Turn a key name from the configuration file into a curses key code.

    Accepted forms are a single character (``"q"``), a control key (``"^H"``),
    a meta key (``"M-<"``), a curses constant (``"KEY_BACKSPACE"``) and a
    plain decimal code (``"263"``).
    """
    if not name:
        raise ValueError("Empty key name.")
    if len(name) == 1:
        return ord(name)
    if len(name) == 2 and name[0] == "^":
        return control(name[1])
    if len(name) == 3 and name.startswith("M-"):
        return meta(name[2])
    if name.startswith("KEY_"):
        code = getattr(curses, name, None)
        if not isinstance(code, int):
            raise ValueError(f"Unknown curses key: {name}")
        return code
    if name.isdigit():
        return int(name)
    raise ValueError(f"Unrecognised key name: {name}")


def _normalize_args(raw: Any) -> Tuple[str, ...]:
    if raw is None:
        return ()
    if isinstance(raw, str):
        return (raw,) if raw else ()
    return tuple(str(item) for item in raw)


def binding_from_config(item: Dict[str, Any]) -> KeyBinding:
    """Build a :class:`KeyBinding` from one ``[[bindings]]`` table."""
    try:
        key_name = item["key"]
        action_name = item["action"]
    except KeyError as err:
        raise ValueError(f"Binding is missing {err.args[0]!r}") from err
    try:
        action = Action(action_name)
    except ValueError as err:
        raise ValueError(f"Unknown action: {action_name}") from err
    return KeyBinding(
        key=parse_key(str(key_name)),
        action=action,
        run=item.get("run") or None,
        env=item.get("env") or None,
        args=_normalize_args(item.get("args")),
    )


class BindingTable:
    """Ordered key lookup; the first binding for a key wins."""

    def __init__(self, bindings: Iterable[KeyBinding]) -> None:
        self._bindings: List[KeyBinding] = list(bindings)
        self._by_key: Dict[int, KeyBinding] = {}
        for binding in self._bindings:
            self._by_key.setdefault(binding.key, binding)

    @classmethod
    def from_config(cls, items: Iterable[Dict[str, Any]]) -> "BindingTable":
        bindings: List[KeyBinding] = []
        for item in items:
            try:
                bindings.append(binding_from_config(item))
            except (ValueError, TypeError) as err:
                logger.warning("Skipping key binding %r: %s", item, err)
        return cls(bindings)

    def lookup(self, key: int) -> Optional[KeyBinding]:
        return self._by_key.get(key)

    def __len__(self) -> int:
        return len(self._bindings)

    def __iter__(self):
        return iter(self._bindings)


__all__ = [
    "Action",
    "KeyBinding",
    "BindingTable",
    "binding_from_config",
    "control",
    "meta",
    "parse_key",
]
