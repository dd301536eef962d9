"""Configuration file management for noice."""

from __future__ import annotations

import copy
import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore

import tomli_w

from noice.bindings import BindingTable
from noice.launcher import AssociationRule

logger = logging.getLogger(__name__)

# Default configuration file location
CONFIG_FILE = Path.home() / ".noice.toml"

# Default configuration
DEFAULT_CONFIG: Dict[str, Any] = {
    "filters": {
        # Hide dotfiles for regular users, show everything for root
        "default": "^[^.]",
        "superuser": ".",
    },
    "idle": {
        # Number of one-second idle ticks before running the command, 0 disables
        "timeout": 0,
        "command": "rain",
    },
    "display": {
        "cwd_prefix": "cwd: ",
        "cursor": " > ",
        "empty_cursor": "   ",
    },
    "colors": {
        "kinds": {
            "directory": "blue_bold",
            "executable": "green_bold",
            "symlink": "cyan",
            "socket": "magenta",
            "fifo": "yellow",
            "other": "red",
        },
    },
    "associations": [
        {"pattern": r"\.(avi|mp4|mkv|mp3|ogg|flac|mov)$", "program": "mpv"},
        {"pattern": r"\.(png|jpg|gif)$", "program": "sxiv"},
        {"pattern": r"\.(html|svg)$", "program": "firefox"},
        {"pattern": r"\.pdf$", "program": "mupdf"},
        {"pattern": r"\.sh$", "program": "sh"},
        {"pattern": ".", "program": "less"},
    ],
    "bindings": [
        {"key": "q", "action": "quit"},
        {"key": "KEY_BACKSPACE", "action": "back"},
        {"key": "KEY_LEFT", "action": "back"},
        {"key": "h", "action": "back"},
        {"key": "^H", "action": "back"},
        {"key": "KEY_ENTER", "action": "goin"},
        {"key": "^M", "action": "goin"},
        {"key": "KEY_RIGHT", "action": "goin"},
        {"key": "l", "action": "goin"},
        {"key": "/", "action": "filter"},
        {"key": "&", "action": "filter"},
        {"key": "?", "action": "type"},
        {"key": "j", "action": "next"},
        {"key": "KEY_DOWN", "action": "next"},
        {"key": "^N", "action": "next"},
        {"key": "k", "action": "prev"},
        {"key": "KEY_UP", "action": "prev"},
        {"key": "^P", "action": "prev"},
        {"key": "KEY_NPAGE", "action": "page_down"},
        {"key": "^D", "action": "page_down"},
        {"key": "KEY_PPAGE", "action": "page_up"},
        {"key": "^U", "action": "page_up"},
        {"key": "g", "action": "home"},
        {"key": "KEY_HOME", "action": "home"},
        {"key": "M-<", "action": "home"},
        {"key": "^", "action": "home"},
        {"key": "G", "action": "end"},
        {"key": "KEY_END", "action": "end"},
        {"key": "M->", "action": "end"},
        {"key": "$", "action": "end"},
        {"key": "c", "action": "cd"},
        {"key": "~", "action": "cd_home"},
        {"key": ".", "action": "toggle_dot"},
        {"key": "t", "action": "mtime"},
        {"key": "^L", "action": "redraw"},
        {"key": "!", "action": "run", "run": "sh", "env": "SHELL"},
        {"key": "e", "action": "run_arg", "run": "vi", "env": "EDITOR"},
        {"key": "p", "action": "run_arg", "run": "less", "env": "PAGER"},
        {"key": "z", "action": "run", "run": "top"},
    ],
}


@dataclass
class Settings:
    """Typed view of the configuration used by the browser."""

    default_filter: str = DEFAULT_CONFIG["filters"]["default"]
    superuser_filter: str = DEFAULT_CONFIG["filters"]["superuser"]
    idle_timeout: int = 0
    idle_command: str = DEFAULT_CONFIG["idle"]["command"]
    cwd_prefix: str = DEFAULT_CONFIG["display"]["cwd_prefix"]
    cursor: str = DEFAULT_CONFIG["display"]["cursor"]
    empty_cursor: str = DEFAULT_CONFIG["display"]["empty_cursor"]
    kind_colors: Dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_CONFIG["colors"]["kinds"])
    )
    bindings: BindingTable = field(
        default_factory=lambda: BindingTable.from_config(DEFAULT_CONFIG["bindings"])
    )
    associations: Tuple[AssociationRule, ...] = field(
        default_factory=lambda: _associations_from_config(DEFAULT_CONFIG["associations"])
    )

    def initial_filter(self, uid: Optional[int] = None) -> str:
        """Filter applied on start and after every directory change."""
        if uid is None:
            uid = os.getuid()
        return self.superuser_filter if uid == 0 else self.default_filter


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from file or return defaults."""
    config_file = path if path is not None else CONFIG_FILE
    if not config_file.exists():
        return copy.deepcopy(DEFAULT_CONFIG)

    try:
        with open(config_file, "rb") as f:
            config = tomllib.load(f)
        # Merge with defaults to ensure all keys exist
        return _merge_config(DEFAULT_CONFIG, config)
    except (OSError, tomllib.TOMLDecodeError) as err:
        logger.warning("Ignoring unreadable configuration %s: %s", config_file, err)
        return copy.deepcopy(DEFAULT_CONFIG)


def save_config(config: Dict[str, Any], path: Optional[Path] = None) -> None:
    """Save configuration to file."""
    config_file = path if path is not None else CONFIG_FILE
    try:
        config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(config_file, "wb") as f:
            tomli_w.dump(config, f)
    except OSError as err:
        print(f"Warning: Failed to save configuration to {config_file}: {err}", file=sys.stderr)


def _merge_config(default: Dict[str, Any], user: Dict[str, Any]) -> Dict[str, Any]:
    """Merge user config with defaults, preserving user values."""
    result = copy.deepcopy(default)
    for key, value in user.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge_config(result[key], value)
        else:
            result[key] = value
    return result


def create_default_config(path: Optional[Path] = None) -> bool:
    """Create default configuration file if it doesn't exist.

    Returns True when a file was written.
    """
    config_file = path if path is not None else CONFIG_FILE
    if config_file.exists():
        return False
    save_config(DEFAULT_CONFIG, config_file)
    return True


def _associations_from_config(items: Any) -> Tuple[AssociationRule, ...]:
    rules = []
    for item in items or []:
        try:
            rules.append(AssociationRule.from_config(item))
        except (KeyError, TypeError) as err:
            logger.warning("Skipping association %r: %s", item, err)
    return tuple(rules)


def _table(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    """Return section ``name`` when it is a table, otherwise an empty one."""
    value = config.get(name, {})
    if isinstance(value, dict):
        return value
    logger.warning("Ignoring configuration section %r: expected a table", name)
    return {}


def _array(config: Dict[str, Any], name: str) -> List[Any]:
    value = config.get(name, [])
    if isinstance(value, list):
        return value
    logger.warning("Ignoring configuration section %r: expected an array", name)
    return []


def _as_int(value: Any, fallback: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return fallback


def settings_from_config(config: Dict[str, Any]) -> Settings:
    """Convert a merged configuration dictionary into :class:`Settings`."""
    filters = _table(config, "filters")
    idle = _table(config, "idle")
    display = _table(config, "display")
    kinds = _table(_table(config, "colors"), "kinds")
    return Settings(
        default_filter=str(filters.get("default", DEFAULT_CONFIG["filters"]["default"])),
        superuser_filter=str(filters.get("superuser", DEFAULT_CONFIG["filters"]["superuser"])),
        idle_timeout=max(_as_int(idle.get("timeout", 0), 0), 0),
        idle_command=str(idle.get("command", DEFAULT_CONFIG["idle"]["command"])),
        cwd_prefix=str(display.get("cwd_prefix", DEFAULT_CONFIG["display"]["cwd_prefix"])),
        cursor=str(display.get("cursor", DEFAULT_CONFIG["display"]["cursor"])),
        empty_cursor=str(display.get("empty_cursor", DEFAULT_CONFIG["display"]["empty_cursor"])),
        kind_colors={str(kind): str(color) for kind, color in kinds.items()},
        bindings=BindingTable.from_config(_array(config, "bindings")),
        associations=_associations_from_config(_array(config, "associations")),
    )


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load the configuration file and return typed settings."""
    return settings_from_config(load_config(path))


__all__ = [
    "CONFIG_FILE",
    "DEFAULT_CONFIG",
    "Settings",
    "load_config",
    "save_config",
    "create_default_config",
    "settings_from_config",
    "load_settings",
]
