"""Enumeration of the input modes the dispatcher can be in."""

from __future__ import annotations

from enum import Enum


class InputMode(Enum):
    BROWSING = "browsing"
    PROMPT_FILTER = "prompt_filter"
    PROMPT_CHDIR = "prompt_chdir"
    TYPING_FILTER = "typing_filter"

    @property
    def prompt(self) -> str:
        """Text shown in front of the input buffer on the bottom line."""
        if self is InputMode.PROMPT_FILTER:
            return "filter: "
        elif self is InputMode.PROMPT_CHDIR:
            return "chdir: "
        elif self is InputMode.TYPING_FILTER:
            return "type: "
        else:
            return ""

    @property
    def reads_line(self) -> bool:
        return self in (InputMode.PROMPT_FILTER, InputMode.PROMPT_CHDIR)


__all__ = ["InputMode"]
