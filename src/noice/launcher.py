"""Pick a program for a file and run programs in the foreground."""

from __future__ import annotations

import logging
import os
import re
import signal
import subprocess
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

logger = logging.getLogger(__name__)

# Status reported when a child could not be started at all.
SPAWN_FAILED_STATUS = 127


@dataclass(frozen=True)
class AssociationRule:
    pattern: str
    program: str

    @classmethod
    def from_config(cls, item: Dict[str, Any]) -> "AssociationRule":
        return cls(pattern=str(item["pattern"]), program=str(item["program"]))


def resolve_program(path: str, rules: Iterable[AssociationRule]) -> Optional[str]:
    """Return the program of the first rule matching ``path``, if any."""
    for rule in rules:
        try:
            regex = re.compile(rule.pattern, re.IGNORECASE)
        except re.error:
            logger.debug("Ignoring association with bad pattern %r", rule.pattern)
            continue
        if regex.search(path):
            logger.debug("Association %r -> %s for %s", rule.pattern, rule.program, path)
            return rule.program
    return None


def program_from_env(run: Optional[str], env: Optional[str]) -> Optional[str]:
    """Prefer the program named by environment variable ``env`` when it is set."""
    if env is None:
        return run
    value = os.environ.get(env)
    return value if value else run


def build_command(
    program: str, argument: Optional[str] = None, extra_args: Sequence[str] = ()
) -> List[str]:
    command = [program, *extra_args]
    if argument is not None:
        command.append(argument)
    return command


def _restore_default_sigint() -> None:
    signal.signal(signal.SIGINT, signal.SIG_DFL)


def spawn_foreground(
    program: str,
    argument: Optional[str] = None,
    cwd: Optional[str] = None,
    extra_args: Sequence[str] = (),
) -> int:
    """Run ``program`` attached to the terminal and wait for it to finish.

    The caller is expected to have released the terminal beforehand.  Returns
    the child's exit status; a child that could not be started at all counts
    as having exited with :data:`SPAWN_FAILED_STATUS`.
    """
    command = build_command(program, argument, extra_args)
    logger.debug("Spawning %s in %s", command, cwd)
    try:
        result = subprocess.run(
            command, cwd=cwd, check=False, preexec_fn=_restore_default_sigint
        )
    except (OSError, subprocess.SubprocessError) as err:
        logger.warning("Could not start %s: %s", command, err)
        return SPAWN_FAILED_STATUS
    logger.debug("%s exited with status %d", program, result.returncode)
    return result.returncode


__all__ = [
    "AssociationRule",
    "SPAWN_FAILED_STATUS",
    "build_command",
    "program_from_env",
    "resolve_program",
    "spawn_foreground",
]
