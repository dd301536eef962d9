"""Command-line entry point for noice.

The steps are:

1. Read the command line (an optional directory plus a few switches).
2. Check that we talk to a terminal and that the directory can be listed.
3. Load the configuration and pick the default filter for this user.
4. Run the browser until the user quits, reporting fatal errors after the
   terminal has been restored.
"""

from __future__ import annotations

import argparse
import locale
import logging
import os
import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from noice import Browser, __version__
from noice import config
from noice.config import create_default_config, load_settings
from noice.errors import BrowserError, DirectoryUnreadable, EntryStatUnavailable
from noice.listing import check_directory

# Crash dump file location
CRASH_LOG_FILE = Path.home() / "noice.crash.txt"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class _ArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports usage errors with exit status 1."""

    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Turn the command-line text into structured information."""
    parser = _ArgumentParser(
        prog="noice",
        description="Browse a directory in the terminal.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Show version number and exit.",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        default=None,
        help=f"Configuration file to use (default: {config.CONFIG_FILE}).",
    )
    parser.add_argument(
        "--write-config",
        action="store_true",
        help="Write the default configuration file if it does not exist, then exit.",
    )
    parser.add_argument(
        "--debug-log",
        metavar="FILE",
        default=None,
        help="Append debug messages to FILE.",
    )
    parser.add_argument(
        "directory",
        nargs="?",
        default=None,
        help="Directory to open (default: current directory).",
    )
    return parser.parse_args(argv)


def configure_logging(log_file: Optional[str]) -> None:
    """Send debug output to ``log_file``; without one, logging stays quiet."""
    if not log_file:
        logging.getLogger("noice").addHandler(logging.NullHandler())
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format=LOG_FORMAT,
        handlers=[logging.FileHandler(log_file)],
    )


def resolve_initial_path(directory: Optional[str]) -> str:
    """Return the absolute directory to start in."""
    if directory:
        return os.path.abspath(directory)
    try:
        return os.getcwd()
    except OSError:
        return "/"


def is_interactive() -> bool:
    """curses needs a real terminal on both ends."""
    return sys.stdin.isatty() and sys.stdout.isatty()


def write_crash_log(exception: BaseException) -> None:
    """Append a detailed crash report to :data:`CRASH_LOG_FILE`."""
    try:
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        crash_info = f"""
================================================================================
noice Crash Report
================================================================================
Timestamp: {timestamp}
Version: {__version__}
Python: {sys.version}
Platform: {sys.platform}

Exception Type: {type(exception).__name__}
Exception Message: {str(exception)}

Traceback:
{traceback.format_exc()}
================================================================================
"""
        with open(CRASH_LOG_FILE, "a") as f:
            f.write(crash_info)

        print("noice crashed unexpectedly!", file=sys.stderr)
        print(f"   Crash details saved to: {CRASH_LOG_FILE}", file=sys.stderr)
    except OSError:
        # If we can't even write the crash log, just print to stderr
        print("noice crashed and could not write crash log!", file=sys.stderr)
        traceback.print_exc()


def main(argv: Optional[List[str]] = None) -> int:
    """Launch the browser and translate failures into exit statuses."""
    args = parse_args(argv)
    configure_logging(args.debug_log)
    config_path = Path(args.config).expanduser() if args.config else None

    if args.write_config:
        target = config_path or config.CONFIG_FILE
        if create_default_config(target):
            print(f"Wrote default configuration to {target}")
        else:
            print(f"Configuration already exists: {target}")
        return 0

    if not is_interactive():
        print("noice requires an interactive terminal: stdin or stdout is not a tty.",
              file=sys.stderr)
        return 1

    path = resolve_initial_path(args.directory)
    try:
        check_directory(path)
    except DirectoryUnreadable as err:
        print(f"{args.directory or path}: {err.strerror}", file=sys.stderr)
        return 1

    settings = load_settings(config_path)

    # Ctrl+C is meant for the programs we launch, not for the browser
    signal.signal(signal.SIGINT, signal.SIG_IGN)
    locale.setlocale(locale.LC_ALL, "")

    try:
        Browser(path, settings).browse()
    except BrowserError as err:
        print(f"Could not start browser: {err}", file=sys.stderr)
        return 1
    except EntryStatUnavailable as err:
        # curses.wrapper has already restored the terminal
        print(str(err), file=sys.stderr)
        return 1
    except MemoryError:
        print("noice: out of memory", file=sys.stderr)
        return 1
    except Exception as e:
        write_crash_log(e)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
