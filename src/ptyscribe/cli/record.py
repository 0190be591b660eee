"""`ptyscribe record` command implementation."""

import argparse
import logging
import os
import sys

from ptyscribe import __version__
from ptyscribe.cli.shared import configure_logging
from ptyscribe.config import load_config
from ptyscribe.errors import FatalError, PtyscribeError
from ptyscribe.session import run_session

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build parser for record mode."""
    parser = argparse.ArgumentParser(
        prog="ptyscribe",
        description="Run an interactive shell and record its output to a transcript",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-d", "--debug", action="store_true", help="Write debug logging to the log file"
    )
    parser.add_argument(
        "-o",
        "--output",
        metavar="FILE",
        help="Transcript file (default: typescript, or configured transcript_path)",
    )
    parser.add_argument("--shell", help="Shell to run (default: configured shell, $SHELL, /bin/sh)")
    parser.add_argument("--log-file", metavar="FILE", help="Log file for warnings, and debug output with -d (default: pty.log)")
    return parser


def run(argv: list[str]) -> int:
    """Execute record mode and return the shell's exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config()
    except PtyscribeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    overrides = {
        "transcript_path": args.output,
        "shell": args.shell,
        "log_file": args.log_file,
    }
    config = config.model_copy(update={k: v for k, v in overrides.items() if v is not None})
    configure_logging(args.debug, config.log_file)

    if not os.isatty(sys.stdin.fileno()):
        print("Error: stdin must be a terminal", file=sys.stderr)
        return 1
    if not hasattr(os, "fork"):
        print("Error: recording requires a POSIX environment", file=sys.stderr)
        return 1

    try:
        return run_session(config, sys.stdin.fileno(), sys.stdout.fileno())
    except FatalError as e:
        log.critical("session aborted: %s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (PtyscribeError, OSError, OverflowError) as e:
        log.error("session setup failed: %s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1
