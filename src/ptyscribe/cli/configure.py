"""`ptyscribe configure` command implementation."""

import argparse
import sys

from ptyscribe.cli.shared import configure_logging
from ptyscribe.config import CONFIG_FILE, load_config, save_config
from ptyscribe.errors import PtyscribeError


def build_parser() -> argparse.ArgumentParser:
    """Build parser for the configure command."""
    parser = argparse.ArgumentParser(
        prog="ptyscribe configure",
        description="Store default shell, transcript and log file settings",
    )
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug logging")
    shell_group = parser.add_mutually_exclusive_group()
    shell_group.add_argument("--shell", help="Shell to run instead of $SHELL")
    shell_group.add_argument(
        "--clear-shell", action="store_true", help="Remove stored shell, fall back to $SHELL"
    )
    parser.add_argument("--transcript", metavar="FILE", help="Default transcript file")
    parser.add_argument("--log-file", metavar="FILE", help="Default debug log file")
    return parser


def run(argv: list[str]) -> int:
    """Execute the configure command."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.debug)

    try:
        config = load_config(CONFIG_FILE, environ={})
    except PtyscribeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    updates: dict = {}
    if args.shell is not None:
        updates["shell"] = args.shell
    if args.clear_shell:
        updates["shell"] = None
    if args.transcript is not None:
        updates["transcript_path"] = args.transcript
    if args.log_file is not None:
        updates["log_file"] = args.log_file
    config = config.model_copy(update=updates)

    try:
        path = save_config(config, CONFIG_FILE)
    except OSError as e:
        print(f"Error: cannot save configuration: {e}", file=sys.stderr)
        return 1

    print(f"\nConfiguration saved to {path}")
    print(f"  shell: {config.shell or '(from $SHELL)'}")
    print(f"  transcript_path: {config.transcript_path}")
    print(f"  log_file: {config.log_file}")
    print("")
    return 0
