"""`ptyscribe size` command implementation."""

import argparse
import sys

from ptyscribe.errors import TerminalModeError
from ptyscribe.terminal import get_winsize


def build_parser() -> argparse.ArgumentParser:
    return argparse.ArgumentParser(
        prog="ptyscribe size",
        description="Print the size of the current terminal",
    )


def run(argv: list[str]) -> int:
    build_parser().parse_args(argv)
    try:
        size = get_winsize(sys.stdin.fileno())
    except TerminalModeError as e:
        print(f"Error: failed getting winsize: {e}", file=sys.stderr)
        return 1
    print(f"TTY size: {size.cols} (w) x {size.rows} (h).")
    return 0
