"""Top-level CLI router."""

import sys

from . import configure as configure_cmd
from . import record as record_cmd
from . import size as size_cmd


def main(argv: list[str] | None = None) -> int:
    """Route to record mode (the default), size, or configure."""
    args = list(sys.argv[1:] if argv is None else argv)
    if args and args[0] == "configure":
        return configure_cmd.run(args[1:])
    if args and args[0] == "size":
        return size_cmd.run(args[1:])
    if args and args[0] == "record":
        return record_cmd.run(args[1:])
    return record_cmd.run(args)


def entrypoint() -> None:
    """Console script entrypoint."""
    raise SystemExit(main())
