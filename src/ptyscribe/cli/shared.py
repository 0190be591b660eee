"""Shared CLI helpers."""

import logging


def configure_logging(debug: bool, log_file: str | None = None) -> None:
    """Configure root logging once per process.

    With ``log_file`` set, records are appended to that file instead of
    stderr, which is unusable while the terminal is in raw mode. The file is
    only created once a record is actually emitted.
    """
    level = logging.DEBUG if debug else logging.WARNING
    if log_file:
        handler = logging.FileHandler(log_file, delay=True)
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(name)s %(levelname)s: %(message)s",
            handlers=[handler],
        )
    else:
        logging.basicConfig(
            level=level,
            format="%(name)s %(levelname)s: %(message)s",
        )
