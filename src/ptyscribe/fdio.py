"""Unbuffered descriptor reads and exact-length writes."""

import logging
import os

from ptyscribe.errors import ShortWriteError

log = logging.getLogger(__name__)


def read_chunk(fd: int, size: int) -> bytes:
    """Read up to ``size`` bytes; ``b""`` means the stream has ended.

    A read error counts as end of stream: a PTY master reports EIO once the
    last slave descriptor is closed.
    """
    try:
        return os.read(fd, size)
    except OSError as e:
        log.debug("read from fd %d ended: %s", fd, e)
        return b""


def write_exact(fd: int, data: bytes, destination: str) -> None:
    """Write all of ``data`` in a single call or raise ``ShortWriteError``."""
    written = os.write(fd, data)
    if written != len(data):
        raise ShortWriteError(destination, len(data), written)
