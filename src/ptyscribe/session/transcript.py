"""Transcript file written by the output pump."""

import logging
import os

from ptyscribe.constants import TRANSCRIPT_MODE
from ptyscribe.fdio import write_exact

log = logging.getLogger(__name__)


class Transcript:
    """Raw byte copy of everything the shell printed."""

    def __init__(self, fd: int, path: str) -> None:
        self.fd = fd
        self.path = path
        self.bytes_written = 0
        self._closed = False

    @classmethod
    def open(cls, path: str) -> "Transcript":
        """Create ``path``, truncating any previous transcript."""
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, TRANSCRIPT_MODE)
        log.debug("transcript opened: %s", path)
        return cls(fd, path)

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, data: bytes) -> None:
        write_exact(self.fd, data, "transcript")
        self.bytes_written += len(data)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        os.close(self.fd)
        log.debug("transcript closed: %s (%d bytes)", self.path, self.bytes_written)

    def __enter__(self) -> "Transcript":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False
