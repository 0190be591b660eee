"""Copy outer terminal resizes onto the PTY master.

SIGWINCH only wakes a notification pipe (via ``signal.set_wakeup_fd``); the
size is read and applied by whoever waits on :meth:`ResizePropagator.fileno`.
"""

import enum
import logging
import os
import signal

from ptyscribe.errors import ResizeError, TerminalModeError
from ptyscribe.models import WindowSize
from ptyscribe.terminal import get_winsize, set_winsize

log = logging.getLogger(__name__)


class ResizeState(enum.Enum):
    UNARMED = "unarmed"
    ARMED = "armed"


def _ignore_signal(_signum, _frame):
    """Installed so the C-level handler writes to the wakeup fd."""


class ResizePropagator:
    """Propagate window-change notifications from ``source_fd`` to ``master_fd``."""

    def __init__(self, source_fd: int, master_fd: int) -> None:
        self.source_fd = source_fd
        self.master_fd = master_fd
        self.state = ResizeState.UNARMED
        self._read_fd: int | None = None
        self._write_fd: int | None = None
        self._previous_handler = None
        self._previous_wakeup_fd = -1
        self._was_armed = False

    def arm(self) -> None:
        """Start listening for SIGWINCH. Must be called from the main thread."""
        if self._was_armed:
            raise RuntimeError("resize propagator can only be armed once")
        self._was_armed = True

        self._read_fd, self._write_fd = os.pipe()
        os.set_blocking(self._read_fd, False)
        os.set_blocking(self._write_fd, False)
        self._previous_handler = signal.signal(signal.SIGWINCH, _ignore_signal)
        self._previous_wakeup_fd = signal.set_wakeup_fd(self._write_fd)
        self.state = ResizeState.ARMED
        log.debug("resize propagation armed")

    def disarm(self) -> None:
        if self.state is not ResizeState.ARMED:
            return
        self.state = ResizeState.UNARMED
        signal.set_wakeup_fd(self._previous_wakeup_fd)
        signal.signal(signal.SIGWINCH, self._previous_handler)
        os.close(self._read_fd)
        os.close(self._write_fd)
        self._read_fd = self._write_fd = None
        log.debug("resize propagation disarmed")

    def fileno(self) -> int:
        """Descriptor that becomes readable when a notification is pending."""
        if self._read_fd is None:
            raise ValueError("resize propagator is not armed")
        return self._read_fd

    def propagate(self) -> WindowSize:
        """Read the outer size and apply it to the master."""
        try:
            size = get_winsize(self.source_fd)
            set_winsize(self.master_fd, size)
        except TerminalModeError as e:
            raise ResizeError(f"cannot propagate window size: {e}") from e
        log.debug("winsize: %d x %d", size.rows, size.cols)
        return size

    def handle_pending(self) -> WindowSize | None:
        """Drain pending notifications; propagate once if any was a resize."""
        if self.state is not ResizeState.ARMED:
            return None
        pending = b""
        while True:
            try:
                chunk = os.read(self._read_fd, 64)
            except BlockingIOError:
                break
            if not chunk:
                break
            pending += chunk
        if int(signal.SIGWINCH) not in pending:
            return None
        return self.propagate()

    def __enter__(self) -> "ResizePropagator":
        self.arm()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.disarm()
        return False
