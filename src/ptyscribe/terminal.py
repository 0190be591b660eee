"""Outer terminal mode and window size control."""

import fcntl
import logging
import termios
from collections.abc import Iterator
from contextlib import contextmanager

from ptyscribe.errors import TerminalModeError, TerminalRestoreError
from ptyscribe.models import TerminalModeSnapshot, WindowSize

log = logging.getLogger(__name__)

# termios attribute list indices
IFLAG, OFLAG, CFLAG, LFLAG, ISPEED, OSPEED, CC = range(7)

RAW_IFLAG_CLEAR = (
    termios.BRKINT
    | termios.ICRNL
    | termios.IGNBRK
    | termios.IGNCR
    | termios.INLCR
    | termios.INPCK
    | termios.ISTRIP
    | termios.IXON
    | termios.PARMRK
)
RAW_LFLAG_CLEAR = termios.ICANON | termios.ISIG | termios.IEXTEN | termios.ECHO


def capture(fd: int) -> TerminalModeSnapshot:
    """Snapshot the current termios attributes of ``fd``."""
    try:
        attrs = termios.tcgetattr(fd)
    except termios.error as e:
        raise TerminalModeError(f"cannot fetch current tty settings: {e}") from e
    return TerminalModeSnapshot(fd=fd, attrs=attrs)


def make_raw(attrs: list) -> list:
    """Return a raw-mode copy of a termios attribute list.

    Unlike ``tty.setraw`` this keeps character size and parity (cflag is not
    touched), clearing only the input, output and local flags listed above.
    Reads return as soon as one byte is available, with no inter-byte timer.
    """
    raw = list(attrs)
    raw[CC] = list(attrs[CC])
    raw[LFLAG] &= ~RAW_LFLAG_CLEAR
    raw[IFLAG] &= ~RAW_IFLAG_CLEAR
    raw[OFLAG] &= ~termios.OPOST
    raw[CC][termios.VMIN] = 1
    raw[CC][termios.VTIME] = 0
    return raw


def set_raw(fd: int) -> None:
    """Put ``fd`` in raw mode, discarding unread input."""
    try:
        termios.tcsetattr(fd, termios.TCSAFLUSH, make_raw(termios.tcgetattr(fd)))
    except termios.error as e:
        raise TerminalModeError(f"cannot set raw mode: {e}") from e
    log.debug("fd %d set raw", fd)


def restore(fd: int, snapshot: TerminalModeSnapshot) -> None:
    """Re-apply the captured mode. Only the first call touches the terminal."""
    if snapshot.restored:
        return
    snapshot.restored = True
    try:
        termios.tcsetattr(fd, termios.TCSANOW, snapshot.attrs)
    except termios.error as e:
        raise TerminalRestoreError(f"failed resetting tty: {e}") from e
    log.debug("fd %d restored", fd)


@contextmanager
def raw_mode(fd: int, snapshot: TerminalModeSnapshot) -> Iterator[None]:
    """Hold ``fd`` in raw mode for the body, restoring ``snapshot`` on exit."""
    set_raw(fd)
    try:
        yield
    finally:
        restore(fd, snapshot)


def get_winsize(fd: int) -> WindowSize:
    """Return the window size of the given tty fd."""
    try:
        data = fcntl.ioctl(fd, termios.TIOCGWINSZ, WindowSize.empty())
    except OSError as e:
        raise TerminalModeError(f"cannot get tty winsize: {e}") from e
    return WindowSize.unpack(data)


def set_winsize(fd: int, size: WindowSize) -> None:
    """Apply ``size`` to the tty or PTY master ``fd``."""
    try:
        fcntl.ioctl(fd, termios.TIOCSWINSZ, size.pack())
    except OSError as e:
        raise TerminalModeError(f"cannot set tty winsize: {e}") from e
