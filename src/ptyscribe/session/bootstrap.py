"""Fork a shell as session leader on a freshly allocated PTY."""

import contextlib
import fcntl
import logging
import os
import signal
import termios
from collections.abc import Mapping
from typing import NoReturn

from ptyscribe.allocator import allocate
from ptyscribe.constants import DEFAULT_SHELL, SLAVE_NAME_MAX
from ptyscribe.errors import SpawnError
from ptyscribe.models import PtySession, ScribeConfig, WindowSize

log = logging.getLogger(__name__)


def resolve_shell(config: ScribeConfig | None = None, environ: Mapping[str, str] | None = None) -> str:
    """Pick the shell to run: config, then $SHELL, then a POSIX default."""
    if config is not None and config.shell and config.shell.strip():
        return config.shell.strip()
    environ = os.environ if environ is None else environ
    shell = environ.get("SHELL", "").strip()
    return shell or DEFAULT_SHELL


def _attach_and_exec(
    slave_path: str,
    shell_path: str,
    termios_template: list | None,
    winsize_template: WindowSize | None,
) -> NoReturn:
    """Child side of the fork. Never returns."""
    try:
        os.setsid()
        slave_fd = os.open(slave_path, os.O_RDWR)
        # Linux grants the controlling tty on open after setsid; BSDs need the ioctl.
        if hasattr(termios, "TIOCSCTTY"):
            fcntl.ioctl(slave_fd, termios.TIOCSCTTY, 0)
        if termios_template is not None:
            termios.tcsetattr(slave_fd, termios.TCSANOW, termios_template)
        if winsize_template is not None:
            fcntl.ioctl(slave_fd, termios.TIOCSWINSZ, winsize_template.pack())
        os.dup2(slave_fd, 0)
        os.dup2(slave_fd, 1)
        os.dup2(slave_fd, 2)
        if slave_fd > 2:
            os.close(slave_fd)
        # The interpreter ignores these; exec would pass that on to the shell.
        signal.signal(signal.SIGPIPE, signal.SIG_DFL)
        signal.signal(signal.SIGXFSZ, signal.SIG_DFL)
        os.execlp(shell_path, shell_path)
    except BaseException as e:
        with contextlib.suppress(OSError):
            os.write(2, f"ptyscribe: cannot start {shell_path}: {e}\r\n".encode(errors="replace"))
    finally:
        os._exit(1)


def spawn(
    shell_path: str,
    termios_template: list | None = None,
    winsize_template: WindowSize | None = None,
    slave_name_max: int = SLAVE_NAME_MAX,
) -> PtySession:
    """Start ``shell_path`` on a new PTY and return the parent's view of it.

    The parent never opens the slave; only the master descriptor is kept.
    """
    master_fd, slave_path = allocate(slave_name_max)

    try:
        pid = os.fork()
    except OSError as e:
        os.close(master_fd)
        raise SpawnError(f"cannot fork: {e}") from e

    if pid == 0:
        os.close(master_fd)
        _attach_and_exec(slave_path, shell_path, termios_template, winsize_template)

    log.debug("spawned %s as pid %d on %s", shell_path, pid, slave_path)
    return PtySession(master_fd=master_fd, slave_path=slave_path, child_pid=pid)
