"""Run one recorded shell session from start to teardown."""

import contextlib
import logging
import os
import signal
import time
from collections.abc import Iterator

from ptyscribe.constants import REAP_POLL_SECONDS
from ptyscribe.models import PtySession, ScribeConfig
from ptyscribe.session.bootstrap import resolve_shell, spawn
from ptyscribe.session.multiplexer import Multiplexer
from ptyscribe.session.resize import ResizePropagator
from ptyscribe.session.transcript import Transcript
from ptyscribe.terminal import capture, get_winsize, raw_mode

log = logging.getLogger(__name__)

TERMINATING_SIGNALS = (signal.SIGTERM, signal.SIGHUP)


def _raise_terminated(signum, _frame):
    raise SystemExit(128 + signum)


@contextlib.contextmanager
def _exit_on_termination() -> Iterator[None]:
    """Turn SIGTERM/SIGHUP into SystemExit so cleanup blocks still run."""
    previous = {signum: signal.signal(signum, _raise_terminated) for signum in TERMINATING_SIGNALS}
    try:
        yield
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)


def _exit_code(status: int) -> int:
    code = os.waitstatus_to_exitcode(status)
    # Killed by a signal: report it the way shells do.
    if code < 0:
        return 128 - code
    return code


def reap(pid: int, timeout: float) -> int:
    """Wait for ``pid`` to exit, killing it after ``timeout`` seconds."""
    deadline = time.monotonic() + timeout
    while True:
        waited, status = os.waitpid(pid, os.WNOHANG)
        if waited == pid:
            code = _exit_code(status)
            log.debug("child %d exited with %d", pid, code)
            return code
        if time.monotonic() >= deadline:
            break
        time.sleep(REAP_POLL_SECONDS)

    log.warning("child %d still running after %.1fs, killing it", pid, timeout)
    with contextlib.suppress(ProcessLookupError):
        os.kill(pid, signal.SIGKILL)
    _, status = os.waitpid(pid, 0)
    return _exit_code(status)


def _teardown(session: PtySession, transcript: Transcript | None, timeout: float) -> int:
    try:
        if transcript is not None:
            transcript.close()
    finally:
        try:
            # Closing the master hangs up the slave, which sends SIGHUP to the shell.
            session.close_master()
        finally:
            exit_code = reap(session.child_pid, timeout)
    return exit_code


def run_session(config: ScribeConfig, stdin_fd: int = 0, stdout_fd: int = 1) -> int:
    """Run the shell under a recorded PTY and return its exit code.

    The shell and the slave start from the mode captured here, not the raw
    one. The outer terminal is restored after the shell has been reaped,
    before this returns or raises.
    """
    snapshot = capture(stdin_fd)
    winsize = get_winsize(stdin_fd)
    shell = resolve_shell(config)
    log.debug("shell=%s transcript=%s", shell, config.transcript_path)

    with _exit_on_termination(), raw_mode(stdin_fd, snapshot):
        session = spawn(shell, snapshot.attrs, winsize, slave_name_max=config.slave_name_max)
        transcript = None
        try:
            transcript = Transcript.open(config.transcript_path)
            multiplexer = Multiplexer(
                stdin_fd, stdout_fd, session, transcript, chunk_size=config.chunk_size
            )
            with ResizePropagator(stdin_fd, session.master_fd) as resize:
                resize.propagate()
                multiplexer.run(resize)
        finally:
            exit_code = _teardown(session, transcript, config.reap_timeout)
    return exit_code
