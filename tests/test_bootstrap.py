"""Tests for ptyscribe.session.bootstrap."""

import errno
import os
import signal
import termios
from unittest.mock import patch

import pytest
from conftest import read_available

from ptyscribe.errors import AllocationError, SpawnError
from ptyscribe.models import ScribeConfig, WindowSize
from ptyscribe.session.bootstrap import resolve_shell, spawn
from ptyscribe.terminal import make_raw


def _spawn_or_skip(*args, **kwargs):
    try:
        return spawn(*args, **kwargs)
    except AllocationError as e:
        pytest.skip(f"pseudo-terminals unavailable: {e}")


def _wait_exit_code(pid: int) -> int:
    _, status = os.waitpid(pid, 0)
    return os.waitstatus_to_exitcode(status)


class TestResolveShell:
    def test_configured_shell_wins(self):
        config = ScribeConfig(shell="/bin/zsh")
        assert resolve_shell(config, {"SHELL": "/bin/bash"}) == "/bin/zsh"

    def test_uses_shell_environment_variable(self):
        assert resolve_shell(ScribeConfig(), {"SHELL": "/bin/bash"}) == "/bin/bash"

    @pytest.mark.parametrize("environ", [{}, {"SHELL": ""}, {"SHELL": "   "}])
    def test_defaults_to_posix_shell(self, environ):
        assert resolve_shell(ScribeConfig(), environ) == "/bin/sh"

    def test_blank_configured_shell_is_ignored(self):
        assert resolve_shell(ScribeConfig(shell=" "), {"SHELL": "/bin/bash"}) == "/bin/bash"


class TestSpawn:
    def test_shell_output_arrives_on_master(self, make_shell):
        shell = make_shell("printf 'hello\\n'\nexit 0")
        session = _spawn_or_skip(shell)
        try:
            output = read_available(session.master_fd)
        finally:
            session.close_master()

        assert b"hello" in output
        assert _wait_exit_code(session.child_pid) == 0

    def test_termios_template_is_applied_to_slave(self, make_shell, pty_pair):
        # A raw template disables output post-processing, so no CR is added.
        template = make_raw(termios.tcgetattr(pty_pair[1]))
        shell = make_shell("printf 'hello\\n'")
        session = _spawn_or_skip(shell, template)
        try:
            output = read_available(session.master_fd)
        finally:
            session.close_master()

        assert output == b"hello\n"
        assert _wait_exit_code(session.child_pid) == 0

    def test_winsize_template_is_applied_to_slave(self, make_shell):
        shell = make_shell("stty size")
        session = _spawn_or_skip(shell, None, WindowSize(rows=30, cols=100))
        try:
            output = read_available(session.master_fd)
        finally:
            session.close_master()

        assert b"30 100" in output
        _wait_exit_code(session.child_pid)

    def test_child_is_session_leader_with_controlling_tty(self, make_shell):
        shell = make_shell("echo ready\nread line")
        session = _spawn_or_skip(shell)
        try:
            assert b"ready" in read_available(session.master_fd)
            assert os.getsid(session.child_pid) == session.child_pid
            assert os.getpgid(session.child_pid) == session.child_pid
        finally:
            # Hanging up the slave ends the shell.
            session.close_master()
        assert _wait_exit_code(session.child_pid) != 0

    def test_shell_starts_with_default_pipe_and_file_size_signals(self, make_shell):
        if not os.path.exists("/proc/self/status"):
            pytest.skip("needs /proc/self/status")
        session = _spawn_or_skip(make_shell("grep SigIgn /proc/self/status"))
        try:
            output = read_available(session.master_fd)
        finally:
            session.close_master()
        _wait_exit_code(session.child_pid)

        line = next(
            line for line in output.decode().splitlines() if line.startswith("SigIgn:")
        )
        ignored = int(line.split()[1], 16)
        assert ignored & (1 << (signal.SIGPIPE - 1)) == 0
        assert ignored & (1 << (signal.SIGXFSZ - 1)) == 0

    def test_exit_status_passes_through(self, make_shell):
        session = _spawn_or_skip(make_shell("exit 7"))
        read_available(session.master_fd)
        session.close_master()
        assert _wait_exit_code(session.child_pid) == 7

    def test_exec_failure_terminates_child(self, tmp_path):
        missing = str(tmp_path / "no-such-shell")
        session = _spawn_or_skip(missing)
        try:
            output = read_available(session.master_fd)
        finally:
            session.close_master()

        assert b"cannot start" in output
        assert _wait_exit_code(session.child_pid) == 1

    def test_parent_keeps_only_master(self, make_shell):
        fd_dir = "/proc/self/fd"
        if not os.path.isdir(fd_dir):
            pytest.skip("needs /proc/self/fd")
        before = set(os.listdir(fd_dir))
        session = _spawn_or_skip(make_shell("exit 0"))
        try:
            opened = set(os.listdir(fd_dir)) - before
            assert opened == {str(session.master_fd)}
        finally:
            read_available(session.master_fd)
            session.close_master()
            _wait_exit_code(session.child_pid)


class TestSpawnFailures:
    def test_fork_failure_closes_master(self):
        read_fd, write_fd = os.pipe()
        try:
            with (
                patch(
                    "ptyscribe.session.bootstrap.allocate",
                    return_value=(read_fd, "/dev/pts/99"),
                ),
                patch(
                    "ptyscribe.session.bootstrap.os.fork",
                    side_effect=OSError(errno.EAGAIN, "Resource temporarily unavailable"),
                ),
            ):
                with pytest.raises(SpawnError, match="cannot fork"):
                    spawn("/bin/sh")
            with pytest.raises(OSError):
                os.fstat(read_fd)
        finally:
            os.close(write_fd)

    def test_allocation_errors_propagate(self):
        with patch(
            "ptyscribe.session.bootstrap.allocate",
            side_effect=OverflowError("slave name is too large"),
        ):
            with pytest.raises(OverflowError):
                spawn("/bin/sh", slave_name_max=2)


def test_close_master_is_idempotent(make_shell):
    session = _spawn_or_skip(make_shell("exit 0"))
    read_available(session.master_fd)
    session.close_master()
    session.close_master()
    assert session.closed
    assert _wait_exit_code(session.child_pid) == 0
