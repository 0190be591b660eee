"""Shared fixtures for ptyscribe tests."""

import os
import select
import stat
import tty
from collections.abc import Iterator
from pathlib import Path

import pytest


def _openpty_or_skip() -> tuple[int, int]:
    try:
        return os.openpty()
    except OSError as e:
        pytest.skip(f"pseudo-terminals unavailable: {e}")


def _close_quietly(*fds: int) -> None:
    for fd in fds:
        try:
            os.close(fd)
        except OSError:
            pass


@pytest.fixture
def pty_pair() -> Iterator[tuple[int, int]]:
    """A (master, slave) PTY pair, closed after the test."""
    master_fd, slave_fd = _openpty_or_skip()
    yield master_fd, slave_fd
    _close_quietly(master_fd, slave_fd)


@pytest.fixture
def raw_pty_pair(pty_pair) -> tuple[int, int]:
    """A PTY pair whose slave passes bytes through unchanged."""
    tty.setraw(pty_pair[1])
    return pty_pair


@pytest.fixture
def make_shell(tmp_path: Path):
    """Write an executable /bin/sh script and return its path."""

    def _make(body: str, name: str = "fake-shell") -> str:
        script = tmp_path / name
        script.write_text(f"#!/bin/sh\n{body}\n", encoding="utf-8")
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(script)

    return _make


def read_available(fd: int, timeout: float = 2.0) -> bytes:
    """Read from ``fd`` until it has been idle for a short while."""
    chunks = []
    wait = timeout
    while True:
        ready, _, _ = select.select([fd], [], [], wait)
        if not ready:
            break
        try:
            data = os.read(fd, 4096)
        except OSError:
            break
        if not data:
            break
        chunks.append(data)
        wait = 0.2
    return b"".join(chunks)
