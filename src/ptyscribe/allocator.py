"""PTY master/slave allocation."""

import errno
import logging
import os

from ptyscribe.constants import SLAVE_NAME_MAX
from ptyscribe.errors import AllocationError, ProtocolError

log = logging.getLogger(__name__)


def _open_master() -> tuple[int, str | None]:
    """Open an unused master; also return the slave path if already known."""
    if hasattr(os, "posix_openpt"):
        return os.posix_openpt(os.O_RDWR | os.O_NOCTTY), None
    # Interpreters without posix_openpt: openpty hands back an unlocked,
    # granted slave, which can be reopened by path once closed here.
    master_fd, slave_fd = os.openpty()
    try:
        return master_fd, os.ttyname(slave_fd)
    except OSError:
        os.close(master_fd)
        raise
    finally:
        os.close(slave_fd)


def _prepare_slave(master_fd: int) -> str:
    try:
        os.grantpt(master_fd)
        os.unlockpt(master_fd)
    except OSError as e:
        raise PermissionError(
            e.errno, f"cannot set slave ownership and permissions: {e.strerror}"
        ) from e
    try:
        return os.ptsname(master_fd)
    except OSError as e:
        raise ProtocolError(f"cannot obtain slave name: {e}") from e


def allocate(slave_name_max: int = SLAVE_NAME_MAX) -> tuple[int, str]:
    """Return ``(master_fd, slave_path)`` for a fresh, unlocked PTY.

    The slave path must encode to fewer than ``slave_name_max`` bytes, or
    ``OverflowError`` is raised. The master is closed on every failure.
    """
    try:
        master_fd, slave_path = _open_master()
    except OSError as e:
        raise AllocationError(f"cannot create master PTY: {e}") from e
    log.debug("master PTY created, fd=%d", master_fd)

    try:
        if slave_path is None:
            slave_path = _prepare_slave(master_fd)
        slave_name_len = len(os.fsencode(slave_path))
        if slave_name_len >= slave_name_max:
            raise OverflowError(
                f"{os.strerror(errno.EOVERFLOW)}: slave name is too large "
                f"({slave_name_len}), cannot fit into {slave_name_max} bytes"
            )
    except BaseException:
        os.close(master_fd)
        raise

    log.debug("slave unlocked: %s", slave_path)
    return master_fd, slave_path
