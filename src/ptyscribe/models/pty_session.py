"""PTY session model shared by the relay and the resize propagator."""

import os
from dataclasses import dataclass, field


@dataclass
class PtySession:
    """A spawned shell and the master side of its PTY."""

    master_fd: int
    slave_path: str
    child_pid: int
    _closed: bool = field(default=False, init=False, repr=False)

    @property
    def closed(self) -> bool:
        return self._closed

    def close_master(self) -> None:
        """Close the master descriptor; later calls do nothing."""
        if self._closed:
            return
        self._closed = True
        os.close(self.master_fd)
