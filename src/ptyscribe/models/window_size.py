"""Terminal window size model."""

import struct
from dataclasses import dataclass

_WINSIZE_FORMAT = "HHHH"


@dataclass(frozen=True)
class WindowSize:
    """Rows and columns of a terminal, as carried by ``struct winsize``."""

    rows: int
    cols: int
    xpixel: int = 0
    ypixel: int = 0

    def pack(self) -> bytes:
        return struct.pack(_WINSIZE_FORMAT, self.rows, self.cols, self.xpixel, self.ypixel)

    @classmethod
    def unpack(cls, data: bytes) -> "WindowSize":
        rows, cols, xpixel, ypixel = struct.unpack(_WINSIZE_FORMAT, data)
        return cls(rows, cols, xpixel, ypixel)

    @staticmethod
    def empty() -> bytes:
        """Return a zeroed buffer sized for a TIOCGWINSZ query."""
        return b"\x00" * struct.calcsize(_WINSIZE_FORMAT)
