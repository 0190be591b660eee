"""Exception hierarchy for ptyscribe.

Setup failures (allocation, terminal queries) are raised before any data is
relayed and are reported as a plain error. Subclasses of
``FatalError`` end the session; the terminal is still restored on the way out.
"""


class PtyscribeError(Exception):
    """Base class for ptyscribe errors."""


class AllocationError(PtyscribeError):
    """No unused PTY master could be obtained."""


class ProtocolError(PtyscribeError):
    """The slave path of an allocated PTY could not be resolved."""


class TerminalModeError(PtyscribeError):
    """Reading or applying terminal attributes or window size failed."""


class FatalError(PtyscribeError):
    """A failure that ends the session immediately."""


class SpawnError(FatalError):
    """The shell process could not be forked."""


class ShortWriteError(FatalError):
    """A relay write transferred fewer bytes than requested."""

    def __init__(self, destination: str, expected: int, written: int) -> None:
        super().__init__(
            f"short write to {destination}: wrote {written} of {expected} bytes"
        )
        self.destination = destination
        self.expected = expected
        self.written = written


class ResizeError(FatalError):
    """The outer window size could not be copied to the PTY."""


class TerminalRestoreError(FatalError):
    """The outer terminal mode could not be restored."""
