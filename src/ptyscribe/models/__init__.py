"""Model package for ptyscribe."""

from ptyscribe.models.pty_session import PtySession
from ptyscribe.models.scribe_config import ScribeConfig
from ptyscribe.models.terminal_snapshot import TerminalModeSnapshot
from ptyscribe.models.window_size import WindowSize

__all__ = [
    "PtySession",
    "ScribeConfig",
    "TerminalModeSnapshot",
    "WindowSize",
]
