"""Captured terminal mode model."""

from dataclasses import dataclass, field


@dataclass
class TerminalModeSnapshot:
    """The termios attributes of a terminal, captured before raw mode."""

    fd: int
    attrs: list
    restored: bool = field(default=False, init=False)
