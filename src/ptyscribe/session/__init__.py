"""PTY-backed shell session: spawn, relay, record, tear down."""

from ptyscribe.session.bootstrap import resolve_shell, spawn
from ptyscribe.session.lifecycle import run_session
from ptyscribe.session.multiplexer import Multiplexer
from ptyscribe.session.resize import ResizePropagator
from ptyscribe.session.transcript import Transcript

__all__ = [
    "Multiplexer",
    "ResizePropagator",
    "Transcript",
    "resolve_shell",
    "run_session",
    "spawn",
]
