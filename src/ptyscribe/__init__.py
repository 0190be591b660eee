"""ptyscribe: record an interactive shell session through a PTY."""

__version__ = "0.1.0"
