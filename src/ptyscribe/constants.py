"""Shared constants for ptyscribe."""

# Bytes moved per read in each relay direction.
READ_CHUNK_SIZE = 256

# Upper bound (exclusive) on the encoded length of a PTY slave path.
SLAVE_NAME_MAX = 512

DEFAULT_SHELL = "/bin/sh"
DEFAULT_TRANSCRIPT = "typescript"
DEFAULT_LOG_FILE = "pty.log"

# rw for owner, group and other; the process umask still applies.
TRANSCRIPT_MODE = 0o666

# Seconds to wait for the shell to exit after its PTY is closed.
REAP_TIMEOUT_SECONDS = 2.0
REAP_POLL_SECONDS = 0.05
