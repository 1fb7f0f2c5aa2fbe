"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the file server.

The server has exactly one external knob (the port, from the command
line). Everything else lives here with sensible defaults so tests and
embedding code can construct a server without touching the CLI.

=============================================================================
WHERE DO FILES COME FROM?
=============================================================================

Files are served from the directory containing the running program,
NOT the current working directory:

    $ cd /tmp
    $ /opt/site/fileserver 8080      # serves /opt/site/index.html
                                     # (not /tmp/index.html)

This decouples behavior from the location the server was launched from.
Set ``base_dir`` to override it (tests do).

The "running program" is ``sys.argv[0]``. Under ``python -m fileserver``
that is ``fileserver/__main__.py``, so the document root becomes the
package's own directory and its modules are servable (``GET /config.py``
returns this file as application/octet-stream). Run the installed
``fileserver`` console script from the site directory, or set
``base_dir``, to serve a real document root.

=============================================================================
"""

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


def executable_dir() -> Path:
    """
    Directory containing the running program.

    For ``python -m fileserver`` this is the package directory; for the
    installed ``fileserver`` console script it is the directory holding
    the script. When there is no program file at all (``python -c``, an
    interactive session) the interpreter's directory is used.
    """
    program = sys.argv[0] if sys.argv else ""
    if program and program != "-c":
        return Path(program).resolve().parent
    return Path(sys.executable).resolve().parent


@dataclass
class ServerConfig:
    """
    Configuration for the file server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, max_line_size, timeout

    LISTENER RESILIENCE
    - max_accept_failures, accept_retry_delay

    FILES
    - base_dir

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """IPv4 address to bind to. 0.0.0.0 = every interface."""

    port: int = 8080
    """Port to listen on. 0 lets the OS pick a free one."""

    backlog: int = 128
    """Maximum number of queued, not yet accepted connections."""

    buffer_size: int = 4096
    """Bytes requested per recv() while looking for the end of the line."""

    max_line_size: int = 8192
    """
    Longest request line we are willing to buffer.
    A client that sends more without a newline is treated as a read error.
    """

    timeout: Optional[float] = 30.0
    """
    Per-connection deadline for the line read and for the response write.
    None = block forever (a silent client then holds its thread forever).
    """

    # ─────────────────────────────────────────────────────────────────────
    # LISTENER RESILIENCE
    # ─────────────────────────────────────────────────────────────────────

    max_accept_failures: int = 5
    """Consecutive accept() errors tolerated before the listener gives up."""

    accept_retry_delay: float = 0.05
    """First backoff delay after an accept() error; doubles each retry."""

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    base_dir: Optional[str] = None
    """Directory files are resolved against. None = executable_dir()."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    @property
    def document_root(self) -> Path:
        """The directory requested files are read from."""
        if self.base_dir is not None:
            return Path(self.base_dir)
        return executable_dir()

    def validate(self) -> None:
        """
        Validate configuration values.

        Called once at server construction so mistakes surface before the
        socket is ever bound.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 64:
            raise ValueError("buffer_size must be >= 64")

        if self.max_line_size < self.buffer_size:
            raise ValueError("max_line_size must be >= buffer_size")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.max_accept_failures < 1:
            raise ValueError("max_accept_failures must be >= 1")

        if self.accept_retry_delay < 0:
            raise ValueError("accept_retry_delay must be >= 0")

        if self.base_dir is not None and not os.path.isdir(self.base_dir):
            raise ValueError(f"base_dir is not a directory: {self.base_dir}")


def parse_port(value: str) -> int:
    """
    Convert the CLI port argument to an int.

    Raises:
        ValueError: If the value is not a port number.
    """
    try:
        port = int(value, 10)
    except ValueError:
        raise ValueError(f"Invalid port: {value!r}") from None
    if not 0 <= port < 65536:
        raise ValueError(f"Invalid port: {value!r}. Must be 0-65535.")
    return port
