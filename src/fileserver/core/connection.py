"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps an accepted client socket with exactly the operations a
one-request connection needs: read ONE line, write ONE response, close.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL!
=============================================================================

The client's request line can arrive in any number of pieces:

    Client sends:
        "GET /index.html HTTP/1.1\\r\\nHost: x\\r\\n\\r\\n"

    Server might receive:
        recv() → "GET /ind"
        recv() → "ex.html HTTP/1.1\\r\\nHos"
        recv() → "t: x\\r\\n\\r\\n"

So we buffer chunks until a "\\n" shows up, and hand back everything up
to and including it. Whatever follows the newline (headers, usually) is
never looked at.

If the client goes away before sending a "\\n", that is a READ ERROR:
we close without answering, even if some bytes did arrive.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──► READING ──┬──► PARSED ──┬──► RESOLVED ───────┐
                      │             │                     │
                      │             └──► RESOLVE_FAILED ──┤
                      │                                   │
                      ├──► PARSE_FAILED ──────────────────┤
                      │                                   ▼
                      │                              RESPONDING
                      │                                   │
                      └── (read error) ──► CLOSING ◄──────┘
                                              │
                                              ▼
                                            CLOSED

=============================================================================
DEADLINES
=============================================================================

A client that connects and then says nothing would otherwise hold its
thread and socket forever. The socket timeout is the per-connection
deadline for the read and for the write alike.

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid


logger = logging.getLogger(__name__)

# Total time close() spends discarding unread client input
DRAIN_TIMEOUT = 0.5

# Most unread bytes close() will discard before giving up
MAX_DRAIN_BYTES = 64 * 1024


class ConnectionState(Enum):
    """Connection lifecycle states."""
    NEW = "new"                        # Just accepted
    READING = "reading"                # Waiting for the request line
    PARSED = "parsed"                  # Request line accepted
    PARSE_FAILED = "parse_failed"      # Request line rejected
    RESOLVED = "resolved"              # File loaded
    RESOLVE_FAILED = "resolve_failed"  # File missing or unreadable
    RESPONDING = "responding"          # Writing the response
    CLOSING = "closing"                # Shutdown sequence running
    CLOSED = "closed"                  # Socket released


class ConnectionReadError(Exception):
    """
    Raised when no complete request line could be read.

    Covers EOF before the newline, timeouts, resets and over-long lines.
    The connection is abandoned without a response.
    """


@dataclass
class Connection:
    """
    Represents one client connection.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    Connection Responsibilities                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  1. BUFFERED LINE READ                                               │
    │     └── recv() until "\\n", capped at max_line_size                  │
    │                                                                      │
    │  2. SINGLE WRITE                                                     │
    │     └── sendall() the whole response, report success as a bool       │
    │                                                                      │
    │  3. DEADLINE                                                         │
    │     └── socket timeout bounds both of the above                      │
    │                                                                      │
    │  4. GRACEFUL CLOSE                                                   │
    │     └── FIN, drain unread input, release the descriptor              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short unique identifier (for DEBUG logs).
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
    """

    socket: socket.socket
    address: tuple

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 4096
    timeout: Optional[float] = 30.0
    max_line_size: int = 8192

    _buffer: bytes = field(default=b"", repr=False)

    def __post_init__(self):
        # Accepted sockets inherit nothing useful from the listener's
        # polling timeout; set our own deadline explicitly.
        self.socket.settimeout(self.timeout)

    @property
    def peer(self) -> str:
        """Client address as "host:port" (the log prefix)."""
        if isinstance(self.address, tuple) and len(self.address) >= 2:
            return f"{self.address[0]}:{self.address[1]}"
        return str(self.address)

    @property
    def age(self) -> float:
        """Connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_line(self) -> bytes:
        """
        Read up to and including the first "\\n".

        Returns:
            The line, terminator included.

        Raises:
            ConnectionReadError: Connection closed before a newline,
                read timed out, socket error, or the line grew past
                max_line_size.
        """
        self.state = ConnectionState.READING

        while b"\n" not in self._buffer:
            if len(self._buffer) >= self.max_line_size:
                raise ConnectionReadError(
                    f"request line exceeds {self.max_line_size} bytes"
                )

            try:
                chunk = self.socket.recv(self.buffer_size)
            except socket.timeout:
                raise ConnectionReadError("timed out waiting for request line") from None
            except OSError as e:
                raise ConnectionReadError(str(e)) from e

            if not chunk:
                raise ConnectionReadError("EOF")

            self._buffer += chunk

        line_end = self._buffer.index(b"\n") + 1
        if line_end > self.max_line_size:
            raise ConnectionReadError(
                f"request line exceeds {self.max_line_size} bytes"
            )

        line, self._buffer = self._buffer[:line_end], self._buffer[line_end:]
        return line

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send the whole response with a single sendall().

        Returns:
            True if sent, False if the client went away or the write
            deadline passed. The caller logs and closes; the server
            keeps running either way.
        """
        self.state = ConnectionState.RESPONDING

        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            # socket.timeout, BrokenPipeError and ConnectionResetError
            # are all OSError subclasses
            logger.debug(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self) -> Optional[OSError]:
        """
        Close the connection gracefully.

        1. shutdown(SHUT_WR): send FIN, the client sees end of body
        2. drain: read and discard whatever the client still sends
           (the headers we never parsed); closing with unread input
           makes the kernel send RST, which can destroy the response
           before the client reads it
        3. close(): release the descriptor

        Returns:
            None on success, or the OSError raised by the final close()
            so the caller can log it. Failures in steps 1 and 2 just
            mean the peer is already gone.
        """
        if self.state == ConnectionState.CLOSED:
            return None

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already disconnected

        self._drain()

        error = None
        try:
            self.socket.close()
        except OSError as e:
            error = e

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")
        return error

    def _drain(self) -> None:
        """
        Discard unread input, bounded in total time and bytes.

        A client trickling bytes can't hold the connection open: the
        deadline covers the whole drain, not each recv().
        """
        deadline = time.monotonic() + DRAIN_TIMEOUT
        drained = 0

        try:
            while drained < MAX_DRAIN_BYTES:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                chunk = self.socket.recv(4096)
                if not chunk:
                    break
                drained += len(chunk)
        except OSError:
            pass  # Timed out or peer reset; closing anyway

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
