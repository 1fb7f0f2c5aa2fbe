"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

Owns the listening socket: bind it, accept connections forever, hand
each one off, and clean up when asked to stop.

=============================================================================
SOCKET LIFECYCLE (Server Side)
=============================================================================

    1. socket()    Create an IPv4 TCP socket
    2. bind()      Reserve IP:PORT          ── failure is FATAL
    3. listen()    Start queueing incoming connections
    4. accept()    Wait for a client, get a NEW socket for it
                   └─ the listening socket keeps listening
    5. close()     Release the listening socket on shutdown

                    ┌───────────────────────┐
                    │   Listening Socket    │ ◄── Created once at startup
                    └───────────┬───────────┘
                                │ accept()
        ┌───────────────────────┼───────────────────────┐
        ▼                       ▼                       ▼
    ┌───────────┐         ┌───────────┐         ┌───────────┐
    │ Client    │         │ Client    │         │ Client    │
    │ Socket 1  │         │ Socket 2  │         │ Socket 3  │
    └───────────┘         └───────────┘         └───────────┘

=============================================================================
WHAT IS FATAL AND WHAT IS NOT
=============================================================================

Without its listening socket the server is useless, so:

    bind() fails                    ──► ListenerError, process exits 1
    accept() fails once             ──► log, back off, try again
    accept() fails N times in a row ──► ListenerError, process exits 1

Transient accept() errors (out of file descriptors, a client that reset
before we got to it) usually clear up on their own; backing off gives
them the chance. A persistent failure still stops the server loudly
instead of spinning.

Per-connection errors never reach this module.

=============================================================================
SIGNAL HANDLING FOR GRACEFUL SHUTDOWN
=============================================================================

SIGINT (Ctrl+C) and SIGTERM (kill, docker stop) flip the running flag;
the accept loop notices within a second (the listening socket polls
with a 1s timeout) and exits cleanly.

Python only allows installing signal handlers from the main thread.
When the server runs in a background thread (tests do that) the
handlers are skipped and shutdown() is called directly instead.

=============================================================================
"""

import socket
import signal
import logging
import threading
import time
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)

# Upper bound for the accept() backoff delay, in seconds
MAX_ACCEPT_RETRY_DELAY = 1.0


class ListenerError(Exception):
    """
    Raised when the listening socket cannot be created or stops accepting.

    Fatal: the server has no way to serve anyone without it.
    """


class SocketServer:
    """
    Low-level TCP socket server.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      SocketServer Internals                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    start(callback)                                                   │
    │        ├──► _create_socket()   socket() + SO_REUSEADDR               │
    │        ├──► bind()             ListenerError on failure              │
    │        ├──► listen()                                                 │
    │        ├──► _setup_signals()   main thread only                      │
    │        └──► _accept_loop()     BLOCKS until shutdown()               │
    │                 └──► accept() → Connection → callback(conn)          │
    │                                                                      │
    │    shutdown()        flag the loop to stop (idempotent)              │
    │    _cleanup()        restore signals, close the listening socket     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    Usage:
        def handle_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown
    """

    def __init__(self, config: ServerConfig):
        """
        Args:
            config: Server configuration (host, port, backlog, timeouts).

        The socket is created lazily in start().
        """
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._running = False

        # Set once the socket is bound and listening
        self._listening_event = threading.Event()
        # Set once the accept loop has exited
        self._shutdown_event = threading.Event()

        self._original_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        """Check if server is running."""
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """
        The bound (ip, port).

        After binding this reports the real port, which matters when the
        configured port is 0.
        """
        if self._socket is not None:
            try:
                return self._socket.getsockname()[:2]
            except OSError:
                pass  # Socket already closed
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        """Create and configure the listening socket."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Restart without waiting out TIME_WAIT. No SO_REUSEPORT: a port
        # another process holds must make bind() fail.
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # Poll so the accept loop notices shutdown()
        sock.settimeout(1.0)

        return sock

    def _setup_signals(self):
        """Install SIGTERM/SIGINT handlers that trigger shutdown()."""
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not in main thread, skipping signal handlers")
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind, listen and accept connections until shutdown().

        Args:
            connection_handler: Called with each accepted Connection. Must
                                return quickly (it runs on the accept
                                thread); the HTTP layer spawns a worker.

        Raises:
            ListenerError: If binding fails, or accept() keeps failing.
        """
        self._shutdown_event.clear()
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
            self._socket.listen(self.config.backlog)
        except OSError as e:
            self._socket.close()
            self._socket = None
            self._shutdown_event.set()
            raise ListenerError(
                f"Failed to create listener on {self.config.host}:{self.config.port}: {e}"
            ) from e

        self._running = True
        self._setup_signals()

        host, port = self.address
        logger.info(f"Listening for connections on {host}:{port}...")
        self._listening_event.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        """
        Accept connections while running.

        ┌─────────────────────────────────────────────────────────────────┐
        │                     Accept Loop Flow                             │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │   while running:                                                 │
        │       accept()                                                   │
        │         ├── timeout  ──► loop (re-check running)                 │
        │         ├── OSError  ──► failures += 1                           │
        │         │                  ├── < max ──► sleep(backoff), loop    │
        │         │                  └── = max ──► ListenerError           │
        │         └── ok       ──► failures = 0                            │
        │                          callback(Connection(...))               │
        │                                                                  │
        └─────────────────────────────────────────────────────────────────┘
        """
        failures = 0
        delay = self.config.accept_retry_delay

        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if not self._running:
                    break  # Socket closed by shutdown

                failures += 1
                if failures >= self.config.max_accept_failures:
                    raise ListenerError(
                        f"Failed accepting connection ({failures} attempts): {e}"
                    ) from e

                logger.error(
                    f"Failed accepting connection: {e} "
                    f"(retrying in {delay:.2f}s, attempt {failures})"
                )
                time.sleep(delay)
                delay = min(delay * 2, MAX_ACCEPT_RETRY_DELAY)
                continue

            failures = 0
            delay = self.config.accept_retry_delay

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.config.buffer_size,
                timeout=self.config.timeout,
                max_line_size=self.config.max_line_size,
            )
            connection_handler(conn)

    def shutdown(self):
        """
        Stop accepting connections.

        Safe to call from a signal handler, another thread, or repeatedly.
        """
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        self._running = False
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass  # Already closed
            self._socket = None

        self._listening_event.clear()
        self._shutdown_event.set()
        logger.info("Socket server stopped")

    def wait_until_listening(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until the socket is bound and accepting.

        Returns:
            True once listening, False on timeout.
        """
        return self._listening_event.wait(timeout)

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the accept loop to exit.

        Returns:
            True if shutdown completed, False if timeout.
        """
        return self._shutdown_event.wait(timeout)
