"""
=============================================================================
FILE SERVER
=============================================================================

Wires the pieces together:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   ServerConfig                                                       │
    │       │                                                              │
    │       ▼                                                              │
    │   FileServer                                                         │
    │       ├── SocketServer ──accept──► WorkerGroup.spawn(conn)           │
    │       │                                 │                            │
    │       │                                 ▼  (one thread per conn)     │
    │       └── ConnectionHandler.handle(conn)                             │
    │               ├── RequestLineParser                                  │
    │               ├── ContentResolver                                    │
    │               └── build_header / build_error_body                    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
LIFECYCLE
=============================================================================

    server = FileServer(ServerConfig(port=8080))
    server.run()        # blocks; Ctrl+C or SIGTERM → shutdown

    run()
      1. Configure logging
      2. Bind + accept (SocketServer.start) ── ListenerError propagates
      3. On exit: wait for in-flight connections to finish

=============================================================================
"""

import logging
from dataclasses import replace
from typing import Optional

from .config import ServerConfig
from .core import SocketServer, WorkerGroup
from .handlers import ConnectionHandler
from .log import setup_logging


logger = logging.getLogger(__name__)


class FileServer:
    """
    Static file server: one request per TCP connection.

    Usage:
        server = FileServer(ServerConfig(port=8080, base_dir="/opt/site"))
        server.run()   # blocks until shutdown()
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        handler_logger: Optional[logging.Logger] = None,
    ):
        """
        Args:
            config: Server configuration. Defaults if not provided.
            handler_logger: Logger for per-connection messages
                            (tests inject their own).
        """
        self.config = config or ServerConfig()
        self.config.validate()  # Fail fast on invalid config

        self.handler = ConnectionHandler(
            self.config.document_root,
            logger=handler_logger,
        )
        self._socket_server = SocketServer(self.config)
        self._workers = WorkerGroup(self.handler.handle)

    @property
    def address(self):
        """The bound (ip, port); the real port once listening."""
        return self._socket_server.address

    @property
    def active_connections(self) -> int:
        """Connections currently being handled."""
        return self._workers.active_workers

    def run(self, configure_logging: bool = True):
        """
        Serve until shutdown() is called or a signal arrives.

        Args:
            configure_logging: Install the default log format. Embedding
                               applications that configure logging
                               themselves pass False.

        Raises:
            ListenerError: If the port cannot be bound, or the listener
                           stops accepting.
        """
        if configure_logging:
            setup_logging(self.config.log_level)

        logger.info(f"Serving files from {self.config.document_root}")

        try:
            self._socket_server.start(self._workers.spawn)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._drain()

    def wait_until_listening(self, timeout: Optional[float] = None) -> bool:
        """Block until the listening socket is ready."""
        return self._socket_server.wait_until_listening(timeout)

    def shutdown(self):
        """Stop accepting; run() returns once in-flight work drains."""
        self._socket_server.shutdown()

    def _drain(self):
        """Give in-flight connections a chance to finish."""
        # Each connection is bounded by its read/write deadline
        grace = (self.config.timeout or 30.0) + 1.0
        if not self._workers.join(timeout=grace):
            logger.warning(
                f"{self._workers.active_workers} connection(s) still open after {grace:.0f}s"
            )
        logger.info("Server stopped")


def serve(port: int, config: Optional[ServerConfig] = None) -> None:
    """
    Listen on ``port`` and serve files next to the running program.

    Runs until the process is signalled.

    Raises:
        ListenerError: If the listener cannot be created or fails.
    """
    config = replace(config or ServerConfig(), port=port)
    FileServer(config).run()
