"""
=============================================================================
CORE NETWORKING LAYER
=============================================================================

The parts that touch sockets and threads:

    socket_server.py   Listening socket and accept loop
    connection.py      One client socket: read a line, write, close
    workers.py         One thread per accepted connection

    ┌──────────────┐   Connection   ┌──────────────┐   handler(conn)
    │ SocketServer │ ─────────────► │ WorkerGroup  │ ───────────────► ...
    └──────────────┘                └──────────────┘

=============================================================================
"""

from .socket_server import SocketServer, ListenerError
from .connection import Connection, ConnectionState, ConnectionReadError
from .workers import ConnectionWorker, WorkerGroup

__all__ = [
    "SocketServer",         # Listening socket + accept loop
    "ListenerError",        # Fatal listener failure
    "Connection",           # Wrapper for a client socket
    "ConnectionState",      # Connection lifecycle states
    "ConnectionReadError",  # No complete request line
    "ConnectionWorker",     # Thread for one connection
    "WorkerGroup",          # Spawns and tracks workers
]
