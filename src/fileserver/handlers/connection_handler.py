"""
=============================================================================
CONNECTION HANDLER
=============================================================================

Runs ONE connection from accept to close. This is where every decision
the server makes is taken.

=============================================================================
ONE REQUEST PER CONNECTION
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     handle(conn) Flow                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   read_line()                                                        │
    │       │                                                              │
    │       ├── read error ──────────────────────────────► close          │
    │       │   (EOF, timeout, reset)        nothing is written!          │
    │       ▼                                                              │
    │   parse()                                                            │
    │       │                                                              │
    │       ├── RequestParseError ──► 404, HTTP/1.1, "Page not found" ─┐  │
    │       ▼                                                           │  │
    │   resolve()                                                       │  │
    │       │                                                           │  │
    │       ├── ContentNotFoundError ──► 404, request's version,        │  │
    │       │                            "File not found" ─────────────┤  │
    │       ▼                                                           │  │
    │   200, request's version, Content-Type from extension ───────────┤  │
    │                                                                   ▼  │
    │                                            send header+CRLF+body    │
    │                                                        │            │
    │                                                        ▼            │
    │                                                      close          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

After the response the connection is closed; there is no keep-alive and
no second request.

=============================================================================
FAILURES STAY INSIDE THE CONNECTION
=============================================================================

A client that vanishes mid-write, or a socket that fails to close, is
logged and forgotten. One misbehaving client must never take the
listener down with it.

=============================================================================
"""

import logging
from pathlib import Path
from typing import Optional, Union

from ..core.connection import Connection, ConnectionReadError, ConnectionState
from ..http.request import RequestLineParser, RequestParseError
from ..http.response import HTTPResponse, DEFAULT_HTTP_VERSION, ok, not_found
from ..log import HostLogAdapter, preview
from .static import ContentResolver, ContentNotFoundError


PAGE_NOT_FOUND = "Page not found"
FILE_NOT_FOUND = "File not found"


class ConnectionHandler:
    """
    Serves one request per connection from a document root.

    Stateless once constructed; the same instance handles every
    connection, on every worker thread.

    Usage:
        handler = ConnectionHandler("/opt/site")
        handler.handle(conn)   # reads, responds, closes
    """

    def __init__(
        self,
        root_dir: Union[str, Path],
        logger: Optional[logging.Logger] = None,
        parser: Optional[RequestLineParser] = None,
    ):
        """
        Args:
            root_dir: Directory requested files are read from.
            logger: Where per-connection messages go. Defaults to this
                    module's logger.
            parser: Request line parser (a fresh one by default).
        """
        self.resolver = ContentResolver(root_dir)
        self.parser = parser or RequestLineParser()
        self.logger = logger if logger is not None else logging.getLogger(__name__)

    def handle(self, conn: Connection) -> None:
        """
        Handle a connection from first byte to close.

        Never raises for client-side I/O problems; those are logged.
        """
        log = HostLogAdapter(self.logger, conn.peer)
        log.info("Serving.")

        # ─────────────────────────────────────────────────────────────────
        # READ
        # ─────────────────────────────────────────────────────────────────
        response: Optional[HTTPResponse] = None
        try:
            raw_line = conn.read_line()
        except ConnectionReadError as e:
            log.info(f"Failed to read incoming request: {e}")
        else:
            line = raw_line.decode("utf-8", errors="replace")
            response = self.build_response(line, conn=conn, log=log)

        # ─────────────────────────────────────────────────────────────────
        # RESPOND (only if a response was produced)
        # ─────────────────────────────────────────────────────────────────
        if response is not None:
            self._send(conn, response, log)

        # ─────────────────────────────────────────────────────────────────
        # CLOSE (always)
        # ─────────────────────────────────────────────────────────────────
        error = conn.close()
        if error is not None:
            log.warning(f"Failed closing connection: {error}.")
        else:
            log.info("Connection closed.")

    def build_response(
        self,
        line: str,
        conn: Optional[Connection] = None,
        log: Optional[logging.LoggerAdapter] = None,
    ) -> HTTPResponse:
        """
        Decide the response for one request line.

        Args:
            line: The request line, terminator included.
            conn: If given, its state is advanced as decisions are made.
            log: Host-prefixed logger; a "-" prefix is used if omitted.

        Returns:
            The 200 or 404 response to send.
        """
        if log is None:
            log = HostLogAdapter(self.logger, "-")

        log.info(f"Incoming request: {line!r}.")

        # ─────────────────────────────────────────────────────────────────
        # PARSE
        # ─────────────────────────────────────────────────────────────────
        try:
            request = self.parser.parse(line)
        except RequestParseError as e:
            self._set_state(conn, ConnectionState.PARSE_FAILED)
            log.info(f"Failed to parse request: {e}.")
            return not_found(DEFAULT_HTTP_VERSION, PAGE_NOT_FOUND)

        self._set_state(conn, ConnectionState.PARSED)

        # ─────────────────────────────────────────────────────────────────
        # RESOLVE
        # ─────────────────────────────────────────────────────────────────
        log.info(f"Reading file: {request.file_name}")
        try:
            resolved = self.resolver.resolve(request.file_name)
        except ContentNotFoundError as e:
            self._set_state(conn, ConnectionState.RESOLVE_FAILED)
            log.info(f"Error reading file: {e}")
            return not_found(request.http_version, FILE_NOT_FOUND)

        self._set_state(conn, ConnectionState.RESOLVED)
        log.info(f"File content preview: {preview(resolved.content)}...")

        return ok(request.http_version, resolved.content_type, resolved.content)

    def _send(self, conn: Connection, response: HTTPResponse, log: logging.LoggerAdapter) -> None:
        message = f"Sending response: {response.header.decode('utf-8', errors='replace')!r}."
        if response.body:
            message += f"\nContent preview: {preview(response.body)}..."
        log.info(message)

        if not conn.send_response(response.to_bytes()):
            log.warning("Connection lost while sending response.")

    @staticmethod
    def _set_state(conn: Optional[Connection], state: ConnectionState) -> None:
        if conn is not None:
            conn.state = state
