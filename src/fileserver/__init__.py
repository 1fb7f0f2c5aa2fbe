"""
=============================================================================
FILESERVER: A MINIMAL STATIC FILE SERVER OVER RAW TCP
=============================================================================

Serves files that sit next to the running program, one request per TCP
connection, speaking a deliberately tiny subset of HTTP/1.x:

    Client:  GET /photo.jpg HTTP/1.1\\r\\n
    Server:  HTTP/1.1 200 OK\\r\\n
             Content-Type: image/jpeg\\r\\n
             \\r\\n
             <file bytes>
             (connection closed)

=============================================================================
PACKAGE LAYOUT
=============================================================================

    fileserver/
    ├── config.py              ServerConfig, executable_dir()
    ├── log.py                 Host-prefixed logging, previews
    ├── server.py              FileServer, serve()
    ├── __main__.py            CLI: fileserver <port>
    ├── core/
    │   ├── socket_server.py   Listening socket, accept loop
    │   ├── connection.py      Client socket: read line, write, close
    │   └── workers.py         Thread per connection
    ├── http/
    │   ├── request.py         Request line grammar
    │   ├── response.py        Header block, error page
    │   ├── status_codes.py    200 / 404 / 500 reason phrases
    │   └── mime_types.py      Extension → Content-Type
    └── handlers/
        ├── static.py          Document root → bytes
        └── connection_handler.py   The per-connection pipeline

=============================================================================
"""

__version__ = "1.0.0"

from .server import FileServer, serve
from .config import ServerConfig

__all__ = ["FileServer", "ServerConfig", "serve", "__version__"]
