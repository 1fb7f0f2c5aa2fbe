"""
pytest configuration and fixtures.
"""

import socket
import threading
from pathlib import Path
from typing import Generator, Tuple

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fileserver import FileServer, ServerConfig
from fileserver.core import Connection


INDEX_HTML = b"<p>hi</p>"
JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00" + bytes(range(256)) + b"\xff\xd9"


@pytest.fixture
def document_root(tmp_path: Path) -> Path:
    """A directory with a handful of files to serve."""
    (tmp_path / "index.html").write_bytes(INDEX_HTML)
    (tmp_path / "photo.jpg").write_bytes(JPEG_BYTES)
    (tmp_path / "page.htm").write_bytes(b"<html><body>" + b"x" * 100 + b"</body></html>")
    (tmp_path / "clip.ra").write_bytes(b".ra\xfd\x00\x05")
    (tmp_path / "data.xyz").write_bytes(b"\x00\x01\x02binary")
    (tmp_path / "empty.html").write_bytes(b"")
    (tmp_path / "folder.html").mkdir()
    return tmp_path


@pytest.fixture
def socket_pair() -> Generator[Tuple[socket.socket, socket.socket], None, None]:
    """Connected (server_side, client_side) sockets."""
    server_side, client_side = socket.socketpair()
    yield server_side, client_side
    for sock in (server_side, client_side):
        try:
            sock.close()
        except OSError:
            pass


@pytest.fixture
def connection(socket_pair) -> Connection:
    """Connection wrapping the server side of a socket pair."""
    server_side, _ = socket_pair
    return Connection(
        socket=server_side,
        address=("127.0.0.1", 54321),
        timeout=2.0,
    )


def read_all(sock: socket.socket) -> bytes:
    """Read until the peer closes."""
    chunks = []
    while True:
        chunk = sock.recv(4096)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # not a test class

    def __init__(self, server: FileServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def address(self) -> Tuple[str, int]:
        return self.server.address

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"configure_logging": False},
            daemon=True,
        )
        self._thread.start()

        if not self.server.wait_until_listening(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=10.0)

    def request(self, data: bytes, timeout: float = 5.0) -> bytes:
        """Send raw bytes on a fresh connection, return everything received."""
        with socket.create_connection(self.address, timeout=timeout) as sock:
            sock.sendall(data)
            return read_all(sock)


@pytest.fixture
def test_server(document_root: Path) -> Generator[TestServer, None, None]:
    """A running server on an ephemeral port serving document_root."""
    server = FileServer(ServerConfig(
        host="127.0.0.1",
        port=0,  # Let the OS pick a free port
        base_dir=str(document_root),
        timeout=5.0,
    ))

    test_srv = TestServer(server)
    test_srv.start()

    yield test_srv

    test_srv.stop()
