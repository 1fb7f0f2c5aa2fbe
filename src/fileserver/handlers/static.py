"""
=============================================================================
STATIC FILE RESOLUTION
=============================================================================

Turns a requested file name into bytes plus a Content-Type.

=============================================================================
FLOW
=============================================================================

    Request: GET /photo.jpg HTTP/1.1

    1. Join "photo.jpg" onto the document root
    2. Read the whole file into memory
    3. Infer the Content-Type from the extension ("jpg" → image/jpeg)

    ┌──────────────┐   join    ┌──────────────────────────┐   read   ┌───────┐
    │ "photo.jpg"  │ ────────► │ /opt/site/photo.jpg      │ ───────► │ bytes │
    └──────────────┘           └──────────────────────────┘          └───────┘

=============================================================================
FOUND OR NOT FOUND
=============================================================================

The protocol only distinguishes "found" and "not found" at this layer.
Whatever goes wrong while opening or reading (missing file, permission
denied, the name is a directory) surfaces as ContentNotFoundError, and
the client sees a 404. The underlying OSError stays attached as
``__cause__`` so the log still says what actually happened.

No traversal check is needed here: the request grammar only admits
"word.word" names, so the joined path always stays directly inside the
document root.

=============================================================================
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Union

from ..http.mime_types import get_content_type


class ContentNotFoundError(Exception):
    """
    Raised when a requested file cannot be opened or read.

    Attributes:
        path: The filesystem path that was tried.
    """

    def __init__(self, message: str, path: Path):
        super().__init__(message)
        self.path = path


@dataclass(frozen=True)
class ResolvedContent:
    """
    A file loaded into memory, ready to become a 200 response.

    Attributes:
        path: The filesystem path that was read.
        content: The full file contents.
        content_type: Content-Type inferred from the extension.
    """

    path: Path
    content: bytes
    content_type: str


class ContentResolver:
    """
    Loads files from a fixed document root.

    The root is read-only for the lifetime of the server, so a single
    resolver is shared by every connection thread.

    Usage:
        resolver = ContentResolver("/opt/site")
        resolved = resolver.resolve("index.html")
        resolved.content_type   # "text/html"
    """

    def __init__(self, root_dir: Union[str, Path]):
        """
        Args:
            root_dir: Directory requested names are resolved against.
        """
        self.root_dir = Path(root_dir)

    def resolve(self, relative_path: str) -> ResolvedContent:
        """
        Read ``relative_path`` from the document root.

        Reading the same unchanged file twice yields identical bytes.

        Raises:
            ContentNotFoundError: If the file cannot be opened or read.
        """
        full_path = self.root_dir / relative_path

        try:
            content = full_path.read_bytes()
        except OSError as e:
            raise ContentNotFoundError(
                f"Failed to open file: {e}", path=full_path
            ) from e

        return ResolvedContent(
            path=full_path,
            content=content,
            content_type=get_content_type(relative_path),
        )


def resolve(base_dir: Union[str, Path], relative_path: str) -> ResolvedContent:
    """
    Two-argument form of ContentResolver.resolve().

        >>> resolve("/opt/site", "index.html").content_type
        'text/html'
    """
    return ContentResolver(base_dir).resolve(relative_path)
