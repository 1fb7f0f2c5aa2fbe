"""
=============================================================================
MIME TYPE DETECTION
=============================================================================

Maps file extensions to the Content-Type header value.

=============================================================================
HOW DETECTION WORKS
=============================================================================

Detection is a pure function of the extension, the text after the LAST
dot in the file name. We never look inside the file (no "sniffing"):

    "index.html"     ──►  "html"   ──►  text/html
    "photo.jpeg"     ──►  "jpeg"   ──►  image/jpeg
    "song.ra"        ──►  "ra"     ──►  audio/x-pn-realaudio
    "archive.tar"    ──►  "tar"    ──►  application/octet-stream
    "README"         ──►  "README" ──►  application/octet-stream

Matching is EXACT and CASE-SENSITIVE: "page.HTML" is served as
application/octet-stream. The table below is the complete set of types
the server will ever announce.

application/octet-stream means "arbitrary binary data": browsers offer
to download it instead of trying to render it.

=============================================================================
"""

from pathlib import PurePath
from typing import Union


MIME_TYPES = {
    # -------------------------------------------------------------------------
    # TEXT
    # -------------------------------------------------------------------------
    "htm": "text/html",
    "html": "text/html",

    # -------------------------------------------------------------------------
    # AUDIO
    # -------------------------------------------------------------------------
    # RealAudio metafiles (.ram) and clips (.ra)
    "ram": "audio/x-pn-realaudio",
    "ra": "audio/x-pn-realaudio",

    # -------------------------------------------------------------------------
    # IMAGES
    # -------------------------------------------------------------------------
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
}

DEFAULT_MIME_TYPE = "application/octet-stream"


def file_extension(path: Union[str, PurePath]) -> str:
    """
    Text after the last dot of ``path``.

    A name without any dot is returned whole, which never matches the
    table:

        >>> file_extension("index.html")
        'html'
        >>> file_extension("README")
        'README'
    """
    return str(path).split(".")[-1]


def get_content_type(path: Union[str, PurePath]) -> str:
    """
    Get the Content-Type for a file based on its extension.

    Examples:
        >>> get_content_type("index.html")
        'text/html'

        >>> get_content_type("photo.JPG")
        'application/octet-stream'
    """
    return MIME_TYPES.get(file_extension(path), DEFAULT_MIME_TYPE)
