"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Everything that knows what the bytes on the wire mean:

    request.py       Request line grammar and parser
    response.py      Header block and error page assembly
    status_codes.py  Status codes and their reason phrases
    mime_types.py    Extension to Content-Type table

Nothing in here touches a socket or the filesystem.

=============================================================================
"""

from .request import (
    Request,
    RequestLineParser,
    RequestParseError,
    parse_request_line,
    DEFAULT_DOCUMENT,
)
from .response import (
    HTTPResponse,
    build_header,
    build_error_body,
    ok,
    not_found,
    CRLF,
    DEFAULT_HTTP_VERSION,
)
from .status_codes import HTTPStatus, reason_phrase
from .mime_types import get_content_type, DEFAULT_MIME_TYPE

__all__ = [
    # Request parsing
    "Request",
    "RequestLineParser",
    "RequestParseError",
    "parse_request_line",
    "DEFAULT_DOCUMENT",

    # Response building
    "HTTPResponse",
    "build_header",
    "build_error_body",
    "ok",
    "not_found",
    "CRLF",
    "DEFAULT_HTTP_VERSION",

    # Status codes
    "HTTPStatus",
    "reason_phrase",

    # MIME types
    "get_content_type",
    "DEFAULT_MIME_TYPE",
]
