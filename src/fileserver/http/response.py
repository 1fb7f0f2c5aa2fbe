"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Hand-assembles the bytes the server writes back to the client.

=============================================================================
RESPONSE ANATOMY
=============================================================================

Every response has exactly this shape:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  HEADER BLOCK  (build_header)                                        │
    │  ───────────────────────────────────────────────────────────────── │
    │  HTTP/1.1 200 OK\\r\\n                  ◄── status line             │
    │  Content-Type: text/html\\r\\n          ◄── the ONLY header         │
    ├─────────────────────────────────────────────────────────────────────┤
    │  \\r\\n                                 ◄── end of headers          │
    ├─────────────────────────────────────────────────────────────────────┤
    │  BODY                                                                │
    │  ───────────────────────────────────────────────────────────────── │
    │  <file bytes, or the error page from build_error_body>             │
    └─────────────────────────────────────────────────────────────────────┘

There is NO Content-Length header. The client finds the end of the body
because the server closes the connection right after writing it.

=============================================================================
"""

from dataclasses import dataclass

from .status_codes import HTTPStatus, reason_phrase


CRLF = "\r\n"

# Fallback version for responses to requests we could not even parse
DEFAULT_HTTP_VERSION = "1.1"

ERROR_CONTENT_TYPE = "text/html"

_ERROR_PAGE_TEMPLATE = """
\t<html>
\t\t<head>
\t\t\t<title>{title}</title>
\t\t</head>
\t\t<body>
\t\t\t<h1>{title}</h1>
\t\t\t{message}
\t\t</body>
\t</html>
\t"""


def build_header(status_code: int, http_version: str, content_type: str) -> bytes:
    """
    Build the header block: status line plus the Content-Type header.

    Each line is terminated by CRLF. The blank line separating headers
    from the body is NOT included; see ``HTTPResponse.to_bytes()``.

        >>> build_header(200, "1.1", "text/html")
        b'HTTP/1.1 200 OK\\r\\nContent-Type: text/html\\r\\n'

    Unknown status codes are emitted verbatim with the phrase
    "Status Code Not Implemented".
    """
    status_line = f"HTTP/{http_version} {int(status_code)} {reason_phrase(status_code)}"
    content_type_header = f"Content-Type: {content_type}"
    return (CRLF.join([status_line, content_type_header]) + CRLF).encode("utf-8")


def build_error_body(title: str, message: str) -> bytes:
    """
    Build a minimal HTML error page.

    ``title`` appears in both ``<title>`` and ``<h1>``; ``message`` is the
    page text. Leading and trailing newlines/tabs of the template are
    trimmed and a single CRLF is appended.

    WARNING: nothing is HTML-escaped. Every caller passes a fixed literal
    today; escape anything that comes from a client before passing it in.
    """
    page = _ERROR_PAGE_TEMPLATE.format(title=title, message=message)
    return (page.strip("\n\t") + CRLF).encode("utf-8")


@dataclass
class HTTPResponse:
    """
    A response ready to be written to the socket.

    Attributes:
        status_code: Numeric status, 200 or 404.
        header: Header block from build_header().
        body: Response body, possibly empty.
    """

    status_code: int
    header: bytes
    body: bytes = b""

    def to_bytes(self) -> bytes:
        """Header block, blank line, body: the exact bytes to send."""
        return self.header + CRLF.encode("ascii") + self.body


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def ok(http_version: str, content_type: str, body: bytes) -> HTTPResponse:
    """200 OK carrying a file's contents."""
    return HTTPResponse(
        status_code=HTTPStatus.OK,
        header=build_header(HTTPStatus.OK, http_version, content_type),
        body=body,
    )


def not_found(http_version: str, message: str) -> HTTPResponse:
    """404 with the standard HTML error page."""
    return HTTPResponse(
        status_code=HTTPStatus.NOT_FOUND,
        header=build_header(HTTPStatus.NOT_FOUND, http_version, ERROR_CONTENT_TYPE),
        body=build_error_body("404 Not Found", message),
    )
