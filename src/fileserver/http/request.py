"""
=============================================================================
REQUEST LINE PARSING
=============================================================================

The server only ever looks at the FIRST line a client sends. Any headers
that follow are never read.

=============================================================================
THE ACCEPTED GRAMMAR
=============================================================================

    request-line = "GET /" [ word "." word ] " HTTP/" DIGIT "." DIGIT CRLF
    word         = 1*( ALPHA / DIGIT / "_" )        ; ASCII only

    GET /photo.jpg HTTP/1.0\\r\\n
    ─── ─ ───── ─── ─────── ───
     │  │   │    │     │     │
     │  │   │    │     │     └── CRLF, and nothing after it
     │  │   │    │     └──────── exactly one digit, a dot, one digit
     │  │   │    └────────────── extension (word)
     │  │   └─────────────────── name (word)
     │  └─────────────────────── the leading slash is mandatory
     └────────────────────────── the only supported method

The path is optional: "GET / HTTP/1.1\\r\\n" asks for the default
document, index.html.

Everything else is rejected. Some lines that look plausible but fail:

    POST / HTTP/1.1\\r\\n            method
    GET /index HTTP/1.1\\r\\n        no extension
    GET /a.b.c HTTP/1.1\\r\\n        more than one dot
    GET /dir/a.html HTTP/1.1\\r\\n   "/" is not a word character
    GET /a.html?x=1 HTTP/1.1\\r\\n   no query strings
    GET / HTTP/1.1\\n               bare LF terminator
    GET / HTTP/10.1\\r\\n            multi-digit version

Because "/" and "." can never appear inside a word, a request can never
climb out of the document root.

=============================================================================
WHY A HAND-WRITTEN TOKENIZER?
=============================================================================

A regular expression would do the job in one line, but a cursor walking
the grammar element by element makes every rejection explicit: each
failure raises RequestParseError naming WHAT was expected and WHERE.

=============================================================================
"""

from dataclasses import dataclass


DEFAULT_DOCUMENT = "index.html"

_METHOD_PREFIX = "GET /"
_VERSION_PREFIX = " HTTP/"
_TERMINATOR = "\r\n"

_WORD_CHARS = frozenset(
    "abcdefghijklmnopqrstuvwxyz"
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    "0123456789_"
)
_DIGITS = frozenset("0123456789")


class RequestParseError(Exception):
    """
    Raised when a request line does not match the grammar.

    Attributes:
        line: The offending line.
        column: Zero-based index where matching failed.
    """

    def __init__(self, message: str, line: str = "", column: int = 0):
        super().__init__(message)
        self.line = line
        self.column = column


@dataclass(frozen=True)
class Request:
    """
    A successfully parsed request line.

    Attributes:
        raw: The line exactly as received, terminator included.
        file_name: Requested "name.ext", or DEFAULT_DOCUMENT.
        file_extension: The "ext" part of file_name.
        http_version: "major.minor", e.g. "1.1".
        is_default_document: True when the path was omitted ("GET /").
    """

    raw: str
    file_name: str
    file_extension: str
    http_version: str
    is_default_document: bool = False


class _Cursor:
    """Position-tracking reader over a single line."""

    def __init__(self, line: str):
        self.line = line
        self.pos = 0

    def fail(self, expected: str) -> RequestParseError:
        found = self.line[self.pos:self.pos + 1] or "end of line"
        return RequestParseError(
            f"Expected {expected} at column {self.pos}, found {found!r}",
            line=self.line,
            column=self.pos,
        )

    def peek(self) -> str:
        return self.line[self.pos:self.pos + 1]

    def expect(self, literal: str) -> None:
        if not self.line.startswith(literal, self.pos):
            raise self.fail(repr(literal))
        self.pos += len(literal)

    def word(self) -> str:
        start = self.pos
        while self.peek() and self.peek() in _WORD_CHARS:
            self.pos += 1
        if self.pos == start:
            raise self.fail("a word character")
        return self.line[start:self.pos]

    def digit(self) -> str:
        char = self.peek()
        if not char or char not in _DIGITS:
            raise self.fail("a digit")
        self.pos += 1
        return char

    def expect_end(self) -> None:
        if self.pos != len(self.line):
            raise self.fail("end of line")


class RequestLineParser:
    """
    Parser for the single request line the server understands.

    Stateless: one instance can be shared by every connection thread.

    Usage:
        parser = RequestLineParser()
        request = parser.parse("GET /index.html HTTP/1.1\\r\\n")
        request.file_name     # "index.html"
        request.http_version  # "1.1"
    """

    def parse(self, line: str) -> Request:
        """
        Parse one request line, terminator included.

        Args:
            line: Text read from the socket up to and including "\\n".

        Returns:
            The parsed Request.

        Raises:
            RequestParseError: If the line is not exactly of the form
                "GET /[name.ext] HTTP/d.d\\r\\n".
        """
        cursor = _Cursor(line)

        # ─────────────────────────────────────────────────────────────────
        # METHOD AND LEADING SLASH
        # ─────────────────────────────────────────────────────────────────
        cursor.expect(_METHOD_PREFIX)

        # ─────────────────────────────────────────────────────────────────
        # OPTIONAL name.ext
        # ─────────────────────────────────────────────────────────────────
        # A space right after the slash means "no path given".
        is_default_document = cursor.peek() == " "
        if is_default_document:
            file_name = DEFAULT_DOCUMENT
            file_extension = DEFAULT_DOCUMENT.split(".")[-1]
        else:
            name = cursor.word()
            cursor.expect(".")
            file_extension = cursor.word()
            file_name = f"{name}.{file_extension}"

        # ─────────────────────────────────────────────────────────────────
        # PROTOCOL VERSION
        # ─────────────────────────────────────────────────────────────────
        cursor.expect(_VERSION_PREFIX)
        major = cursor.digit()
        cursor.expect(".")
        minor = cursor.digit()

        # ─────────────────────────────────────────────────────────────────
        # TERMINATOR
        # ─────────────────────────────────────────────────────────────────
        cursor.expect(_TERMINATOR)
        cursor.expect_end()

        return Request(
            raw=line,
            file_name=file_name,
            file_extension=file_extension,
            http_version=f"{major}.{minor}",
            is_default_document=is_default_document,
        )


def parse_request_line(line: str) -> Request:
    """Convenience wrapper around RequestLineParser().parse()."""
    return RequestLineParser().parse(line)
