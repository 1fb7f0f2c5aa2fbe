"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The server only ever emits three status codes, each with a fixed reason
phrase:

    ┌────────┬──────────────────────────┬─────────────────────────────────┐
    │  Code  │ Reason phrase            │ Sent when                       │
    ├────────┼──────────────────────────┼─────────────────────────────────┤
    │  200   │ OK                       │ File found and read             │
    │  404   │ File Not Found           │ Bad request line, missing file  │
    │  500   │ Internal Server Error    │ (reserved, never sent today)    │
    └────────┴──────────────────────────┴─────────────────────────────────┘

Note the 404 phrase is "File Not Found", not the RFC's "Not Found".

Any other code still renders, with the phrase
"Status Code Not Implemented", so a caller passing an unexpected code
gets a well-formed (if odd) status line instead of an exception:

    HTTP/1.1 418 Status Code Not Implemented

=============================================================================
"""

from enum import IntEnum


UNKNOWN_STATUS_PHRASE = "Status Code Not Implemented"


class HTTPStatus(IntEnum):
    """
    Status codes the server knows a reason phrase for.

    IntEnum, so members compare equal to plain ints:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'File Not Found'
    """

    OK = 200
    NOT_FOUND = 404
    INTERNAL_SERVER_ERROR = 500

    @property
    def phrase(self) -> str:
        """Reason phrase used in the status line."""
        return _STATUS_PHRASES[self]


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NOT_FOUND: "File Not Found",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}


def reason_phrase(status_code: int) -> str:
    """
    Reason phrase for any integer status code.

    Unknown codes map to ``UNKNOWN_STATUS_PHRASE``.
    """
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return UNKNOWN_STATUS_PHRASE
