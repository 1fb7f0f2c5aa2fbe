"""
=============================================================================
LOGGING HELPERS
=============================================================================

Every per-connection message is prefixed with the client's address so
interleaved output from concurrent connections can be told apart:

    2026-01-15 12:30:45 [INFO] fileserver.handlers: 127.0.0.1:51234 >> Serving.
    2026-01-15 12:30:45 [INFO] fileserver.handlers: 127.0.0.1:51234 >> Incoming request: 'GET / HTTP/1.1\\r\\n'.
    2026-01-15 12:30:45 [INFO] fileserver.handlers: 127.0.0.1:51235 >> Serving.

The handler takes its logger as a constructor argument, so tests can
pass their own and capture output deterministically.

=============================================================================
"""

import logging
from typing import Union


# Characters of file content shown in log previews
PREVIEW_LENGTH = 30

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class HostLogAdapter(logging.LoggerAdapter):
    """
    LoggerAdapter that prefixes messages with "<host> >> ".

    Usage:
        log = HostLogAdapter(logger, "127.0.0.1:51234")
        log.info("Serving.")   # "127.0.0.1:51234 >> Serving."
    """

    def __init__(self, logger: Union[logging.Logger, logging.LoggerAdapter], host: str):
        super().__init__(logger, {"host": host})

    def process(self, msg, kwargs):
        return f"{self.extra['host']} >> {msg}", kwargs


def preview(content: Union[bytes, str], length: int = PREVIEW_LENGTH) -> str:
    """
    Printable preview of the first ``length`` characters.

    Content shorter than ``length`` is shown whole; the slice is clamped,
    never an error.

        >>> preview(b"<p>hi</p>")
        "'<p>hi</p>'"
    """
    if isinstance(content, bytes):
        content = content.decode("utf-8", errors="replace")
    return repr(content[:min(length, len(content))])


def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger and the ``fileserver`` logger.

    Unknown level names fall back to INFO.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.basicConfig(
        level=numeric_level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )

    logging.getLogger("fileserver").setLevel(numeric_level)
