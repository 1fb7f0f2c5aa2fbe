"""
=============================================================================
HANDLERS
=============================================================================

    static.py              Document root → bytes + Content-Type
    connection_handler.py  One connection: read, parse, resolve, respond

=============================================================================
"""

from .static import ContentResolver, ContentNotFoundError, ResolvedContent, resolve
from .connection_handler import ConnectionHandler

__all__ = [
    "ContentResolver",
    "ContentNotFoundError",
    "ResolvedContent",
    "resolve",
    "ConnectionHandler",
]
