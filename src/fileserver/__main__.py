"""
=============================================================================
COMMAND-LINE ENTRY POINT
=============================================================================

    $ fileserver 8080
    $ python -m fileserver 8080   # serves the package directory itself

Exactly one argument, the port. Anything else prints the usage line and
exits without serving:

    $ fileserver
    fileserver usage: fileserver <port>

Exit codes:
    0   usage printed, or the server was stopped with Ctrl+C / SIGTERM
    1   the listener could not be created, or stopped accepting

=============================================================================
"""

import logging
import os
import sys
from typing import List, Optional

from .config import ServerConfig, parse_port
from .core import ListenerError
from .server import FileServer
from .log import setup_logging


logger = logging.getLogger("fileserver")


def binary_name(argv0: str) -> str:
    """Base name of the program, as shown in the usage line."""
    return os.path.basename(argv0.replace("\\", "/"))


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the server from command-line arguments.

    Args:
        argv: Full argument vector, program name first. Defaults to
              sys.argv.

    Returns:
        The process exit status.
    """
    argv = list(sys.argv if argv is None else argv)

    if len(argv) != 2:
        name = binary_name(argv[0] if argv else "fileserver")
        print(f"{name} usage: {name} <port>")
        return 0

    config = ServerConfig()
    setup_logging(config.log_level)

    try:
        config.port = parse_port(argv[1])
        server = FileServer(config)
        server.run(configure_logging=False)
    except (ValueError, ListenerError) as e:
        logger.critical(f"Fatal: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
