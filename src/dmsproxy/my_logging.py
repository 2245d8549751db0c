"""
This module provides the logging setup for the query proxy.

`setup_logging` configures the standard library root logger once for the
server process. `debug_log` is a lightweight helper that dumps extra context to
stderr when the `DMSPROXY_DEBUG` environment variable is set, which is useful
for seeing the exact SQL and parameters built for each request.
"""

import logging
import os
import sys
from typing import Any

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def debug_enabled() -> bool:
    """Returns True if the DMSPROXY_DEBUG environment variable is set to a truthy value."""
    return os.environ.get("DMSPROXY_DEBUG", "").lower() in ("true", "1", "yes")


def setup_logging(debug: bool = False) -> None:
    """
    Configures the root logger for the server process.

    Args:
        debug: Log at DEBUG level instead of INFO.
    """
    level = logging.DEBUG if debug or debug_enabled() else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)
    logging.getLogger("dmsproxy").setLevel(level)


def debug_log(message: str, **kwargs: Any) -> None:
    """
    Prints a debug message to stderr if debug mode is enabled.

    Args:
        message: The debug message to print.
        **kwargs: Additional key-value pairs to print for context.
    """
    if debug_enabled():
        sys.stderr.write(f"[DEBUG] {message}\n")
        for key, value in kwargs.items():
            sys.stderr.write(f"  {key}: {value}\n")
