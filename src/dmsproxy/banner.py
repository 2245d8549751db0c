"""
This module defines the startup banner printed by the proxy server.

It uses `rich` to print a styled panel to stderr with the listening address
and the active database backend.
"""

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from . import __version__

BANNER = r"""
 ____  __  __ ____     ____
|  _ \|  \/  / ___|   |  _ \ _ __ _____  ___   _
| | | | |\/| \___ \   | |_) | '__/ _ \ \/ / | | |
| |_| | |  | |___) |  |  __/| | | (_) >  <| |_| |
|____/|_|  |_|____/   |_|   |_|  \___/_/\_\\__, |
                                           |___/
"""

SERVER_WELCOME = "Server ready! API documentation available at /docs"

_console = Console(stderr=True)


def print_server_banner(host: str = "0.0.0.0", port: int = 3001, backend: str = "postgres") -> None:
    """
    Prints the banner and welcome message for server mode.

    Args:
        host: The host the server is running on.
        port: The port the server is running on.
        backend: The name of the database backend in use.
    """
    text = Text(BANNER, style="cyan")
    text.append(f"\nDMS Query Proxy v{__version__} | backend: {backend}\n", style="bold")
    text.append(f"Listening on http://{host}:{port}\n", style="green")
    text.append(SERVER_WELCOME, style="green")
    _console.print(Panel(text, expand=False))
