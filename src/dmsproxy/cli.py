"""
This module defines the command-line interface (CLI) for the DMS query proxy.

It uses the `click` library to provide commands for running the server,
inspecting the SQL a Query Request produces, sending requests to a running
proxy, and managing Firebase admin claims.
"""

import json
import os
import sys
from pathlib import Path
from typing import Any

import click
import requests
import uvicorn
from firebase_admin.exceptions import FirebaseError
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from . import __version__
from .auth.admin import set_admin_claim
from .config import get_config
from .errors import QueryProxyError
from .query.builder import build_statements
from .query.models import parse_query_request

# Initialize Rich console for pretty output
console = Console()


def load_request(source: str) -> Any:
    """Reads a Query Request from inline JSON, `@path/to/file.json` or `-` for stdin."""
    if source == "-":
        text = sys.stdin.read()
    elif source.startswith("@"):
        text = Path(source[1:]).read_text()
    else:
        text = source
    return json.loads(text)


def render_rows(rows: list[dict[str, Any]]) -> Table:
    """Renders result rows as a rich table."""
    table = Table(show_header=True, header_style="bold cyan")
    columns: list[str] = []
    for row in rows:
        for column in row:
            if column not in columns:
                columns.append(column)
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*("" if row.get(column) is None else str(row.get(column)) for column in columns))
    return table


@click.group()
@click.version_option(__version__, prog_name="dmsproxy")
def main() -> None:
    """DMS query proxy - Supabase-style JSON queries over PostgreSQL."""
    pass


@main.command()
@click.option("--host", default=None, help="Host to bind server")
@click.option("--port", default=None, type=int, help="Port to bind server")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host: str | None, port: int | None, reload: bool) -> None:
    """Start the query proxy HTTP server."""
    # The factory reloads configuration, so CLI overrides travel through the environment.
    if host:
        os.environ["DMSPROXY_HOST"] = host
    if port:
        os.environ["PORT"] = str(port)
    config = get_config()
    bind_host = host or config.server_host
    bind_port = port or config.server_port

    console.print(f"[green]Starting DMS query proxy at http://{bind_host}:{bind_port}[/green]")
    console.print(f"[dim]• Database backend: {config.database.backend}[/dim]")
    console.print(f"[dim]• Token verification: {config.auth.provider}[/dim]")
    console.print(f"[dim]• API documentation available at http://{bind_host}:{bind_port}/docs[/dim]")
    console.print("[dim]Press Ctrl+C to stop the server[/dim]\n")

    try:
        uvicorn.run("dmsproxy.server.app:create_app", factory=True, host=bind_host, port=bind_port, reload=reload, log_level="info")
    except KeyboardInterrupt:
        console.print("\n[yellow]Server stopped[/yellow]")


@main.command()
@click.argument("request_json")
def explain(request_json: str) -> None:
    """Show the SQL a Query Request would run, without executing it.

    REQUEST_JSON is inline JSON, @file.json, or - to read stdin.
    """
    try:
        body = load_request(request_json)
        request = parse_query_request(body)
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Could not read request: {e}[/red]")
        sys.exit(1)
    except QueryProxyError as e:
        console.print(f"[red]{e.status_code}: {e.message}[/red]")
        sys.exit(1)

    for statement in build_statements(request):
        console.print(Syntax(statement.sql, "sql", word_wrap=True))
        if statement.params:
            params = Table(show_header=True, header_style="bold cyan")
            params.add_column("Placeholder", style="dim")
            params.add_column("Value")
            for index, value in enumerate(statement.params, start=1):
                params.add_row(f"${index}", repr(value))
            console.print(params)


@main.command()
@click.argument("request_json")
@click.option("--url", default="http://localhost:3001", help="Base URL of a running proxy")
@click.option("--token", envvar="DMSPROXY_TOKEN", default=None, help="Bearer token for insert/update/delete")
def query(request_json: str, url: str, token: str | None) -> None:
    """Send a Query Request to a running proxy and print the result.

    REQUEST_JSON is inline JSON, @file.json, or - to read stdin.
    """
    try:
        body = load_request(request_json)
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Could not read request: {e}[/red]")
        sys.exit(1)

    headers = {"Authorization": f"Bearer {token}"} if token else {}
    try:
        response = requests.post(f"{url.rstrip('/')}/query", json=body, headers=headers, timeout=30)
        result = response.json()
    except (requests.RequestException, ValueError) as e:
        console.print(f"[red]Request failed: {e}[/red]")
        sys.exit(1)

    if result.get("error"):
        console.print(f"[red]{response.status_code}: {result['error'].get('message')}[/red]")
        sys.exit(1)

    data = result.get("data")
    if isinstance(data, list) and data:
        console.print(render_rows(data))
    elif isinstance(data, dict):
        console.print_json(data=data)
    else:
        console.print("[yellow]No rows[/yellow]")

    if result.get("count") is not None:
        console.print(f"[dim]count: {result['count']}[/dim]")


@main.command("set-admin-claim")
@click.argument("uid")
def set_admin_claim_command(uid: str) -> None:
    """Grant the admin role to the Firebase user UID."""
    config = get_config()
    try:
        set_admin_claim(uid, config.auth)
    except (ValueError, OSError, FirebaseError) as e:
        console.print(f"[red]Error setting admin claim: {e}[/red]")
        sys.exit(1)
    console.print(f"[green]Set admin claim for UID: {uid}[/green]")


if __name__ == "__main__":
    main()
