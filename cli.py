"""
CLI tool for inspecting the WebSocket message routing.

Example:
    python cli.py ws-handlers
"""

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from portfolio.api.ws.constants import MessageType
from portfolio.api.ws.handlers import load_handlers
from portfolio.managers.websocket_connection_manager import ConnectionManager
from portfolio.routing import MessageDispatcher, _handler_name
from portfolio.services.registry import build_services
from portfolio.storage.db import Database

typer_app = typer.Typer(
    name="portfolio-cli",
    help="Portfolio CLI - inspect WebSocket message handlers",
    add_completion=False,
)
console = Console()


def build_dispatcher() -> MessageDispatcher:
    """Dispatcher wired the same way the application wires it."""
    # The engine is created lazily; no connection is opened here.
    services = build_services(Database.from_settings())
    dispatcher = MessageDispatcher(ConnectionManager())
    load_handlers(dispatcher, services)
    return dispatcher


@typer_app.command(name="ws-handlers")
def ws_handlers():
    """
    Display a table of all registered WebSocket handlers.

    Shows every envelope type, its handler and whether its data is
    checked against a JSON schema.
    """
    dispatcher = build_dispatcher()

    console.print()
    console.print(
        Panel.fit(
            "[bold cyan]Registered WebSocket Handlers[/bold cyan]",
            border_style="cyan",
        )
    )
    console.print()

    table = Table(
        "Type",
        "Handler",
        "Schema",
        title="WebSocket Handlers Registry",
        show_lines=True,
    )

    missing = []
    for message_type in MessageType:
        handler = dispatcher.handlers_registry.get(str(message_type))
        if handler is None:
            table.add_row(
                f"[dim]{message_type.value}[/dim]",
                "[red]No handler registered[/red]",
                "",
            )
            missing.append(message_type.value)
            continue

        json_schema, _ = dispatcher.validators_registry[str(message_type)]
        table.add_row(
            f"[green]{message_type.value}[/green]",
            f"[yellow]{_handler_name(handler)}[/yellow]",
            "yes" if json_schema else "no",
        )

    console.print(table)
    console.print()

    total = len(MessageType)
    console.print(
        f"[bold]Summary:[/bold] {total - len(missing)}/{total} handlers registered"
    )
    if missing:
        console.print(
            "[yellow]Missing handlers for:[/yellow]",
            ", ".join(f"[cyan]{name}[/cyan]" for name in missing),
        )
    console.print()


if __name__ == "__main__":
    typer_app()
