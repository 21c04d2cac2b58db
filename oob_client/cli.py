from __future__ import annotations
import asyncio
import json
import logging
from dataclasses import dataclass

import typer
from rich.console import Console
from rich.logging import RichHandler

from .client import Client
from .config import Settings
from .errors import OOBClientError
from .models import Interaction

app = typer.Typer(no_args_is_help=True)
console = Console()


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )


def _settings(server: str | None, persistent: bool | None, verbose: bool) -> Settings:
    s = Settings()
    if server:
        s.SERVER_URL = server
    if persistent is not None:
        s.PERSISTENT_SESSION = persistent
    _setup_logging("DEBUG" if verbose else s.LOG_LEVEL)
    return s


@dataclass
class ConsoleHandler:
    """Print each interaction as it arrives."""

    as_json: bool = False

    def on_interaction(self, interaction: Interaction) -> None:
        if self.as_json:
            console.print_json(json.dumps(interaction.model_dump(mode="json", by_alias=True, exclude_none=True)))
            return
        when = interaction.timestamp.isoformat() if interaction.timestamp else "-"
        console.print(
            f"[bold green]{(interaction.protocol or '?').upper()}[/] {interaction.full_id or interaction.unique_id or '?'}"
            f" from [cyan]{interaction.remote_address or '?'}[/] at {when}"
        )


@app.command()
def urls(
    count: int = typer.Option(1, min=1, help="Number of identifiers to print"),
    server: str = typer.Option(None, help="Collaboration server URL"),
    persistent: bool = typer.Option(None, "--persistent/--no-persistent", help="Keep the registration after exit"),
    verbose: bool = typer.Option(False, "-v", "--verbose"),
):
    """Register, print identifiers and exit."""
    s = _settings(server, persistent, verbose)

    async def _run():
        async with await Client.create(settings=s) as client:
            for _ in range(count):
                console.print(client.url())
            if client.persistent_session:
                console.print(f"correlation-id: {client.correlation_id}\nsecret-key: {client.secret_key}", style="dim")

    try:
        asyncio.run(_run())
    except OOBClientError as exc:
        console.print(f"[bold red]{exc}")
        raise typer.Exit(1)


@app.command()
def poll(
    count: int = typer.Option(1, min=1, help="Number of identifiers to print"),
    interval: float = typer.Option(None, min=0.1, help="Seconds between polls"),
    duration: float = typer.Option(None, min=0, help="Stop after this many seconds"),
    server: str = typer.Option(None, help="Collaboration server URL"),
    persistent: bool = typer.Option(None, "--persistent/--no-persistent", help="Keep the registration after exit"),
    as_json: bool = typer.Option(False, "--json", help="Print interactions as JSON"),
    verbose: bool = typer.Option(False, "-v", "--verbose"),
):
    """Register, print identifiers and stream interactions until interrupted."""
    s = _settings(server, persistent, verbose)
    every = interval or s.POLL_INTERVAL_S

    async def _run():
        async with await Client.create(settings=s) as client:
            console.rule("[bold cyan]OOB client")
            for _ in range(count):
                console.print(client.url())
            console.print(f"Polling {client.server_url} every {every}s\n", style="dim")
            await client.start_polling(every, ConsoleHandler(as_json=as_json))
            try:
                if duration:
                    await asyncio.sleep(duration)
                else:
                    await asyncio.Event().wait()
            finally:
                await client.stop_polling()

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted.")
    except OOBClientError as exc:
        console.print(f"[bold red]{exc}")
        raise typer.Exit(1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
