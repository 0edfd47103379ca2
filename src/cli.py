"""CLI interface for glt."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Annotated, Optional

import typer
from glt.config import GltConfig, load_config, merge_cli_overrides
from glt.errors import ConfigError, GltError
from glt.slack.dispatcher import CommandDispatcher
from glt.slack.models import AttachedMessage, SlackResponse
from glt.worklog.clock import Clock, FixedClock, SystemClock
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

app = typer.Typer(
    name="glt",
    help="Track daily work sessions and file them away month by month.",
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to a glt.toml file."),
]
DataPathOption = Annotated[
    Optional[str],
    typer.Option("--data-path", help="Data directory (overrides [storage] data_path)."),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from glt import __version__

        console.print(f"glt {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """glt - daily work session log."""
    pass


def _configure(config_path: Path | None, **overrides: object) -> GltConfig:
    try:
        config = merge_cli_overrides(load_config(config_path), **overrides)
    except ConfigError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(1)
    logging.basicConfig(
        level=config.logging.level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    return config


def _print_response(response: SlackResponse) -> None:
    if isinstance(response, AttachedMessage):
        for attachment in response.attachments:
            body = [attachment.text] if attachment.text else []
            for field in attachment.fields:
                body.append(f"[bold]{field.title}[/bold]\n{field.value}")
            console.print(
                Panel(
                    "\n\n".join(body),
                    title=attachment.title,
                    subtitle=attachment.pretext or None,
                )
            )
        return
    console.print(response.text, markup=False)


@app.command()
def serve(
    config_path: ConfigOption = None,
    data_path: DataPathOption = None,
    host: Annotated[Optional[str], typer.Option("--host", help="Bind address.")] = None,
    port: Annotated[Optional[int], typer.Option("--port", "-p", help="Bind port.")] = None,
) -> None:
    """Serve the Slack slash-command endpoint over HTTP."""
    import uvicorn

    from glt.server import create_app

    config = _configure(config_path, data_path=data_path, host=host, port=port)
    try:
        web_app = create_app(config)
    except ConfigError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(1)

    console.print(
        f"Serving [bold]{config.slack.route}[/bold] on {config.server.host}:{config.server.port}"
    )
    uvicorn.run(web_app, host=config.server.host, port=config.server.port)


@app.command()
def run(
    text: Annotated[list[str], typer.Argument(help="Command text, e.g. 'add alice bob'.")],
    config_path: ConfigOption = None,
    data_path: DataPathOption = None,
    at: Annotated[
        Optional[str],
        typer.Option("--at", help="Pretend it is this moment (YYYY-MM-DDTHH:MM)."),
    ] = None,
) -> None:
    """Run one command against the local data directory.

    No token is checked: whoever can run this can already write the files.
    """
    config = _configure(config_path, data_path=data_path)

    clock: Clock
    if at:
        try:
            clock = FixedClock(datetime.strptime(at, "%Y-%m-%dT%H:%M"))
        except ValueError:
            console.print(f"[red]Error:[/red] Invalid moment: {at}")
            console.print("Use YYYY-MM-DDTHH:MM format (e.g., 2024-03-10T09:30)")
            raise typer.Exit(1)

    try:
        if not at:
            clock = SystemClock(config.clock.timezone)
        dispatcher = CommandDispatcher(config.data_root(), clock)
    except ConfigError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(1)

    try:
        response = dispatcher.handle_text(" ".join(text))
    except GltError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(1)

    _print_response(response)
