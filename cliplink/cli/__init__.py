"""CLI tools: cliplink init, serve, history, stats, db."""

import sys
from importlib import metadata

import typer

from cliplink.cli._config import load_config
from cliplink.cli.channel import history_command, stats_command
from cliplink.cli.db import db_app
from cliplink.cli.init_config import init_config_command
from cliplink.sync.ledger import DEFAULT_HISTORY_LIMIT

app = typer.Typer(
    name="cliplink",
    help="ClipLink: shared clipboard for groups of devices.",
    no_args_is_help=True,
)
app.add_typer(db_app, name="db")


def _version_callback(value: bool) -> None:
    if not value:
        return
    try:
        version = metadata.version("cliplink")
    except metadata.PackageNotFoundError:
        version = "unknown"
    typer.echo(f"cliplink {version}")
    raise typer.Exit(0)


@app.callback()
def root(
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback, is_eager=True, help="Show version and exit."
    ),
) -> None:
    """ClipLink command line."""


@app.command("init")
def init_command(
    path: str = typer.Option(".", "--path", help="Output directory"),
    force: bool = typer.Option(False, "--force", help="Overwrite existing cliplink.yaml"),
) -> None:
    """Generate default cliplink.yaml in target directory."""
    try:
        init_config_command(path=path, force=force)
    except FileExistsError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc


@app.command("serve")
def serve_command(
    host: str = typer.Option("", "--host", help="Bind address (default: server.host)."),
    port: int = typer.Option(0, "--port", help="Bind port (default: server.port)."),
    config: str = typer.Option("", "--config", help="Optional config file path"),
    database_url: str = typer.Option("", "--database-url", help="Database URL override."),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    from cliplink.api import create_app

    cfg = load_config(config, database_url)
    uvicorn.run(
        create_app(cfg),
        host=host or cfg.server.host,
        port=port or cfg.server.port,
        log_level=cfg.logging.level.lower(),
    )


@app.command("history")
def history(
    channel_id: str = typer.Argument(..., help="Channel to inspect."),
    limit: int = typer.Option(DEFAULT_HISTORY_LIMIT, "--limit", help="Maximum entries to show."),
    offset: int = typer.Option(0, "--offset", help="Entries to skip."),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table."),
    config: str = typer.Option("", "--config", help="Optional config file path"),
    database_url: str = typer.Option("", "--database-url", help="Database URL override."),
) -> None:
    """Print a channel's sync history."""
    history_command(channel_id, limit=limit, offset=offset, as_json=as_json, config=config, database_url=database_url)


@app.command("stats")
def stats(
    channel_id: str = typer.Argument(..., help="Channel to inspect."),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table."),
    config: str = typer.Option("", "--config", help="Optional config file path"),
    database_url: str = typer.Option("", "--database-url", help="Database URL override."),
) -> None:
    """Print channel statistics."""
    stats_command(channel_id, as_json=as_json, config=config, database_url=database_url)


def main() -> None:
    """CLI entry point."""
    try:
        app()
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
