"""cliplink db: init, clear (database CLI)."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console

from cliplink.cli._config import load_config
from cliplink.db import ConfigurationError, create_engine, create_schema, create_session_factory, drop_schema
from cliplink.errors import StorageUnavailableError
from cliplink.sync.facade import SyncFacade

db_app = typer.Typer(
    name="db",
    help="Database operations: init, clear.",
)

console = Console()


async def _init_impl(database_url: str | None) -> None:
    engine = create_engine(database_url)
    try:
        await create_schema(engine)
    finally:
        await engine.dispose()


async def _clear_impl(database_url: str | None, channel_id: str | None, seed_welcome: bool, welcome_text: str) -> None:
    engine = create_engine(database_url)
    try:
        await drop_schema(engine)
        await create_schema(engine)
        if channel_id:
            facade = SyncFacade.from_session_factory(
                create_session_factory(engine),
                seed_welcome_item=seed_welcome,
                welcome_text=welcome_text,
            )
            await facade.create_channel(channel_id)
    finally:
        await engine.dispose()


def _run(coro: object) -> None:
    try:
        asyncio.run(coro)  # type: ignore[arg-type]
    except ConfigurationError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(2) from exc
    except StorageUnavailableError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc


@db_app.command("init")
def init_command(
    database_url: str = typer.Option("", "--database-url", help="Database URL (default: config or ~/.clipboard)."),
    config: str = typer.Option("", "--config", help="Optional config file path"),
) -> None:
    """Create all tables that do not exist yet."""
    cfg = load_config(config, database_url)
    _run(_init_impl(cfg.database.url or None))
    console.print("[green]Database initialized.[/green]")


@db_app.command("clear")
def clear_command(
    database_url: str = typer.Option("", "--database-url", help="Database URL (default: config or ~/.clipboard)."),
    config: str = typer.Option("", "--config", help="Optional config file path"),
    channel: str = typer.Option("", "--channel", help="Recreate this channel after clearing."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation."),
) -> None:
    """Drop and recreate every table. All channels and items are lost."""
    if not yes:
        typer.confirm("This deletes all ClipLink data. Continue?", abort=True)
    cfg = load_config(config, database_url)
    _run(
        _clear_impl(
            cfg.database.url or None,
            channel.strip() or None,
            cfg.sync.seed_welcome_item,
            cfg.sync.welcome_text,
        )
    )
    console.print("[green]Database cleared.[/green]")
