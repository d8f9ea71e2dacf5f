"""`cliplink history` and `cliplink stats`: read-only channel inspection."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from cliplink.cli._config import load_config
from cliplink.db import ConfigurationError, create_engine, create_session_factory
from cliplink.errors import ClipLinkError
from cliplink.sync.facade import SyncFacade
from cliplink.sync.ledger import DEFAULT_HISTORY_LIMIT
from cliplink.sync.models import ChannelStats, SyncEntry

console = Console()


def _serialize_entry(entry: SyncEntry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "channel_id": entry.channel_id,
        "device_id": entry.device_id,
        "action": entry.action,
        "content": entry.content,
        "created_at": entry.created_at.isoformat(),
    }


def _serialize_stats(stats: ChannelStats) -> dict[str, Any]:
    return {
        "channel_id": stats.channel_id,
        "item_count": stats.item_count,
        "items_by_type": dict(stats.items_by_type),
        "online_device_count": stats.online_device_count,
        "total_device_count": stats.total_device_count,
        "sync_count": stats.sync_count,
        "created_at": stats.created_at.isoformat(),
        "generated_at": stats.generated_at.isoformat(),
    }


async def _history_impl(database_url: str | None, channel_id: str, limit: int, offset: int) -> list[SyncEntry]:
    engine = create_engine(database_url)
    try:
        facade = SyncFacade.from_session_factory(create_session_factory(engine))
        return await facade.sync_history(channel_id, limit, offset)
    finally:
        await engine.dispose()


async def _stats_impl(database_url: str | None, channel_id: str) -> ChannelStats:
    engine = create_engine(database_url)
    try:
        facade = SyncFacade.from_session_factory(create_session_factory(engine))
        return await facade.channel_stats(channel_id)
    finally:
        await engine.dispose()


def history_command(
    channel_id: str,
    *,
    limit: int = DEFAULT_HISTORY_LIMIT,
    offset: int = 0,
    as_json: bool = False,
    config: str = "",
    database_url: str = "",
) -> None:
    """Print a channel's sync ledger, newest first."""
    if limit < 1:
        raise typer.BadParameter("limit must be a positive integer.")
    cfg = load_config(config, database_url)
    try:
        entries = asyncio.run(_history_impl(cfg.database.url or None, channel_id.strip(), limit, offset))
    except ConfigurationError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(2) from exc
    except ClipLinkError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc
    if as_json:
        typer.echo(json.dumps([_serialize_entry(e) for e in entries], ensure_ascii=False, indent=2))
        return
    table = Table(title=f"Sync history: {channel_id}", show_header=True, header_style="bold")
    table.add_column("ID", justify="right")
    table.add_column("Time", style="dim")
    table.add_column("Device")
    table.add_column("Action")
    table.add_column("Content")
    for entry in entries:
        table.add_row(
            str(entry.id),
            entry.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            entry.device_id,
            entry.action,
            entry.content,
        )
    console.print(table)


def stats_command(channel_id: str, *, as_json: bool = False, config: str = "", database_url: str = "") -> None:
    """Print aggregate counts for a channel."""
    cfg = load_config(config, database_url)
    try:
        stats = asyncio.run(_stats_impl(cfg.database.url or None, channel_id.strip()))
    except ConfigurationError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(2) from exc
    except ClipLinkError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc
    if as_json:
        typer.echo(json.dumps(_serialize_stats(stats), ensure_ascii=False, indent=2))
        return
    table = Table(title=f"Channel stats: {channel_id}", show_header=True, header_style="bold")
    table.add_column("Item", style="dim")
    table.add_column("Value")
    table.add_row("Items", str(stats.item_count))
    for content_type, count in stats.items_by_type.items():
        table.add_row(f"  {content_type}", str(count))
    table.add_row("Devices online", f"{stats.online_device_count} / {stats.total_device_count}")
    table.add_row("Sync events", str(stats.sync_count))
    table.add_row("Created", stats.created_at.strftime("%Y-%m-%d %H:%M:%S"))
    console.print(table)
