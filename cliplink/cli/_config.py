"""Config loading shared by CLI commands."""

from __future__ import annotations

import logging

import typer

from cliplink.config import ClipLinkConfig, ConfigLoadError, ConfigManager


def load_config(config: str | None = None, database_url: str | None = None) -> ClipLinkConfig:
    """Load cliplink.yaml plus environment; --database-url wins over both."""
    overrides = {"database": {"url": database_url.strip()}} if database_url and database_url.strip() else None
    try:
        cfg = ConfigManager.load(config_path=config or None, overrides=overrides).get()
    except ConfigLoadError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(2) from exc
    logging.basicConfig(level=getattr(logging, cfg.logging.level, logging.INFO))
    return cfg
