"""`cliplink init`: write a default cliplink.yaml."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console

from cliplink.config import DatabaseConfig, LoggingConfig, ServerConfig, SyncConfig, YAMLConfigLoader

console = Console()

HEADER = "# ClipLink configuration. Environment variables CLIPLINK_<SECTION>__<KEY> override these values.\n"


def default_config_dict() -> dict:
    return {
        "server": ServerConfig().model_dump(),
        "database": DatabaseConfig().model_dump(),
        "sync": SyncConfig().model_dump(),
        "logging": LoggingConfig().model_dump(),
    }


def init_config_command(path: str = ".", force: bool = False) -> Path:
    """Create cliplink.yaml populated with default values."""
    target_dir = Path(path).resolve()
    target_dir.mkdir(parents=True, exist_ok=True)
    output_path = target_dir / YAMLConfigLoader.DEFAULT_FILENAME
    if output_path.exists() and not force:
        raise FileExistsError(f"Config already exists: {output_path}")
    output_path.write_text(HEADER + YAMLConfigLoader.dump(default_config_dict()), encoding="utf-8")
    console.print(f"[green]Created[/green] {output_path}")
    return output_path
