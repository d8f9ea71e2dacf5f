"""YAML configuration loader."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

CONFIG_ENV_VAR = "CLIPLINK_CONFIG"


class ConfigLoadError(ValueError):
    """Raised when configuration YAML cannot be read or parsed."""


class YAMLConfigLoader:
    """Locate and read cliplink.yaml."""

    DEFAULT_FILENAME = "cliplink.yaml"

    @classmethod
    def resolve_path(cls, cli_path: str | None = None) -> Path:
        """Priority: CLIPLINK_CONFIG, then the CLI argument, then ./cliplink.yaml."""
        env_path = os.environ.get(CONFIG_ENV_VAR, "").strip()
        if env_path:
            return Path(env_path)
        if cli_path and cli_path.strip():
            return Path(cli_path.strip())
        return Path.cwd() / cls.DEFAULT_FILENAME

    @classmethod
    def load_dict(cls, path: str | Path | None = None) -> dict[str, Any]:
        """Missing or empty file yields an empty dict."""
        target = cls.resolve_path(str(path) if path is not None else None)
        if not target.exists():
            return {}
        try:
            text = target.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigLoadError(f"Cannot read {target}: {exc}") from exc
        if not text.strip():
            return {}
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            mark = getattr(exc, "problem_mark", None)
            if mark is not None:
                raise ConfigLoadError(
                    f"Invalid YAML at {target}:{mark.line + 1}:{mark.column + 1}"
                ) from exc
            raise ConfigLoadError(f"Invalid YAML at {target}") from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigLoadError(f"Config root must be a mapping: {target}")
        return data

    @staticmethod
    def dump(data: dict[str, Any]) -> str:
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
