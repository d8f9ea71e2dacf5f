"""Configuration manager for ClipLink."""

from __future__ import annotations

import json
import os
from threading import Lock
from typing import Any, Callable, ClassVar

from pydantic import ValidationError

from cliplink.config.loader import ConfigLoadError, YAMLConfigLoader
from cliplink.config.models import ClipLinkConfig

ConfigListener = Callable[[ClipLinkConfig, ClipLinkConfig], None]

ENV_PREFIX = "CLIPLINK_"
_RESERVED_ENV = {"CLIPLINK_CONFIG"}


def _deep_merge(base: dict[str, Any], updates: dict[str, Any]) -> dict[str, Any]:
    merged: dict[str, Any] = dict(base)
    for key, value in updates.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _coerce_env_value(raw: str) -> Any:
    value = raw.strip()
    lowered = value.lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    if value.startswith(("[", "{")):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value
    return value


def _collect_env_overrides(prefix: str = ENV_PREFIX) -> dict[str, Any]:
    """CLIPLINK_SECTION__KEY=value becomes {"section": {"key": value}}."""
    overrides: dict[str, Any] = {}
    for key, raw_value in os.environ.items():
        if not key.startswith(prefix) or key in _RESERVED_ENV:
            continue
        path = [p.strip().lower() for p in key[len(prefix) :].split("__") if p.strip()]
        if not path:
            continue
        cursor = overrides
        for part in path[:-1]:
            existing = cursor.get(part)
            if not isinstance(existing, dict):
                existing = {}
                cursor[part] = existing
            cursor = existing
        cursor[path[-1]] = _coerce_env_value(raw_value)
    return overrides


class ConfigManager:
    """Thread-safe singleton for typed configuration access."""

    _instance: ClassVar[ConfigManager | None] = None
    _class_lock: ClassVar[Lock] = Lock()

    def __init__(self) -> None:
        self._lock = Lock()
        self._config = ClipLinkConfig()
        self._listeners: list[ConfigListener] = []
        self._config_path: str | None = None

    @classmethod
    def instance(cls) -> ConfigManager:
        if cls._instance is not None:
            return cls._instance
        with cls._class_lock:
            if cls._instance is None:
                cls._instance = cls()
        return cls._instance

    @classmethod
    def _reset_for_tests(cls) -> None:
        with cls._class_lock:
            cls._instance = None

    @classmethod
    def load(
        cls,
        config_path: str | None = None,
        overrides: dict[str, Any] | None = None,
    ) -> ConfigManager:
        """Load defaults, then YAML, then environment, then runtime overrides."""
        manager = cls.instance()
        merged = _deep_merge(YAMLConfigLoader.load_dict(config_path), _collect_env_overrides())
        merged = _deep_merge(merged, overrides or {})
        try:
            new_config = ClipLinkConfig.model_validate(merged)
        except ValidationError as exc:
            raise ConfigLoadError(f"Invalid configuration: {exc}") from exc
        with manager._lock:
            old = manager._config
            manager._config = new_config
            manager._config_path = config_path
            listeners = list(manager._listeners)
        for callback in listeners:
            callback(old, new_config)
        return manager

    @property
    def config_path(self) -> str | None:
        with self._lock:
            return self._config_path

    def get(self) -> ClipLinkConfig:
        """Return current config snapshot."""
        with self._lock:
            return self._config

    def on_change(self, callback: ConfigListener) -> None:
        with self._lock:
            self._listeners.append(callback)
