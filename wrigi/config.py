"""Service settings loaded from a YAML file."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any

import yaml

from wrigi.errors import ConfigError

CONFIG_ENV = "WRIGI_CONFIG"
DEFAULT_CONFIG_PATH = Path("wrigi.yaml")


@dataclass
class GitHubSettings:
    """Connection settings for the GitHub releases API."""

    base_url: str = "https://api.github.com"
    timeout_s: float = 30.0
    max_retries: int = 0
    release_pages: int = 1


@dataclass
class Settings:
    """Top-level service settings."""

    oauth: str | None = None
    cooldown_minutes: float = 5.0
    catalog: Path | None = None
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8080
    github: GitHubSettings = field(default_factory=GitHubSettings)

    @property
    def cooldown(self) -> timedelta:
        return timedelta(minutes=self.cooldown_minutes)


def _typed(data: dict, key: str, kind: type | tuple[type, ...], default: Any) -> Any:
    if key not in data or data[key] is None:
        return default
    value = data[key]
    if not isinstance(value, kind) or isinstance(value, bool):
        raise ConfigError(f"Config key {key!r} has invalid value: {value!r}")
    return value


def parse_settings(data: Any, base_dir: Path = Path(".")) -> Settings:
    """Build Settings from a parsed YAML mapping.

    A relative ``catalog`` path is resolved against ``base_dir``.
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("Config file must contain a mapping")

    github_data = data.get("github") or {}
    if not isinstance(github_data, dict):
        raise ConfigError("Config key 'github' must be a mapping")

    defaults = GitHubSettings()
    github = GitHubSettings(
        base_url=_typed(github_data, "base_url", str, defaults.base_url),
        timeout_s=float(_typed(github_data, "timeout_s", (int, float), defaults.timeout_s)),
        max_retries=_typed(github_data, "max_retries", int, defaults.max_retries),
        release_pages=_typed(github_data, "release_pages", int, defaults.release_pages),
    )

    catalog = _typed(data, "catalog", str, None)
    catalog_path = None
    if catalog:
        catalog_path = Path(catalog)
        if not catalog_path.is_absolute():
            catalog_path = base_dir / catalog_path

    return Settings(
        oauth=_typed(data, "oauth", str, None) or None,
        cooldown_minutes=float(_typed(data, "cooldown_minutes", (int, float), 5.0)),
        catalog=catalog_path,
        log_level=_typed(data, "log_level", str, "INFO"),
        host=_typed(data, "host", str, "127.0.0.1"),
        port=_typed(data, "port", int, 8080),
        github=github,
    )


def resolve_config_path(path: Path | None = None) -> Path:
    """Return the explicit path, else ``$WRIGI_CONFIG``, else ``wrigi.yaml``."""
    if path is not None:
        return path
    env_path = os.environ.get(CONFIG_ENV)
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_PATH


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from YAML; a missing file yields the defaults."""
    config_path = resolve_config_path(path)
    if not config_path.exists():
        return Settings()

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config file {config_path}: {e}") from e

    return parse_settings(data, base_dir=config_path.parent)
