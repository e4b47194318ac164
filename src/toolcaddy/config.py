"""Config file loading and resolution."""

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "toolcaddy" / "config.toml"

DEFAULTS: dict[str, Any] = {
    "models_url": "https://ahamai-api.officialprakashkrsingh.workers.dev/v1/models",
    "api_key": None,
    "screenshot_service": "https://s0.wp.com/mshots/v1",
    "search_url": "https://api.duckduckgo.com/",
    "http_timeout": 15.0,
    "models_timeout": 30.0,
    "models_cache_ttl": 300.0,
    "log_level": "WARNING",
}


@dataclass(frozen=True)
class Settings:
    """Resolved settings used to wire the default tools."""

    models_url: str = DEFAULTS["models_url"]
    api_key: str | None = DEFAULTS["api_key"]
    screenshot_service: str = DEFAULTS["screenshot_service"]
    search_url: str = DEFAULTS["search_url"]
    http_timeout: float = DEFAULTS["http_timeout"]
    models_timeout: float = DEFAULTS["models_timeout"]
    models_cache_ttl: float = DEFAULTS["models_cache_ttl"]
    log_level: str = DEFAULTS["log_level"]


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load config from TOML file. Returns empty dict if file doesn't exist."""
    config_path = path or DEFAULT_CONFIG_PATH
    if not config_path.exists():
        return {}
    with open(config_path, "rb") as f:
        return tomllib.load(f)


def resolve(cli_value: Any, config_value: Any, default: Any) -> Any:
    """Resolve a setting with precedence: CLI flag > config file > default."""
    if cli_value is not None:
        return cli_value
    if config_value is not None:
        return config_value
    return default


def build_settings(cfg: dict[str, Any], **overrides: Any) -> Settings:
    """Merge CLI overrides and config file values into Settings."""
    unknown = set(overrides) - set(DEFAULTS)
    if unknown:
        raise ValueError(f"unknown setting(s): {', '.join(sorted(unknown))}")
    values = {
        key: resolve(overrides.get(key), cfg.get(key), default)
        for key, default in DEFAULTS.items()
    }
    for key in ("http_timeout", "models_timeout", "models_cache_ttl"):
        values[key] = float(values[key])
    return Settings(**values)
