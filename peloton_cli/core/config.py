"""Configuration loading."""

from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # Python 3.9-3.10
    import tomli as tomllib  # type: ignore[no-redef]

from peloton_cli.core.constants import API_BASE, AUTH_BASE, DEFAULT_THROTTLE_MS, DEFAULT_TIMEOUT_SECONDS


class ConfigError(RuntimeError):
    """Raised when config file parsing fails."""


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def expand_path(path_str: str) -> Path:
    """Expand user/env vars and return absolute path."""
    return Path(os.path.expandvars(path_str)).expanduser().resolve()


def default_config_path() -> Path:
    """Get default config file path."""
    raw = os.getenv("PELOTON_CONFIG_FILE", "~/.config/peloton/config.toml")
    return expand_path(raw)


def _default_config() -> Dict[str, Any]:
    return {
        "auth": {
            "username": None,
        },
        "api": {
            "base_url": API_BASE,
            "auth_url": AUTH_BASE,
            "throttle_ms": DEFAULT_THROTTLE_MS,
            "timeout_seconds": DEFAULT_TIMEOUT_SECONDS,
        },
        "export": {
            "default_directory": "./peloton",
            "overwrite": False,
            "save_raw": False,
            "include_details": False,
        },
    }


def _read_config(path: Path) -> Dict[str, Any]:
    suffix = path.suffix.lower()
    text = path.read_text()
    try:
        if suffix in {".toml", ""}:
            loaded = tomllib.loads(text)
        else:
            loaded = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in config file {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in config file {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise ConfigError(f"Config file {path} must contain an object/table at the root")
    return loaded


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from disk, merged with defaults."""
    cfg_path = path or default_config_path()
    cfg = _default_config()
    if cfg_path.exists():
        cfg = _deep_merge(cfg, _read_config(cfg_path))
    return cfg


def resolve_output_dir(config: Dict[str, Any], explicit: Optional[Path] = None) -> Path:
    """Resolve output directory with CLI override first."""
    if explicit is not None:
        return explicit.expanduser().resolve()
    raw = os.getenv("PELOTON_OUTPUT_DIR") or config.get("export", {}).get(
        "default_directory",
        "./peloton",
    )
    return expand_path(raw)


def api_settings(config: Dict[str, Any]) -> Dict[str, Any]:
    """Return validated API settings from config."""
    api_cfg = config.get("api", {})
    try:
        throttle_ms = int(api_cfg.get("throttle_ms", DEFAULT_THROTTLE_MS))
        timeout = float(api_cfg.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid [api] setting: {exc}") from exc
    if throttle_ms < 0:
        raise ConfigError("api.throttle_ms must be >= 0")
    if timeout <= 0:
        raise ConfigError("api.timeout_seconds must be > 0")
    return {
        "base_url": str(api_cfg.get("base_url") or API_BASE),
        "auth_url": str(api_cfg.get("auth_url") or AUTH_BASE),
        "throttle_ms": throttle_ms,
        "timeout_seconds": timeout,
    }
