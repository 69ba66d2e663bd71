"""Configuration file loading and XDG directory resolution.

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.feedcache/`` on macOS and Windows. See :func:`get_cache_dir` and
  :func:`get_data_dir`.
* **Config files** -- an optional JSON object whose keys are
  :class:`~feedcache.models.FeedConfig` options, read by
  :func:`load_config_file`.
* **Precedence** -- :func:`resolve_config` layers explicit overrides (CLI
  flags) over config-file values over model defaults.
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Any, Mapping, Optional

from feedcache.exceptions import ConfigError
from feedcache.models import FeedConfig

_APP_NAME = "feedcache"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_cache_dir() -> Path:
    """Return the cache directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CACHE_HOME/feedcache/`` (default ``~/.cache/feedcache/``).
    On macOS/Windows: ``~/.feedcache/cache/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CACHE_HOME", (".cache",)) / _APP_NAME
    else:
        path = _fallback_base_dir() / "cache"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/feedcache/`` (default ``~/.local/share/feedcache/``).
    On macOS/Windows: ``~/.feedcache/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def default_cache_path(account: str) -> Path:
    """Return the CLI's default cache file for *account*."""
    safe = "".join(ch if ch.isalnum() or ch in "-_." else "_" for ch in account)
    return get_cache_dir() / f"{safe}.json"


# --- Config files ---


def load_config_file(path: str | Path) -> dict[str, Any]:
    """Read a JSON config file into a plain option mapping.

    Unknown keys are kept here; :meth:`FeedConfig.from_options` drops them.

    Raises:
        ConfigError: If the file cannot be read, is not valid JSON, or is
            not a JSON object.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return data


def resolve_config(
    config_file: Optional[str | Path] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> FeedConfig:
    """Build the effective :class:`FeedConfig`.

    Precedence (highest first): *overrides* whose value is not ``None``,
    then the config file, then the model defaults.

    Raises:
        ConfigError: If the config file is unreadable or a value has the
            wrong type.
    """
    options: dict[str, Any] = {}
    if config_file is not None:
        options.update(load_config_file(config_file))
    for key, value in (overrides or {}).items():
        if value is not None:
            options[key] = value
    return FeedConfig.from_options(options)
