"""
Runtime settings loader.

Settings come from three layers (later overrides earlier):

1. Python defaults below
2. User YAML at ``~/.sharegym/config.yaml`` (or ``$SHAREGYM_HOME/config.yaml``)
3. Environment variables ``SHAREGYM_API_URL``, ``SHAREGYM_HOME``,
   ``SHAREGYM_TIMEOUT``

An empty API URL means the backend is disabled: every network call is
rejected before a connection is attempted and callers stay local-only.

Usage:
    from sharegym.core.settings import load_settings
    settings = load_settings()
    if settings.backend_enabled:
        ...
"""

from __future__ import annotations

import os
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .config import DEFAULT_REQUEST_TIMEOUT


@dataclass(frozen=True)
class Settings:
    """Resolved runtime settings."""

    api_base_url: str = ""
    data_dir: Path = Path("~/.sharegym").expanduser()
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT

    def __post_init__(self) -> None:
        # Normalise: no trailing slash on the base URL
        object.__setattr__(self, "api_base_url", self.api_base_url.rstrip("/"))
        if self.request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be positive")

    @property
    def backend_enabled(self) -> bool:
        """True when a backend base URL is configured."""
        return bool(self.api_base_url)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML mapping; warn and return {} if the file cannot be parsed."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        warnings.warn(f"sharegym: ignoring settings file {path} ({exc})", stacklevel=2)
        return {}
    return data if isinstance(data, dict) else {}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_home_dir(environ: dict[str, str] | None = None) -> Path:
    """Return the sharegym data directory ($SHAREGYM_HOME or ~/.sharegym)."""
    env = os.environ if environ is None else environ
    override = env.get("SHAREGYM_HOME")
    if override:
        return Path(override).expanduser()
    home = Path(env.get("HOME", "~")).expanduser()
    return home / ".sharegym"


def get_user_yaml_path(environ: dict[str, str] | None = None) -> Path | None:
    """Return the user config.yaml if it exists, else None."""
    p = get_home_dir(environ) / "config.yaml"
    return p if p.exists() else None


def load_settings(environ: dict[str, str] | None = None) -> Settings:
    """
    Build Settings from defaults, the user YAML file, and the environment.

    Args:
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Frozen Settings instance
    """
    env = os.environ if environ is None else environ

    user = get_user_yaml_path(env)
    raw: dict[str, Any] = _load_yaml_file(user) if user is not None else {}

    api = raw.get("api", {}) if isinstance(raw.get("api"), dict) else {}
    base_url = str(env.get("SHAREGYM_API_URL") or api.get("base_url") or "")
    timeout = float(env.get("SHAREGYM_TIMEOUT") or api.get("timeout_seconds") or DEFAULT_REQUEST_TIMEOUT)

    data_dir_raw = raw.get("data_dir")
    if env.get("SHAREGYM_HOME") or not data_dir_raw:
        data_dir = get_home_dir(env)
    else:
        data_dir = Path(str(data_dir_raw)).expanduser()

    return Settings(
        api_base_url=base_url,
        data_dir=data_dir,
        request_timeout_seconds=timeout,
    )
