"""Configuration management with XDG paths and precedence resolution.

This module handles the (small) persistent configuration of netkit:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.netkit/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **User config** -- A single :class:`~netkit.models.GlobalConfig` JSON
  file (``config.json``) in the config directory.
* **Project config** -- An optional ``./netkit.json`` with the same shape.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project config and user config into the final
  effective configuration.

None of this is consulted by :func:`~netkit.builder.build_request` or the
:class:`~netkit.client.Provider`; embedding applications pass a
:class:`~netkit.models.ProviderConfig` directly.
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Any, Optional

from netkit.exceptions import ConfigurationError
from netkit.models import GlobalConfig

_APP_NAME = "netkit"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "netkit.json"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})


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


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/netkit/`` (default ``~/.config/netkit/``).
    On macOS/Windows: ``~/.netkit/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/netkit/`` (default ``~/.local/share/netkit/``).
    On macOS/Windows: ``~/.netkit/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Config files ---


def _read_json(path: Path, label: str) -> Optional[dict[str, Any]]:
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid {label} at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Invalid {label} at {path}: expected a JSON object")
    return data


def load_global_config() -> GlobalConfig:
    """Load the user configuration from the config directory.

    Returns:
        The deserialised :class:`~netkit.models.GlobalConfig`, or a default
        instance when the file does not exist.

    Raises:
        ConfigurationError: If the file contains invalid JSON or fails
            Pydantic validation.
    """
    path = get_config_dir() / _CONFIG_FILENAME
    data = _read_json(path, "global config")
    if data is None:
        return GlobalConfig()
    try:
        return GlobalConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid global config at {path}: {exc}") from exc


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./netkit.json``.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigurationError: If the file exists but is not a JSON object.
    """
    return _read_json(Path.cwd() / _PROJECT_CONFIG_FILENAME, "project config")


def _env_flag(name: str) -> Optional[bool]:
    """Read a boolean environment variable; ``None`` when unset."""
    raw = os.environ.get(name)
    if raw is None:
        return None
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Invalid boolean for {name}: {raw!r}")


# --- Precedence resolution ---


def resolve_config(
    cli_verbose: Optional[bool] = None,
    cli_stub: Optional[bool] = None,
    cli_format: Optional[str] = None,
) -> GlobalConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_verbose``, ``cli_stub``, ``cli_format``)
        2. Environment variables (``NETKIT_VERBOSE``, ``NETKIT_STUB``,
           ``NETKIT_FORMAT``)
        3. Project config (``./netkit.json``)
        4. User config (``~/.config/netkit/config.json``)
        5. Defaults

    Returns:
        The effective :class:`~netkit.models.GlobalConfig`.

    Raises:
        ConfigurationError: If a config file or environment value is invalid.
    """
    # 5 + 4. Defaults overlaid with the user config
    merged = load_global_config().model_dump()

    # 3. Project-local config, merged section by section
    project = load_project_config()
    if project is not None:
        for section in ("provider", "output"):
            values = project.get(section)
            if isinstance(values, dict):
                merged[section].update(values)

    # 2. Environment variables
    env_verbose = _env_flag("NETKIT_VERBOSE")
    if env_verbose is not None:
        merged["provider"]["verbose"] = env_verbose
    env_stub = _env_flag("NETKIT_STUB")
    if env_stub is not None:
        merged["provider"]["stub"] = env_stub
    env_format = os.environ.get("NETKIT_FORMAT")
    if env_format:
        merged["output"]["format"] = env_format

    # 1. CLI flags (highest precedence)
    if cli_verbose is not None:
        merged["provider"]["verbose"] = cli_verbose
    if cli_stub is not None:
        merged["provider"]["stub"] = cli_stub
    if cli_format is not None:
        merged["output"]["format"] = cli_format

    try:
        return GlobalConfig.model_validate(merged)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc
