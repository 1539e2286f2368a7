"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for spectry:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.spectry/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~spectry.models.GlobalConfig`
  JSON file storing request defaults, output format, and the presentation
  flags (theme, menu visibility, onboarding) the UI persists between
  sessions.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config, and global config into the
  final effective configuration.

Core modules never call into this one implicitly: the entry point loads a
:class:`~spectry.models.GlobalConfig` once and passes the relevant pieces
down as plain arguments.

All file writes use an atomic temp-file-then-rename strategy
(:func:`atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from spectry.exceptions import ConfigError
from spectry.models import GlobalConfig

_APP_NAME = "spectry"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "spectry.json"


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

    On Linux/BSD: ``$XDG_CONFIG_HOME/spectry/`` (default ``~/.config/spectry/``).
    On macOS/Windows: ``~/.spectry/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/spectry/`` (default ``~/.local/share/spectry/``).
    On macOS/Windows: ``~/.spectry/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: str) -> None:
    """Write *data* to *path* atomically using a temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. Line endings are
    written exactly as given. On any failure the temp file is removed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
            newline="",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the config directory.

    Returns:
        The deserialised :class:`~spectry.models.GlobalConfig`, or a
        default instance if the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


def reset_global_config() -> GlobalConfig:
    """Replace the persisted configuration with defaults and return them."""
    config = GlobalConfig()
    save_global_config(config)
    return config


def set_config_value(key: str, value: str) -> GlobalConfig:
    """Set one dot-separated key (e.g. ``ui.theme``) in the persisted config.

    The string *value* is coerced to the type of the current value: booleans
    accept ``true/1/yes``, numbers are parsed, and ``null``/``none`` clears an
    optional field.

    Returns:
        The validated, saved configuration.

    Raises:
        ConfigError: If the key does not exist or the value does not validate.
    """
    config = load_global_config()
    data = config.model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            raise ConfigError(f"Invalid config key: {key}")
        target = target[k]

    final_key = keys[-1]
    if final_key not in target or isinstance(target[final_key], dict):
        raise ConfigError(f"Unknown config key: {key}")

    target[final_key] = _coerce(target[final_key], value, key)

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid value for {key}: {exc}") from exc

    save_global_config(new_config)
    return new_config


def _coerce(current: Any, value: str, key: str) -> Any:
    if value.lower() in ("null", "none"):
        return None
    if isinstance(current, bool):
        return value.lower() in ("true", "1", "yes")
    if isinstance(current, (int, float)):
        try:
            return float(value) if isinstance(current, float) or "." in value else int(value)
        except ValueError:
            raise ConfigError(f"Expected a number for {key}, got: {value}") from None
    # Let Pydantic decide for optional fields currently unset.
    return value


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./spectry.json``.

    Project-local config sits between global config and environment variables
    in the precedence chain. It typically pins ``default_server`` for a
    repository.

    Returns:
        The parsed JSON as a dict, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Precedence resolution ---


def resolve_config(
    cli_server: Optional[str] = None,
    cli_timeout: Optional[float] = None,
    cli_format: Optional[str] = None,
) -> GlobalConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_server``, ``cli_timeout``, ``cli_format``)
        2. Environment variables (``SPECTRY_SERVER``, ``SPECTRY_TIMEOUT``)
        3. Project config (``./spectry.json``)
        4. User config (``~/.config/spectry/config.json``)
        5. Defaults

    Raises:
        ConfigError: If any layer holds an invalid value.
    """
    # 5 + 4. Base global config (fills in defaults automatically)
    config = load_global_config()

    # 3. Project-local overrides, merged section by section
    project = load_project_config()
    if project is not None:
        merged = config.model_dump(mode="json")
        for section, value in project.items():
            if isinstance(value, dict) and isinstance(merged.get(section), dict):
                merged[section].update(value)
            else:
                merged[section] = value
        try:
            config = GlobalConfig.model_validate(merged)
        except ValidationError as exc:
            raise ConfigError(f"Invalid project config: {exc}") from exc

    # 2. Environment variables
    env_server = os.environ.get("SPECTRY_SERVER")
    if env_server:
        config.default_server = env_server
    env_timeout = os.environ.get("SPECTRY_TIMEOUT")
    if env_timeout:
        try:
            config.request.timeout = float(env_timeout)
        except ValueError:
            raise ConfigError(f"SPECTRY_TIMEOUT must be a number, got: {env_timeout}") from None

    # 1. CLI flags (highest precedence)
    if cli_server is not None:
        config.default_server = cli_server
    if cli_timeout is not None:
        config.request.timeout = cli_timeout
    if cli_format is not None:
        config.output.format = cli_format

    return config
