"""Configuration loading with XDG paths, atomic writes, and precedence resolution.

This module turns the various places settings can come from into one
:class:`~onoffice.models.ClientConfig`:

* **Config file** -- a JSON document shaped like ``ClientConfig``, by
  default ``$XDG_CONFIG_HOME/onoffice/config.json`` on Linux/BSD and
  ``~/.onoffice/config.json`` elsewhere. See :func:`load_config_file` and
  :func:`save_config_file`.
* **Environment** -- ``ONOFFICE_TOKEN``, ``ONOFFICE_SECRET``,
  ``ONOFFICE_API_VERSION``, ``ONOFFICE_API_URL``,
  ``ONOFFICE_CACHE_ENABLED``, ``ONOFFICE_CACHE_EXPIRATION``; the file
  location itself can be moved with ``ONOFFICE_CONFIG``.
* **Explicit arguments** -- passed to :func:`resolve_config` by the CLI.
* **Credential sources** -- token and secret may be written as
  ``env:VAR`` or ``file:/path`` instead of literal values; see
  :func:`resolve_credential`.

File writes use a temp-file-then-rename strategy (:func:`_atomic_write`)
so a crash never leaves a half-written config behind.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from onoffice.exceptions import ConfigError
from onoffice.models import ClientConfig

_APP_NAME = "onoffice"
_CONFIG_FILENAME = "config.json"

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/onoffice/`` (default ``~/.config/onoffice/``).
    On macOS/Windows: ``~/.onoffice/``.
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_CONFIG_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".config"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


def default_config_path() -> Path:
    """Path of the config file: ``$ONOFFICE_CONFIG`` or ``<config_dir>/config.json``."""
    override = os.environ.get("ONOFFICE_CONFIG")
    if override:
        return Path(override).expanduser()
    return get_config_dir() / _CONFIG_FILENAME


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed.
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
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
        # The file may hold an API secret.
        os.chmod(path, 0o600)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Config file ---


def load_config_file(path: Optional[Path] = None) -> dict[str, Any]:
    """Load the raw JSON config.

    Args:
        path: Explicit file to read. Defaults to :func:`default_config_path`.

    Returns:
        The parsed object, or an empty dict if the default file does not
        exist.

    Raises:
        ConfigError: If an explicit *path* is missing, or the file is not
            a JSON object.
    """
    explicit = path is not None
    path = Path(path).expanduser() if path is not None else default_config_path()
    if not path.is_file():
        if explicit:
            raise ConfigError(f"Config file not found: {path}")
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config at {path}: expected a JSON object")
    return data


def save_config_file(data: dict[str, Any], path: Optional[Path] = None) -> Path:
    """Persist *data* as the config file and return the path written."""
    path = Path(path).expanduser() if path is not None else default_config_path()
    _atomic_write(path, json.dumps(data, indent=2) + "\n")
    return path


# --- Credential sources ---


def resolve_credential(source: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - anything else -- used literally

    Raises:
        ConfigError: If the variable is unset or the file cannot be read.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    return source


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean (true/false), got: {value}")


def _parse_int(name: str, value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got: {value}") from None


# --- Precedence resolution ---


def resolve_config(
    token: Optional[str] = None,
    secret: Optional[str] = None,
    api_version: Optional[str] = None,
    api_url: Optional[str] = None,
    cache_enabled: Optional[bool] = None,
    config_path: Optional[Path] = None,
) -> ClientConfig:
    """Resolve the effective client configuration.

    Precedence (high to low):
        1. Explicit arguments
        2. Environment variables (``ONOFFICE_*``)
        3. Config file
        4. Model defaults

    Returns:
        A validated :class:`~onoffice.models.ClientConfig`.

    Raises:
        ConfigError: If token or secret are missing, a credential source
            cannot be resolved, or a value fails validation.
    """
    data = load_config_file(config_path)
    cache = dict(data.get("cache") or {})

    # 2. Environment
    env = os.environ
    if env.get("ONOFFICE_TOKEN"):
        data["token"] = env["ONOFFICE_TOKEN"]
    if env.get("ONOFFICE_SECRET"):
        data["secret"] = env["ONOFFICE_SECRET"]
    if env.get("ONOFFICE_API_VERSION"):
        data["api_version"] = env["ONOFFICE_API_VERSION"]
    if env.get("ONOFFICE_API_URL"):
        data["api_url"] = env["ONOFFICE_API_URL"]
    if env.get("ONOFFICE_CACHE_ENABLED"):
        cache["enabled"] = _parse_bool("ONOFFICE_CACHE_ENABLED", env["ONOFFICE_CACHE_ENABLED"])
    if env.get("ONOFFICE_CACHE_EXPIRATION"):
        cache["expiration_seconds"] = _parse_int(
            "ONOFFICE_CACHE_EXPIRATION", env["ONOFFICE_CACHE_EXPIRATION"]
        )

    # 1. Explicit arguments
    if token is not None:
        data["token"] = token
    if secret is not None:
        data["secret"] = secret
    if api_version is not None:
        data["api_version"] = api_version
    if api_url is not None:
        data["api_url"] = api_url
    if cache_enabled is not None:
        cache["enabled"] = cache_enabled
    data["cache"] = cache

    for field in ("token", "secret"):
        value = data.get(field)
        if not value:
            raise ConfigError(
                f"No API {field} configured. Set ONOFFICE_{field.upper()} "
                f"or add '{field}' to {config_path or default_config_path()}"
            )
        data[field] = resolve_credential(str(value))

    try:
        return ClientConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
