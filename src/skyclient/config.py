"""Configuration management with presets, atomic writes, and precedence resolution.

This module handles all persistent configuration for skyclient:

* **Directory layout** -- state lives under ``~/.skyclient/`` (overridable
  with ``SKYCLIENT_HOME``); the operator workspace is ``~/autrikos/``
  (``SKYCLIENT_WORKSPACE``). See :func:`get_home_dir` and
  :func:`get_workspace_dir`.
* **Presets** -- named bundles of defaults in :data:`PRESETS`. ``default``
  targets the hosted identity service, ``local`` a Kratos instance running
  on the developer's machine.
* **Config file** -- an optional ``~/.skyclient/config.json`` whose keys
  override the preset. Read by :func:`load_config_file`.
* **Precedence resolution** -- :func:`resolve_settings` merges CLI flags,
  environment variables, the config file and the preset into one
  :class:`~skyclient.models.Settings`.

All file writes go through :func:`atomic_write` (temp file then rename) so
that a crash never leaves a half-written file behind.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from skyclient.exceptions import ConfigError
from skyclient.models import Settings

_APP_NAME = "skyclient"
_CONFIG_FILENAME = "config.json"
_WORKSPACE_DIRNAME = "autrikos"

_CONFIG_BASE_URL = "https://raw.githubusercontent.com/your-repo/config/main"

PRESETS: dict[str, dict[str, Any]] = {
    "default": {
        "kratos_url": "https://autrik.com/api/.ory/kratos/public",
        "filebrowser_config_url": f"{_CONFIG_BASE_URL}/filebrowser-settings.json",
        "docker_compose_url": f"{_CONFIG_BASE_URL}/docker-compose.yaml",
        "mavlink_router_config_url": f"{_CONFIG_BASE_URL}/mavlink-router.conf",
    },
    "local": {
        "kratos_url": "http://127.0.0.1:4433",
        "filebrowser_config_url": f"{_CONFIG_BASE_URL}/filebrowser-settings.json",
        "docker_compose_url": f"{_CONFIG_BASE_URL}/docker-compose.yaml",
        "mavlink_router_config_url": f"{_CONFIG_BASE_URL}/mavlink-router.conf",
    },
}
"""Built-in presets keyed by name. Values are partial :class:`Settings` dicts."""

DEFAULT_PRESET = "default"


# --- Path resolution ---


def get_home_dir() -> Path:
    """Return the skyclient state directory.

    ``$SKYCLIENT_HOME`` when set, otherwise ``~/.skyclient``. The directory
    is not created here; provisioning and the session store create it when
    they first write into it.
    """
    env_value = os.environ.get("SKYCLIENT_HOME", "")
    if env_value:
        return Path(env_value).expanduser()
    return Path.home() / f".{_APP_NAME}"


def get_workspace_dir() -> Path:
    """Return the operator workspace directory (``$SKYCLIENT_WORKSPACE`` or ``~/autrikos``)."""
    env_value = os.environ.get("SKYCLIENT_WORKSPACE", "")
    if env_value:
        return Path(env_value).expanduser()
    return Path.home() / _WORKSPACE_DIRNAME


def get_logs_dir(home_dir: Optional[Path] = None) -> Path:
    """Return the crash-log directory, creating it if necessary.

    Args:
        home_dir: State directory to nest under. Defaults to
            :func:`get_home_dir`.

    Returns:
        Absolute path to ``<home_dir>/logs`` (guaranteed to exist).
    """
    path = (home_dir or get_home_dir()) / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: str, mode: Optional[int] = None) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is guaranteed to be an atomic rename on POSIX systems.
    On success the temp file is renamed over *path*; on any failure the temp
    file is cleaned up and *path* keeps its previous content.

    Args:
        path: Destination file. Parent directories are created.
        data: Text to write (UTF-8).
        mode: Optional permission bits applied to the temp file before any
            content is written, e.g. ``0o600`` for secrets.
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
        if mode is not None:
            os.chmod(tmp_path, mode)
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close in finally
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up the temp file on any error (including KeyboardInterrupt).
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Config file ---


def config_file_path(home_dir: Optional[Path] = None) -> Path:
    """Path to the optional ``config.json`` inside the state directory."""
    return (home_dir or get_home_dir()) / _CONFIG_FILENAME


def load_config_file(home_dir: Optional[Path] = None) -> Optional[dict[str, Any]]:
    """Load the optional user config file.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = config_file_path(home_dir)
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError, OSError) as exc:
        raise ConfigError(f"Invalid config file at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config file at {path}: expected a JSON object")
    return data


# --- Precedence resolution ---


def list_presets() -> list[str]:
    """Return the names of all built-in presets, sorted alphabetically."""
    return sorted(PRESETS)


def resolve_settings(
    cli_preset: Optional[str] = None,
    cli_kratos_url: Optional[str] = None,
) -> Settings:
    """Resolve settings with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_preset``, ``cli_kratos_url``)
        2. Environment variables (``SKYCLIENT_PRESET``,
           ``SKYCLIENT_KRATOS_URL``, ``SKYCLIENT_TOKEN_FILE``)
        3. Config file (``~/.skyclient/config.json``)
        4. Preset values
        5. Model defaults

    Returns:
        The validated :class:`~skyclient.models.Settings`.

    Raises:
        ConfigError: If the preset is unknown or the merged values fail
            validation.
    """
    home_dir = get_home_dir()
    file_values = load_config_file(home_dir) or {}

    # Determine the preset name through the precedence chain
    file_preset = file_values.get("preset")
    if file_preset is not None and not isinstance(file_preset, str):
        raise ConfigError(
            f"Invalid config file at {config_file_path(home_dir)}: 'preset' must be a string"
        )
    preset_name: str = file_preset or DEFAULT_PRESET
    env_preset = os.environ.get("SKYCLIENT_PRESET")
    if env_preset:
        preset_name = env_preset
    if cli_preset is not None:
        preset_name = cli_preset

    if preset_name not in PRESETS:
        available = ", ".join(list_presets())
        raise ConfigError(f"Unknown preset '{preset_name}'. Available presets: {available}")

    merged: dict[str, Any] = {
        "home_dir": home_dir,
        "workspace_dir": get_workspace_dir(),
        **PRESETS[preset_name],
    }
    merged.update(file_values)
    merged["preset"] = preset_name

    env_url = os.environ.get("SKYCLIENT_KRATOS_URL")
    if env_url:
        merged["kratos_url"] = env_url
    env_token_file = os.environ.get("SKYCLIENT_TOKEN_FILE")
    if env_token_file:
        merged["token_file"] = Path(env_token_file).expanduser()

    if cli_kratos_url is not None:
        merged["kratos_url"] = cli_kratos_url

    try:
        return Settings.model_validate(merged)
    except ValueError as exc:
        raise ConfigError(f"Invalid settings: {exc}") from exc
