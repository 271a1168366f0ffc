"""Configuration: XDG paths and environment-driven settings.

This module handles all configuration for cmdref:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.cmdref/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`. The session file lives in the config directory,
  crash logs in the data directory.
* **Settings resolution** -- :func:`resolve_settings` builds the
  :class:`~cmdref.models.Settings` for one invocation. There is no
  settings file: CLI flags and environment variables are the only
  overrides of the built-in defaults.

Environment variables:

=========================  ==============================================
``CMDREF_API_BASE``        Backend base URL
``CMDREF_GOOGLE_CLIENT_ID``  OAuth client identifier
``CMDREF_AUTH_URL``        Authorization endpoint override
``CMDREF_LOGIN_TIMEOUT``   Seconds to wait for the browser redirect
``CMDREF_SHELL``           Shell used by ``cmdref run`` (else ``$SHELL``)
=========================  ==============================================
"""

from __future__ import annotations

import os
import platform
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from cmdref.exceptions import ConfigError
from cmdref.models import Settings

_APP_NAME = "cmdref"
_SESSION_FILENAME = "session.json"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform follows the XDG Base Directory layout (Linux/BSD)."""
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

    On Linux/BSD: ``$XDG_CONFIG_HOME/cmdref/`` (default ``~/.config/cmdref/``).
    On macOS/Windows: ``~/.cmdref/``.

    Returns:
        Absolute path to the configuration directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/cmdref/`` (default ``~/.local/share/cmdref/``).
    On macOS/Windows: ``~/.cmdref/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_session_path() -> Path:
    """Return the canonical session file path (the file itself may not exist)."""
    return get_config_dir() / _SESSION_FILENAME


# --- Settings resolution ---


def _default_shell() -> str:
    return os.environ.get("CMDREF_SHELL") or os.environ.get("SHELL") or "/bin/sh"


def resolve_settings(
    cli_api_base: Optional[str] = None,
    cli_login_timeout: Optional[float] = None,
) -> Settings:
    """Resolve the effective settings with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_api_base``, ``cli_login_timeout``)
        2. Environment variables (``CMDREF_*``)
        3. Defaults declared on :class:`~cmdref.models.Settings`

    Returns:
        A validated :class:`~cmdref.models.Settings`.

    Raises:
        ConfigError: If an override has an invalid value (for example a
            non-numeric ``CMDREF_LOGIN_TIMEOUT``).
    """
    values: dict[str, Any] = {"shell": _default_shell()}

    env_map = {
        "api_base": "CMDREF_API_BASE",
        "client_id": "CMDREF_GOOGLE_CLIENT_ID",
        "authorization_url": "CMDREF_AUTH_URL",
        "login_timeout": "CMDREF_LOGIN_TIMEOUT",
    }
    for field, var in env_map.items():
        env_value = os.environ.get(var)
        if env_value:
            values[field] = env_value

    if cli_api_base is not None:
        values["api_base"] = cli_api_base
    if cli_login_timeout is not None:
        values["login_timeout"] = cli_login_timeout

    try:
        return Settings.model_validate(values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
