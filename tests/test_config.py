"""Tests for cmdref.config -- XDG paths and settings precedence."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from cmdref.config import (
    get_config_dir,
    get_data_dir,
    get_session_path,
    resolve_settings,
)
from cmdref.exceptions import ConfigError
from cmdref.models import (
    DEFAULT_API_BASE,
    DEFAULT_AUTHORIZATION_URL,
    DEFAULT_LOGIN_TIMEOUT,
)


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------


class TestPaths:
    def test_xdg_config_dir(self, isolated_config: Path) -> None:
        with patch("cmdref.config._is_xdg_platform", return_value=True):
            path = get_config_dir()
        assert path == isolated_config / "config" / "cmdref"
        assert path.is_dir()

    def test_xdg_data_dir(self, isolated_config: Path) -> None:
        with patch("cmdref.config._is_xdg_platform", return_value=True):
            path = get_data_dir()
        assert path == isolated_config / "data" / "cmdref"

    def test_xdg_defaults_without_env(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("XDG_CONFIG_HOME")
        with patch("cmdref.config._is_xdg_platform", return_value=True), patch(
            "cmdref.config.Path.home", return_value=isolated_config / "home"
        ):
            path = get_config_dir()
        assert path == isolated_config / "home" / ".config" / "cmdref"

    def test_fallback_on_non_xdg(self, isolated_config: Path) -> None:
        home = isolated_config / "home"
        with patch("cmdref.config._is_xdg_platform", return_value=False), patch(
            "cmdref.config.Path.home", return_value=home
        ):
            assert get_config_dir() == home / ".cmdref"
            assert get_session_path() == home / ".cmdref" / "session.json"

    def test_session_path_in_config_dir(self, isolated_config: Path) -> None:
        with patch("cmdref.config._is_xdg_platform", return_value=True):
            assert get_session_path() == isolated_config / "config" / "cmdref" / "session.json"


# ---------------------------------------------------------------------------
# Settings resolution
# ---------------------------------------------------------------------------


class TestResolveSettings:
    def test_defaults(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("SHELL", raising=False)
        settings = resolve_settings()
        assert settings.api_base == DEFAULT_API_BASE
        assert settings.authorization_url == DEFAULT_AUTHORIZATION_URL
        assert settings.login_timeout == DEFAULT_LOGIN_TIMEOUT
        assert settings.scopes == ["openid", "email", "profile"]
        assert settings.shell == "/bin/sh"

    def test_env_overrides(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CMDREF_API_BASE", "https://api.cmdref.dev/")
        monkeypatch.setenv("CMDREF_GOOGLE_CLIENT_ID", "abc.apps.googleusercontent.com")
        monkeypatch.setenv("CMDREF_AUTH_URL", "https://idp.test/auth")
        monkeypatch.setenv("CMDREF_LOGIN_TIMEOUT", "30")
        settings = resolve_settings()
        assert settings.api_base == "https://api.cmdref.dev"
        assert settings.client_id == "abc.apps.googleusercontent.com"
        assert settings.authorization_url == "https://idp.test/auth"
        assert settings.login_timeout == 30.0

    def test_cli_beats_env(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CMDREF_API_BASE", "http://env.test")
        monkeypatch.setenv("CMDREF_LOGIN_TIMEOUT", "30")
        settings = resolve_settings(cli_api_base="http://flag.test", cli_login_timeout=5)
        assert settings.api_base == "http://flag.test"
        assert settings.login_timeout == 5

    def test_shell_precedence(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SHELL", "/bin/bash")
        assert resolve_settings().shell == "/bin/bash"
        monkeypatch.setenv("CMDREF_SHELL", "/bin/zsh")
        assert resolve_settings().shell == "/bin/zsh"

    @pytest.mark.parametrize("value", ["soon", "0", "-5"])
    def test_invalid_timeout(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch, value: str
    ) -> None:
        monkeypatch.setenv("CMDREF_LOGIN_TIMEOUT", value)
        with pytest.raises(ConfigError, match="Invalid configuration"):
            resolve_settings()
