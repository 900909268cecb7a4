"""Tests for skyclient.config -- paths, atomic writes, presets, precedence."""

from __future__ import annotations

import json
import os
import stat
from pathlib import Path
from unittest.mock import patch

import pytest

from skyclient.config import (
    DEFAULT_PRESET,
    PRESETS,
    atomic_write,
    config_file_path,
    get_home_dir,
    get_logs_dir,
    get_workspace_dir,
    list_presets,
    load_config_file,
    resolve_settings,
)
from skyclient.exceptions import ConfigError


def _write_config(home: Path, data) -> None:
    home.mkdir(parents=True, exist_ok=True)
    config_file_path(home).write_text(json.dumps(data))


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------


class TestPaths:
    def test_home_from_env(self, isolated_home: Path) -> None:
        assert get_home_dir() == isolated_home

    def test_home_default(self, monkeypatch, tmp_path: Path) -> None:
        monkeypatch.delenv("SKYCLIENT_HOME", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        assert get_home_dir() == tmp_path / ".skyclient"

    def test_workspace_default(self, monkeypatch, tmp_path: Path) -> None:
        monkeypatch.delenv("SKYCLIENT_WORKSPACE", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        assert get_workspace_dir() == tmp_path / "autrikos"

    def test_home_not_created(self, isolated_home: Path) -> None:
        get_home_dir()
        assert not isolated_home.exists()

    def test_logs_dir_created(self, isolated_home: Path) -> None:
        logs = get_logs_dir()
        assert logs == isolated_home / "logs"
        assert logs.is_dir()


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    def test_writes_content(self, tmp_path: Path) -> None:
        path = tmp_path / "sub" / "file.txt"
        atomic_write(path, "hello\n")
        assert path.read_text() == "hello\n"

    def test_mode_applied(self, tmp_path: Path) -> None:
        path = tmp_path / "secret"
        atomic_write(path, "s", mode=0o600)
        assert stat.S_IMODE(os.stat(path).st_mode) == 0o600

    def test_replace_failure_leaves_original_and_no_temp(self, tmp_path: Path) -> None:
        path = tmp_path / "file.txt"
        path.write_text("original")
        with patch("skyclient.config.os.replace", side_effect=OSError("boom")):
            with pytest.raises(OSError):
                atomic_write(path, "new")
        assert path.read_text() == "original"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["file.txt"]


# ---------------------------------------------------------------------------
# Config file
# ---------------------------------------------------------------------------


class TestConfigFile:
    def test_missing_returns_none(self, isolated_home: Path) -> None:
        assert load_config_file() is None

    def test_loads_object(self, isolated_home: Path) -> None:
        _write_config(isolated_home, {"timeout": 5})
        assert load_config_file() == {"timeout": 5}

    def test_invalid_json(self, isolated_home: Path) -> None:
        isolated_home.mkdir()
        config_file_path(isolated_home).write_text("{oops")
        with pytest.raises(ConfigError, match="Invalid config file"):
            load_config_file()

    def test_non_object(self, isolated_home: Path) -> None:
        _write_config(isolated_home, ["a"])
        with pytest.raises(ConfigError, match="expected a JSON object"):
            load_config_file()


# ---------------------------------------------------------------------------
# Presets and precedence
# ---------------------------------------------------------------------------


class TestPresets:
    def test_list_presets(self) -> None:
        assert list_presets() == ["default", "local"]

    def test_default_preset_exists(self) -> None:
        assert DEFAULT_PRESET in PRESETS

    def test_default_targets_hosted_kratos(self) -> None:
        assert PRESETS["default"]["kratos_url"] == "https://autrik.com/api/.ory/kratos/public"

    def test_local_targets_loopback(self) -> None:
        assert PRESETS["local"]["kratos_url"].startswith("http://127.0.0.1")


class TestResolveSettings:
    def test_defaults(self, isolated_home: Path) -> None:
        settings = resolve_settings()
        assert settings.preset == "default"
        assert settings.kratos_url == PRESETS["default"]["kratos_url"]
        assert settings.home_dir == isolated_home
        assert settings.session_path == isolated_home / "token"
        assert settings.tokenize_template == "jwks_template_7days"
        assert settings.timeout == 30.0

    def test_config_file_overrides_preset(self, isolated_home: Path) -> None:
        _write_config(isolated_home, {"kratos_url": "https://file.test", "timeout": 5})
        settings = resolve_settings()
        assert settings.kratos_url == "https://file.test"
        assert settings.timeout == 5

    def test_config_file_selects_preset(self, isolated_home: Path) -> None:
        _write_config(isolated_home, {"preset": "local"})
        assert resolve_settings().preset == "local"

    def test_env_overrides_config_file(self, isolated_home: Path, monkeypatch) -> None:
        _write_config(isolated_home, {"kratos_url": "https://file.test"})
        monkeypatch.setenv("SKYCLIENT_KRATOS_URL", "https://env.test")
        assert resolve_settings().kratos_url == "https://env.test"

    def test_env_preset(self, isolated_home: Path, monkeypatch) -> None:
        monkeypatch.setenv("SKYCLIENT_PRESET", "local")
        assert resolve_settings().kratos_url == PRESETS["local"]["kratos_url"]

    def test_cli_overrides_env(self, isolated_home: Path, monkeypatch) -> None:
        monkeypatch.setenv("SKYCLIENT_KRATOS_URL", "https://env.test")
        monkeypatch.setenv("SKYCLIENT_PRESET", "local")
        settings = resolve_settings(cli_preset="default", cli_kratos_url="https://cli.test/")
        assert settings.preset == "default"
        assert settings.kratos_url == "https://cli.test"

    def test_token_file_env(self, isolated_home: Path, monkeypatch, tmp_path: Path) -> None:
        monkeypatch.setenv("SKYCLIENT_TOKEN_FILE", str(tmp_path / "elsewhere"))
        assert resolve_settings().session_path == tmp_path / "elsewhere"

    def test_token_file_in_config_expands_user(
        self, isolated_home: Path, monkeypatch, tmp_path: Path
    ) -> None:
        monkeypatch.setenv("HOME", str(tmp_path / "user"))
        _write_config(isolated_home, {"token_file": "~/tok"})
        assert resolve_settings().session_path == tmp_path / "user" / "tok"

    @pytest.mark.parametrize("value", [["local"], 3, {"name": "local"}])
    def test_non_string_preset_in_config(self, isolated_home: Path, value) -> None:
        _write_config(isolated_home, {"preset": value})
        with pytest.raises(ConfigError, match="'preset' must be a string"):
            resolve_settings()

    def test_unknown_preset(self, isolated_home: Path) -> None:
        with pytest.raises(ConfigError, match="Unknown preset 'staging'"):
            resolve_settings(cli_preset="staging")

    def test_unknown_config_key(self, isolated_home: Path) -> None:
        _write_config(isolated_home, {"kratos": "typo"})
        with pytest.raises(ConfigError, match="Invalid settings"):
            resolve_settings()

    def test_empty_url_rejected(self, isolated_home: Path) -> None:
        with pytest.raises(ConfigError):
            resolve_settings(cli_kratos_url="  ")
