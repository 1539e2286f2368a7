"""Tests for spectry.config -- XDG paths, atomic writes, config editing, precedence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from spectry.config import (
    atomic_write,
    get_config_dir,
    get_data_dir,
    load_global_config,
    load_project_config,
    reset_global_config,
    resolve_config,
    save_global_config,
    set_config_value,
)
from spectry.exceptions import ConfigError
from spectry.models import GlobalConfig, UIConfig


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_json(path: Path, data: Any) -> None:
    """Write a dict as JSON to *path*, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def _global_path(root: Path) -> Path:
    return root / "config" / "spectry" / "config.json"


# ---------------------------------------------------------------------------
# XDG path resolution
# ---------------------------------------------------------------------------


class TestXDGPathsLinux:
    """XDG paths on Linux (the default XDG platform)."""

    def test_config_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("spectry.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_config_dir()
        assert result == tmp_path / ".config" / "spectry"
        assert result.is_dir()

    def test_config_dir_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        custom = tmp_path / "custom_config"
        monkeypatch.setattr("spectry.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(custom))

        assert get_config_dir() == custom / "spectry"

    def test_data_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("spectry.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_DATA_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_data_dir() == tmp_path / ".local" / "share" / "spectry"


class TestFallbackPaths:
    """Non-XDG platforms keep everything under ~/.spectry."""

    def test_config_dir(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("spectry.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_config_dir() == tmp_path / ".spectry"

    def test_data_dir(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("spectry.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_data_dir()
        assert result == tmp_path / ".spectry" / "logs"
        assert result.is_dir()


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    def test_writes_content_and_creates_parents(self, tmp_path: Path) -> None:
        target = tmp_path / "nested" / "dir" / "file.json"
        atomic_write(target, '{"a": 1}\n')
        assert target.read_text(encoding="utf-8") == '{"a": 1}\n'

    def test_overwrites_existing_file(self, tmp_path: Path) -> None:
        target = tmp_path / "file.txt"
        target.write_text("old", encoding="utf-8")
        atomic_write(target, "new")
        assert target.read_text(encoding="utf-8") == "new"

    def test_line_endings_preserved(self, tmp_path: Path) -> None:
        target = tmp_path / "spec.yaml"
        atomic_write(target, "a: 1\r\nb: 2\r\n")
        assert target.read_bytes() == b"a: 1\r\nb: 2\r\n"

    def test_no_temp_files_left_behind(self, tmp_path: Path) -> None:
        atomic_write(tmp_path / "file.txt", "data")
        assert [p.name for p in tmp_path.iterdir()] == ["file.txt"]


# ---------------------------------------------------------------------------
# Global config
# ---------------------------------------------------------------------------


class TestGlobalConfig:
    def test_defaults_when_missing(self, isolated_config: Path) -> None:
        config = load_global_config()
        assert config == GlobalConfig()
        assert config.ui.theme == "system"
        assert config.ui.onboarding_completed is False

    def test_save_and_load(self, isolated_config: Path) -> None:
        config = GlobalConfig(default_server="http://localhost:8080", ui=UIConfig(theme="dark"))
        save_global_config(config)

        assert _global_path(isolated_config).is_file()
        assert load_global_config() == config

    def test_invalid_json(self, isolated_config: Path) -> None:
        path = _global_path(isolated_config)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()

    def test_invalid_value(self, isolated_config: Path) -> None:
        _write_json(_global_path(isolated_config), {"request": {"verify_ssl": "maybe"}})
        with pytest.raises(ConfigError):
            load_global_config()

    def test_reset(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(default_server="http://x"))
        assert reset_global_config() == GlobalConfig()
        assert load_global_config().default_server is None


class TestSetConfigValue:
    def test_string_value(self, isolated_config: Path) -> None:
        set_config_value("ui.theme", "dark")
        assert load_global_config().ui.theme == "dark"

    def test_boolean_value(self, isolated_config: Path) -> None:
        config = set_config_value("ui.menu_visible", "false")
        assert config.ui.menu_visible is False
        assert set_config_value("ui.onboarding_completed", "yes").ui.onboarding_completed is True

    def test_optional_number(self, isolated_config: Path) -> None:
        assert set_config_value("request.timeout", "2.5").request.timeout == 2.5
        assert set_config_value("request.timeout", "null").request.timeout is None

    def test_top_level_optional(self, isolated_config: Path) -> None:
        set_config_value("default_server", "http://localhost:8080/api/v3")
        assert load_global_config().default_server == "http://localhost:8080/api/v3"

    def test_unknown_key(self, isolated_config: Path) -> None:
        with pytest.raises(ConfigError, match="Unknown config key"):
            set_config_value("ui.colour", "red")

    def test_section_is_not_a_value(self, isolated_config: Path) -> None:
        with pytest.raises(ConfigError):
            set_config_value("ui", "dark")

    def test_missing_section(self, isolated_config: Path) -> None:
        with pytest.raises(ConfigError, match="Invalid config key"):
            set_config_value("nope.theme", "dark")

    def test_invalid_value_not_saved(self, isolated_config: Path) -> None:
        with pytest.raises(ConfigError):
            set_config_value("request.timeout", "soon")
        assert load_global_config().request.timeout is None


# ---------------------------------------------------------------------------
# Project config
# ---------------------------------------------------------------------------


class TestProjectConfig:
    def test_missing(self, isolated_config: Path) -> None:
        assert load_project_config() is None

    def test_loaded_from_cwd(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "spectry.json", {"default_server": "http://p"})
        assert load_project_config() == {"default_server": "http://p"}

    def test_invalid_json(self, isolated_config: Path) -> None:
        (isolated_config / "spectry.json").write_text("[oops", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid project config"):
            load_project_config()

    def test_not_an_object(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "spectry.json", ["a"])
        with pytest.raises(ConfigError, match="expected a JSON object"):
            load_project_config()


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------


class TestResolveConfig:
    def test_defaults(self, isolated_config: Path) -> None:
        assert resolve_config() == GlobalConfig()

    def test_project_overrides_user(self, isolated_config: Path) -> None:
        save_global_config(
            GlobalConfig(default_server="http://user", ui=UIConfig(theme="dark"))
        )
        _write_json(
            isolated_config / "spectry.json",
            {"default_server": "http://project", "request": {"timeout": 5}},
        )

        config = resolve_config()
        assert config.default_server == "http://project"
        assert config.request.timeout == 5.0
        assert config.request.verify_ssl is True
        assert config.ui.theme == "dark"

    def test_env_overrides_project(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _write_json(isolated_config / "spectry.json", {"default_server": "http://project"})
        monkeypatch.setenv("SPECTRY_SERVER", "http://env")
        monkeypatch.setenv("SPECTRY_TIMEOUT", "7")

        config = resolve_config()
        assert config.default_server == "http://env"
        assert config.request.timeout == 7.0

    def test_cli_overrides_env(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SPECTRY_SERVER", "http://env")
        monkeypatch.setenv("SPECTRY_TIMEOUT", "7")

        config = resolve_config(cli_server="http://cli", cli_timeout=1.5, cli_format="json")
        assert config.default_server == "http://cli"
        assert config.request.timeout == 1.5
        assert config.output.format == "json"

    def test_bad_env_timeout(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SPECTRY_TIMEOUT", "soon")
        with pytest.raises(ConfigError, match="SPECTRY_TIMEOUT"):
            resolve_config()

    def test_bad_project_value(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "spectry.json", {"request": {"follow_redirects": "sometimes"}})
        with pytest.raises(ConfigError, match="Invalid project config"):
            resolve_config()
