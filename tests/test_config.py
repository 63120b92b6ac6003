"""Tests for onoffice.config -- XDG paths, atomic writes, credential sources, precedence."""

from __future__ import annotations

import json
import os
import stat
from pathlib import Path
from typing import Any

import pytest

from onoffice.config import (
    _atomic_write,
    default_config_path,
    get_config_dir,
    load_config_file,
    resolve_config,
    resolve_credential,
    save_config_file,
)
from onoffice.exceptions import ConfigError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_json(path: Path, data: Any) -> None:
    """Write *data* as JSON to *path*, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------


class TestPaths:

    def test_config_dir_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        custom = tmp_path / "custom_config"
        monkeypatch.setattr("onoffice.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(custom))

        result = get_config_dir()
        assert result == custom / "onoffice"
        assert result.is_dir()

    def test_config_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("onoffice.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_config_dir() == tmp_path / ".config" / "onoffice"

    def test_config_dir_non_xdg(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("onoffice.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_config_dir() == tmp_path / ".onoffice"

    def test_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        target = tmp_path / "elsewhere.json"
        monkeypatch.setenv("ONOFFICE_CONFIG", str(target))
        assert default_config_path() == target


# ---------------------------------------------------------------------------
# Atomic writes and the config file
# ---------------------------------------------------------------------------


class TestConfigFile:

    def test_atomic_write_creates_private_file(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "config.json"
        _atomic_write(path, "{}")
        assert path.read_text() == "{}"
        assert stat.S_IMODE(os.stat(path).st_mode) == 0o600
        assert [p.name for p in path.parent.iterdir()] == ["config.json"]

    def test_missing_default_file_is_empty(self) -> None:
        assert load_config_file() == {}

    def test_missing_explicit_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_config_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{nope")
        with pytest.raises(ConfigError, match="Invalid config"):
            load_config_file(path)

    def test_non_object(self, tmp_path: Path) -> None:
        path = tmp_path / "list.json"
        _write_json(path, [1, 2])
        with pytest.raises(ConfigError, match="JSON object"):
            load_config_file(path)

    def test_save_then_load(self, tmp_path: Path) -> None:
        path = tmp_path / "cfg.json"
        written = save_config_file({"token": "t", "cache": {"enabled": True}}, path)
        assert written == path
        assert load_config_file(path) == {"token": "t", "cache": {"enabled": True}}

    def test_save_default_location(self) -> None:
        written = save_config_file({"token": "t"})
        assert written == default_config_path()
        assert load_config_file() == {"token": "t"}


# ---------------------------------------------------------------------------
# Credential sources
# ---------------------------------------------------------------------------


class TestResolveCredential:

    def test_literal(self) -> None:
        assert resolve_credential("abc") == "abc"

    def test_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MY_SECRET", "from-env")
        assert resolve_credential("env:MY_SECRET") == "from-env"

    def test_env_missing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("MY_SECRET", raising=False)
        with pytest.raises(ConfigError, match="MY_SECRET"):
            resolve_credential("env:MY_SECRET")

    def test_file(self, tmp_path: Path) -> None:
        path = tmp_path / "secret.txt"
        path.write_text("  from-file\n")
        assert resolve_credential(f"file:{path}") == "from-file"

    def test_file_missing(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            resolve_credential(f"file:{tmp_path / 'nope'}")


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------


class TestResolveConfig:

    def test_missing_token(self) -> None:
        with pytest.raises(ConfigError, match="token"):
            resolve_config(secret="s")

    def test_missing_secret(self) -> None:
        with pytest.raises(ConfigError, match="secret"):
            resolve_config(token="t")

    def test_arguments_only(self) -> None:
        cfg = resolve_config(token="t", secret="s")
        assert cfg.token == "t"
        assert cfg.secret == "s"
        assert cfg.api_version == "stable"
        assert cfg.cache.enabled is False

    def test_file_values(self, tmp_path: Path) -> None:
        path = tmp_path / "cfg.json"
        _write_json(
            path,
            {
                "token": "file-token",
                "secret": "file-secret",
                "api_version": "latest",
                "cache": {"enabled": True, "expiration_seconds": 30},
            },
        )
        cfg = resolve_config(config_path=path)
        assert cfg.token == "file-token"
        assert cfg.api_version == "latest"
        assert cfg.cache.enabled is True
        assert cfg.cache.expiration_seconds == 30

    def test_env_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "cfg.json"
        _write_json(path, {"token": "file-token", "secret": "file-secret"})
        monkeypatch.setenv("ONOFFICE_TOKEN", "env-token")
        monkeypatch.setenv("ONOFFICE_CACHE_ENABLED", "yes")
        monkeypatch.setenv("ONOFFICE_CACHE_EXPIRATION", "90")

        cfg = resolve_config(config_path=path)
        assert cfg.token == "env-token"
        assert cfg.secret == "file-secret"
        assert cfg.cache.enabled is True
        assert cfg.cache.expiration_seconds == 90

    def test_arguments_override_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ONOFFICE_TOKEN", "env-token")
        monkeypatch.setenv("ONOFFICE_SECRET", "env-secret")
        monkeypatch.setenv("ONOFFICE_CACHE_ENABLED", "true")

        cfg = resolve_config(token="arg-token", cache_enabled=False, api_url="http://x/api.php")
        assert cfg.token == "arg-token"
        assert cfg.secret == "env-secret"
        assert cfg.cache.enabled is False
        assert cfg.endpoint_url == "http://x/api.php"

    def test_credential_sources_in_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        secret_file = tmp_path / "secret"
        secret_file.write_text("s3cr3t\n")
        monkeypatch.setenv("OO_TOKEN", "tok")
        path = tmp_path / "cfg.json"
        _write_json(path, {"token": "env:OO_TOKEN", "secret": f"file:{secret_file}"})

        cfg = resolve_config(config_path=path)
        assert cfg.token == "tok"
        assert cfg.secret == "s3cr3t"

    def test_bad_bool_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ONOFFICE_CACHE_ENABLED", "maybe")
        with pytest.raises(ConfigError, match="boolean"):
            resolve_config(token="t", secret="s")

    def test_bad_int_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ONOFFICE_CACHE_EXPIRATION", "soon")
        with pytest.raises(ConfigError, match="integer"):
            resolve_config(token="t", secret="s")

    def test_validation_error(self) -> None:
        with pytest.raises(ConfigError, match="Invalid configuration"):
            resolve_config(token="t", secret="s", api_version="beta")
