"""Tests for nightframe.settings: app-settings.json loading."""

import json
from pathlib import Path
from typing import Any

import pytest

from nightframe.config import SecurityHeadersConfig
from nightframe.errors import ConfigurationError
from nightframe.settings import (
    config_from_mapping,
    deep_merge,
    interpolate,
    load_settings,
    resolve_environment,
    snake_case,
)

SETTINGS = {
    "default": {
        "port": 3000,
        "app": {"name": "shop", "cookieSecret": "${COOKIE_SECRET}"},
        "e2eTestingMode": False,
        "featureFlags": {"beta": False, "search": True},
    },
    "test": {
        "e2eTestingMode": True,
        "featureFlags": {"beta": True},
    },
}


def _write(tmp_path: Path, data: Any) -> Path:
    path = tmp_path / "app-settings.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestLoadSettings:
    def test_default_environment(self, tmp_path: Path) -> None:
        cfg = load_settings(_write(tmp_path, SETTINGS), environ={})

        assert cfg.port == 3000
        assert cfg.app_name == "shop"
        assert cfg.e2e_testing_mode is False

    def test_named_environment_inherits_default(self, tmp_path: Path) -> None:
        cfg = load_settings(_write(tmp_path, SETTINGS), env="test", environ={})

        assert cfg.port == 3000
        assert cfg.e2e_testing_mode is True
        assert cfg.get("featureFlags") == {"beta": True, "search": True}

    def test_environment_from_variable(self, tmp_path: Path) -> None:
        cfg = load_settings(_write(tmp_path, SETTINGS), environ={"NIGHTFRAME_ENV": "test"})
        assert cfg.e2e_testing_mode is True

    def test_explicit_env_beats_variable(self, tmp_path: Path) -> None:
        cfg = load_settings(
            _write(tmp_path, SETTINGS), env="default", environ={"NIGHTFRAME_ENV": "test"}
        )
        assert cfg.e2e_testing_mode is False

    def test_interpolation(self, tmp_path: Path) -> None:
        cfg = load_settings(_write(tmp_path, SETTINGS), environ={"COOKIE_SECRET": "s3cret"})
        assert cfg.get("app")["cookieSecret"] == "s3cret"

    def test_missing_variable_is_empty(self, tmp_path: Path) -> None:
        cfg = load_settings(_write(tmp_path, SETTINGS), environ={})
        assert cfg.get("app")["cookieSecret"] == ""

    def test_default_path_is_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write(tmp_path, SETTINGS)
        monkeypatch.chdir(tmp_path)
        assert load_settings(environ={}).port == 3000

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="Missing application settings file"):
            load_settings(tmp_path / "nope.json", environ={})

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "app-settings.json"
        path.write_text("{oops", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Cannot read settings file"):
            load_settings(path, environ={})

    def test_not_an_object(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="JSON object"):
            load_settings(_write(tmp_path, [1, 2]), environ={})

    def test_unknown_environment(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="Available environments are: default, test"):
            load_settings(_write(tmp_path, SETTINGS), env="staging", environ={})

    def test_bad_port(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="Invalid port"):
            load_settings(_write(tmp_path, {"default": {"port": "http"}}), environ={})

    def test_interpolated_false_is_false(self, tmp_path: Path) -> None:
        path = _write(tmp_path, {"default": {"e2eTestingMode": "${E2E}", "debug": "${DEBUG}"}})
        cfg = load_settings(path, environ={"E2E": "false"})
        assert cfg.e2e_testing_mode is False
        assert cfg.debug is False

    def test_interpolated_true_is_true(self, tmp_path: Path) -> None:
        path = _write(tmp_path, {"default": {"e2eTestingMode": "${E2E}"}})
        assert load_settings(path, environ={"E2E": "true"}).e2e_testing_mode is True

    def test_bad_boolean(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="Invalid boolean for e2e_testing_mode"):
            load_settings(_write(tmp_path, {"default": {"e2eTestingMode": "maybe"}}), environ={})


class TestPortFallback:
    def test_port_variable_when_unset(self, tmp_path: Path) -> None:
        cfg = load_settings(_write(tmp_path, {"default": {}}), environ={"PORT": "4000"})
        assert cfg.port == 4000

    @pytest.mark.parametrize("port", [None, 0, ""])
    def test_port_variable_when_empty(self, tmp_path: Path, port: Any) -> None:
        path = _write(tmp_path, {"default": {"port": port}})
        assert load_settings(path, environ={"PORT": "4000"}).port == 4000

    def test_settings_port_wins(self, tmp_path: Path) -> None:
        path = _write(tmp_path, {"default": {"port": 3000}})
        assert load_settings(path, environ={"PORT": "4000"}).port == 3000

    def test_default_without_either(self, tmp_path: Path) -> None:
        assert load_settings(_write(tmp_path, {"default": {}}), environ={}).port == 8000

    def test_bad_port_variable(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="Invalid port"):
            load_settings(_write(tmp_path, {"default": {}}), environ={"PORT": "pipe"})


class TestLoggingAndSecuritySettings:
    def test_log_file_section(self) -> None:
        cfg = config_from_mapping({"logging": {"file": {"enable": True, "folder": "/var/log/app"}}})
        assert cfg.log_files == "all"
        assert cfg.log_folder == "/var/log/app"
        assert cfg.get("logging") == {"file": {"enable": True, "folder": "/var/log/app"}}

    def test_log_file_errors_only(self) -> None:
        cfg = config_from_mapping({"logging": {"file": {"enabled": "ERROR"}}})
        assert cfg.log_files == "error"

    def test_log_file_disabled(self) -> None:
        cfg = config_from_mapping({"logging": {"file": {"enable": False, "folder": None}}})
        assert cfg.log_files == "off"
        assert cfg.log_folder == "logs"

    def test_bad_log_file_mode(self) -> None:
        with pytest.raises(ConfigurationError, match="Invalid boolean for log_files"):
            config_from_mapping({"logFiles": "sometimes"})

    def test_security_headers_disabled(self) -> None:
        assert config_from_mapping({"securityHeaders": False}).security_headers is None

    def test_security_headers_override(self) -> None:
        cfg = config_from_mapping({"securityHeaders": {"xFrameOptions": "DENY"}})
        assert cfg.security_headers == SecurityHeadersConfig(x_frame_options="DENY")

    def test_security_headers_unknown_key(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown security header settings: csp"):
            config_from_mapping({"securityHeaders": {"csp": "default-src 'self'"}})


class TestHelpers:
    def test_snake_case(self) -> None:
        assert snake_case("e2eTestingMode") == "e2e_testing_mode"
        assert snake_case("routesDir") == "routes_dir"
        assert snake_case("log_level") == "log_level"

    def test_deep_merge_does_not_mutate(self) -> None:
        base = {"a": {"b": 1, "c": 2}}
        merged = deep_merge(base, {"a": {"c": 3}, "d": 4})
        assert merged == {"a": {"b": 1, "c": 3}, "d": 4}
        assert base == {"a": {"b": 1, "c": 2}}

    def test_deep_merge_replaces_lists(self) -> None:
        assert deep_merge({"a": [1, 2]}, {"a": [3]}) == {"a": [3]}

    def test_interpolate_nested(self) -> None:
        value = {"x": ["${A}-${B}", 3], "y": {"z": "${A}"}}
        assert interpolate(value, {"A": "1"}) == {"x": ["1-", 3], "y": {"z": "1"}}

    def test_resolve_default_only(self) -> None:
        assert resolve_environment({"default": {"a": 1}}, "default") == {"a": 1}

    def test_config_from_mapping(self) -> None:
        cfg = config_from_mapping(
            {"routesDir": "controllers", "reloadDirs": ["src"], "custom": 1, "port": "8080"}
        )
        assert cfg.routes_dir == "controllers"
        assert cfg.reload_dirs == ("src",)
        assert cfg.port == 8080
        assert cfg.get("custom") == 1
        assert "routesDir" not in cfg.extra
