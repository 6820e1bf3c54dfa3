"""Tests for apkcfg.core.config module."""

from __future__ import annotations

from pathlib import Path

import pytest

from apkcfg.core.config import Config, load_config, load_config_or_default
from apkcfg.core.result import Err, Ok

FULL_CONFIG = """
[app]
application_id = "com.example.salon"
namespace = "com.example"
version_name = "1.2.3"

[sdk]
min = 21
target = 34
compile = 35
ndk = "26.1.10909125"

[variant]
name = "compat"
language_level = 17
minify = true
shrink_rules = ["proguard-rules.pro"]

[flutter]
source = "../../app"
"""


class TestConfig:
    def test_defaults(self) -> None:
        config = Config()
        assert config.app.version_name is None
        assert config.sdk.min is None
        assert config.variant.name is None
        assert config.flutter.source == "../.."

    def test_from_dict_empty(self) -> None:
        assert Config.from_dict({}) == Config()

    def test_from_dict_partial(self) -> None:
        config = Config.from_dict({"sdk": {"min": 23}, "app": {"version_name": " 2.0.0 "}})
        assert config.sdk.min == 23
        assert config.sdk.target is None
        assert config.app.version_name == "2.0.0"

    def test_blank_string_is_unset(self) -> None:
        assert Config.from_dict({"app": {"version_name": "  "}}).app.version_name is None

    def test_frozen(self) -> None:
        config = Config()
        with pytest.raises(AttributeError):
            config.app = None  # type: ignore[misc, assignment]


class TestLoadConfig:
    def test_load_full(self, tmp_path: Path) -> None:
        path = tmp_path / "apkcfg.toml"
        path.write_text(FULL_CONFIG, encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Ok)
        config = result.value
        assert config.app.application_id == "com.example.salon"
        assert config.app.namespace == "com.example"
        assert config.sdk.compile == 35
        assert config.sdk.ndk == "26.1.10909125"
        assert config.variant.name == "compat"
        assert config.variant.language_level == 17
        assert config.variant.minify is True
        assert config.variant.shrink_rules == ("proguard-rules.pro",)
        assert config.flutter.source == "../../app"

    def test_missing_file(self, tmp_path: Path) -> None:
        path = tmp_path / "nope.toml"
        result = load_config(path)
        assert isinstance(result, Err)
        assert result.error.kind == "file_not_found"
        assert result.error.path == path

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "apkcfg.toml"
        path.write_text("[app\nversion_name = ", encoding="utf-8")
        result = load_config(path)
        assert isinstance(result, Err)
        assert result.error.kind == "invalid_file"
        assert "Invalid TOML syntax" in result.error.message

    def test_wrong_type(self, tmp_path: Path) -> None:
        path = tmp_path / "apkcfg.toml"
        path.write_text('[sdk]\nmin = "21"\n', encoding="utf-8")
        result = load_config(path)
        assert isinstance(result, Err)
        assert result.error.kind == "invalid_file"
        assert "'min' must be an integer" in result.error.message

    def test_bool_is_not_an_sdk_level(self, tmp_path: Path) -> None:
        path = tmp_path / "apkcfg.toml"
        path.write_text("[sdk]\ntarget = true\n", encoding="utf-8")
        assert isinstance(load_config(path), Err)

    def test_section_must_be_table(self, tmp_path: Path) -> None:
        path = tmp_path / "apkcfg.toml"
        path.write_text('app = "x"\n', encoding="utf-8")
        result = load_config(path)
        assert isinstance(result, Err)
        assert "'app' must be a table" in result.error.message

    def test_invalid_utf8(self, tmp_path: Path) -> None:
        path = tmp_path / "apkcfg.toml"
        path.write_bytes(b"\xff\xfe")
        result = load_config(path)
        assert isinstance(result, Err)
        assert result.error.kind == "invalid_file"

    def test_directory_is_io_error(self, tmp_path: Path) -> None:
        result = load_config(tmp_path)
        assert isinstance(result, Err)
        assert result.error.kind == "io_failed"
        assert result.error.path == tmp_path


class TestLoadConfigOrDefault:
    def test_missing_file_gives_default(self, tmp_path: Path) -> None:
        assert load_config_or_default(tmp_path / "apkcfg.toml") == Ok(Config())

    def test_broken_file_is_still_an_error(self, tmp_path: Path) -> None:
        path = tmp_path / "apkcfg.toml"
        path.write_text("not toml at all = = =", encoding="utf-8")
        assert isinstance(load_config_or_default(path), Err)
