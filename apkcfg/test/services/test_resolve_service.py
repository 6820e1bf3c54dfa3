from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path

import pytest

from apkcfg.core.config import AppConfig, Config, SdkConfig, VariantConfig
from apkcfg.core.properties import LocalProperties, parse_properties
from apkcfg.core.result import Err, Ok
from apkcfg.services.resolve import (
    BuildPlan,
    OutputFormat,
    ResolveInputs,
    ResolveOverrides,
    build_time,
    load_inputs,
    merge_inputs,
    plan_build,
    plan_to_dict,
    render_plan,
    resolve_descriptor,
    write_plan,
)

NOW = 1_700_000_000


def _inputs(**kwargs: object) -> ResolveInputs:
    base = merge_inputs(
        Config(
            app=AppConfig(version_name="1.2.3"),
            sdk=SdkConfig(min=21, target=34),
        )
    )
    return replace(base, **kwargs)  # type: ignore[arg-type]


def _plan(**kwargs: object) -> BuildPlan:
    result = plan_build(_inputs(**kwargs), NOW)
    assert isinstance(result, Ok)
    return result.value


class TestMergeInputs:
    def test_defaults(self) -> None:
        inputs = merge_inputs(Config())
        assert inputs.application_id == "com.fede22dev.beauty_center"
        assert inputs.variant == "hardened"
        assert inputs.version_name is None

    def test_properties_override_config(self) -> None:
        inputs = merge_inputs(
            Config(app=AppConfig(version_name="1.0.0"), sdk=SdkConfig(min=21, ndk="25")),
            LocalProperties(version_name="1.1.0", min_sdk=23, ndk_version="26"),
        )
        assert inputs.version_name == "1.1.0"
        assert inputs.min_sdk == 23
        assert inputs.ndk_version == "26"

    def test_cli_overrides_everything(self) -> None:
        inputs = merge_inputs(
            Config(app=AppConfig(version_name="1.0.0"), variant=VariantConfig(name="compat")),
            LocalProperties(version_name="1.1.0"),
            ResolveOverrides(version_name="9.9.9", variant="hardened", target_sdk=35),
        )
        assert inputs.version_name == "9.9.9"
        assert inputs.variant == "hardened"
        assert inputs.target_sdk == 35

    def test_empty_cli_value_is_kept(self) -> None:
        inputs = merge_inputs(
            Config(app=AppConfig(version_name="1.0.0")),
            overrides=ResolveOverrides(version_name=""),
        )
        assert inputs.version_name == ""


class TestLoadInputs:
    def test_no_files(self, tmp_path: Path) -> None:
        result = load_inputs(project_dir=tmp_path)
        assert result == Ok(merge_inputs(Config()))

    def test_default_files_are_picked_up(self, tmp_path: Path) -> None:
        (tmp_path / "apkcfg.toml").write_text("[sdk]\nmin = 21\ntarget = 34\n", encoding="utf-8")
        (tmp_path / "local.properties").write_text("flutter.versionName=3.0.0\n", encoding="utf-8")

        inputs = load_inputs(project_dir=tmp_path).unwrap()

        assert inputs.version_name == "3.0.0"
        assert inputs.min_sdk == 21

    def test_explicit_missing_config(self, tmp_path: Path) -> None:
        result = load_inputs(project_dir=tmp_path, config_path=tmp_path / "other.toml")
        assert isinstance(result, Err)
        assert result.error.kind == "file_not_found"

    def test_explicit_missing_properties(self, tmp_path: Path) -> None:
        result = load_inputs(project_dir=tmp_path, properties_path=tmp_path / "x.properties")
        assert isinstance(result, Err)
        assert result.error.kind == "file_not_found"

    def test_broken_properties(self, tmp_path: Path) -> None:
        (tmp_path / "local.properties").write_text("flutter.targetSdkVersion=abc\n", encoding="utf-8")
        result = load_inputs(project_dir=tmp_path)
        assert isinstance(result, Err)
        assert result.error.kind == "invalid_file"


class TestBuildTime:
    def test_clock(self) -> None:
        assert build_time(env={}, clock=lambda: 1234.9) == Ok(1234)

    def test_source_date_epoch(self) -> None:
        assert build_time(env={"SOURCE_DATE_EPOCH": "1700000000"}, clock=lambda: 1) == Ok(NOW)

    def test_blank_source_date_epoch_uses_clock(self) -> None:
        assert build_time(env={"SOURCE_DATE_EPOCH": " "}, clock=lambda: 5) == Ok(5)

    @pytest.mark.parametrize("value", ["soon", "-5", "1.5"])
    def test_invalid_source_date_epoch(self, value: str) -> None:
        result = build_time(env={"SOURCE_DATE_EPOCH": value})
        assert isinstance(result, Err)
        assert result.error.kind == "invalid_env"

    def test_reads_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SOURCE_DATE_EPOCH", "42")
        assert build_time() == Ok(42)


class TestPlanBuild:
    def test_example(self) -> None:
        plan = _plan()
        assert plan.descriptor.version_code == NOW
        assert plan.placeholders == {"APP_VERSION": "1.2.3", "BUILD_NUMBER": "1700000000"}
        assert plan.variant.name == "hardened"
        assert plan.built_at == NOW

    @pytest.mark.parametrize(
        ("field", "message"),
        [
            ("version_name", "version name is not set"),
            ("min_sdk", "minimum SDK level is not set"),
            ("target_sdk", "target SDK level is not set"),
        ],
    )
    def test_missing_input(self, field: str, message: str) -> None:
        result = plan_build(_inputs(**{field: None}), NOW)
        assert isinstance(result, Err)
        assert result.error.kind == "missing_input"
        assert result.error.message == message

    def test_empty_version_name(self) -> None:
        result = plan_build(_inputs(version_name=""), 100)
        assert isinstance(result, Err)
        assert result.error.kind == "missing_input"

    def test_negative_sdk(self) -> None:
        result = plan_build(_inputs(min_sdk=-21), NOW)
        assert isinstance(result, Err)
        assert result.error.kind == "invalid_input"

    def test_unknown_variant(self) -> None:
        result = plan_build(_inputs(variant="nightly"), NOW)
        assert isinstance(result, Err)
        assert result.error.kind == "unknown_variant"

    def test_variant_overrides_from_config(self) -> None:
        plan = _plan(variant="compat", language_level=17, minify=True, shrink_rules=("a.pro",))
        assert plan.variant.toolchain.jvm_target == "17"
        assert plan.variant.release_shrink_rules == ("a.pro",)

    def test_unsupported_language_level(self) -> None:
        result = plan_build(_inputs(language_level=8), NOW)
        assert isinstance(result, Err)
        assert "unsupported language level" in result.error.message


class TestResolveDescriptor:
    def test_ignores_variant(self) -> None:
        result = resolve_descriptor(_inputs(variant="nightly", language_level=8), NOW)
        assert isinstance(result, Ok)
        assert result.value.version_code == NOW

    def test_missing_input(self) -> None:
        result = resolve_descriptor(_inputs(target_sdk=None), NOW)
        assert isinstance(result, Err)
        assert result.error.message == "target SDK level is not set"


class TestRender:
    def test_dict_hardened(self) -> None:
        data = plan_to_dict(_plan(ndk_version="26.1.10909125"))
        assert data["versionCode"] == NOW
        assert data["sourceCompatibility"] == "VERSION_17"
        assert data["jvmTarget"] == "17"
        assert data["proguardFiles"] == ["proguard-android-optimize.txt", "proguard-rules.pro"]
        assert data["ndkVersion"] == "26.1.10909125"
        assert data["manifestPlaceholders"] == {
            "APP_VERSION": "1.2.3",
            "BUILD_NUMBER": "1700000000",
        }

    def test_dict_compat_has_no_rules(self) -> None:
        data = plan_to_dict(_plan(variant="compat"))
        assert "proguardFiles" not in data
        assert "ndkVersion" not in data
        assert data["minifyEnabled"] is False
        assert data["targetCompatibility"] == "VERSION_11"
        assert data["flutterSource"] == "../.."

    def test_properties(self) -> None:
        lines = render_plan(_plan(), OutputFormat.PROPERTIES).splitlines()
        assert "versionCode=1700000000" in lines
        assert "minifyEnabled=true" in lines
        assert "manifestPlaceholders.BUILD_NUMBER=1700000000" in lines
        assert "proguardFiles=proguard-android-optimize.txt,proguard-rules.pro" in lines

    def test_json(self) -> None:
        data = json.loads(render_plan(_plan(), OutputFormat.JSON))
        assert data["applicationId"] == "com.fede22dev.beauty_center"
        assert data["manifestPlaceholders"]["APP_VERSION"] == "1.2.3"

    def test_env(self) -> None:
        lines = render_plan(_plan(version_name="1.2.3 beta"), OutputFormat.ENV).splitlines()
        assert "export APKCFG_VERSION_CODE=1700000000" in lines
        assert "export APKCFG_APPLICATION_ID=com.fede22dev.beauty_center" in lines
        assert "export APKCFG_APP_VERSION='1.2.3 beta'" in lines
        assert "export APKCFG_BUILD_NUMBER=1700000000" in lines

    def test_write_plan(self, tmp_path: Path) -> None:
        out = tmp_path / "build" / "apkcfg.properties"
        plan = _plan()
        assert write_plan(plan, out) == Ok(out)
        assert out.read_text(encoding="utf-8") == render_plan(plan)

    def test_write_plan_to_directory(self, tmp_path: Path) -> None:
        out = tmp_path / "build"
        out.mkdir()
        result = write_plan(_plan(), out)
        assert isinstance(result, Err)
        assert result.error.kind == "io_failed"
        assert result.error.path == out
        assert list(out.iterdir()) == []

    def test_properties_escaping(self) -> None:
        plan = _plan(flutter_source="C:\\app", version_name="1.2.3=rc#1")
        text = render_plan(plan, OutputFormat.PROPERTIES)
        lines = text.splitlines()
        assert "flutterSource=C\\:\\\\app" in lines
        assert "versionName=1.2.3\\=rc\\#1" in lines

        parsed = parse_properties(text)
        assert parsed["flutterSource"] == "C:\\app"
        assert parsed["versionName"] == "1.2.3=rc#1"
        assert parsed["manifestPlaceholders.APP_VERSION"] == "1.2.3=rc#1"
