"""Resolve a build plan from the project inputs.

Inputs come from up to three layers, highest precedence first:

- command-line overrides
- ``local.properties`` written by ``flutter build``
- the project file ``apkcfg.toml``

The build clock is read once per invocation. ``SOURCE_DATE_EPOCH`` pins it
for reproducible builds.
"""

from __future__ import annotations

import json
import os
import shlex
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TypeVar
from enum import StrEnum
from pathlib import Path

from apkcfg.core.config import CONFIG_FILE_NAME, Config, load_config, load_config_or_default
from apkcfg.core.descriptor import (
    DEFAULT_APPLICATION_ID,
    BuildDescriptor,
    resolve,
    to_manifest_placeholders,
)
from apkcfg.core.errors import ConfigError
from apkcfg.core.properties import LOCAL_PROPERTIES_NAME, LocalProperties, load_local_properties
from apkcfg.core.result import Err, Ok, Result
from apkcfg.core.variants import DEFAULT_VARIANT, BuildVariant, get_variant, parse_language_level
from apkcfg.platform.files import atomic_write_text

__all__ = [
    "BuildPlan",
    "OutputFormat",
    "ResolveInputs",
    "ResolveOverrides",
    "SOURCE_DATE_EPOCH",
    "build_time",
    "load_inputs",
    "merge_inputs",
    "plan_build",
    "plan_to_dict",
    "render_plan",
    "resolve_descriptor",
    "write_plan",
]

SOURCE_DATE_EPOCH = "SOURCE_DATE_EPOCH"


class OutputFormat(StrEnum):
    PROPERTIES = "properties"
    JSON = "json"
    ENV = "env"


@dataclass(frozen=True, slots=True)
class ResolveOverrides:
    """Values given on the command line."""

    application_id: str | None = None
    version_name: str | None = None
    min_sdk: int | None = None
    target_sdk: int | None = None
    compile_sdk: int | None = None
    variant: str | None = None


@dataclass(frozen=True, slots=True)
class ResolveInputs:
    """Merged inputs, not yet validated."""

    application_id: str
    namespace: str | None
    version_name: str | None
    min_sdk: int | None
    target_sdk: int | None
    compile_sdk: int | None
    ndk_version: str | None
    variant: str
    flutter_source: str = "../.."
    language_level: int | None = None
    minify: bool | None = None
    shrink_rules: tuple[str, ...] | None = None


@dataclass(frozen=True, slots=True)
class BuildPlan:
    descriptor: BuildDescriptor
    placeholders: dict[str, str]
    variant: BuildVariant
    built_at: int
    ndk_version: str | None = None
    flutter_source: str = "../.."


T = TypeVar("T")


def _first(*values: T | None) -> T | None:
    for value in values:
        if value is not None:
            return value
    return None


def merge_inputs(
    config: Config,
    properties: LocalProperties | None = None,
    overrides: ResolveOverrides | None = None,
) -> ResolveInputs:
    props = properties or LocalProperties()
    cli = overrides or ResolveOverrides()

    return ResolveInputs(
        application_id=_first(cli.application_id, config.app.application_id)
        or DEFAULT_APPLICATION_ID,
        namespace=config.app.namespace,
        version_name=_first(cli.version_name, props.version_name, config.app.version_name),
        min_sdk=_first(cli.min_sdk, props.min_sdk, config.sdk.min),
        target_sdk=_first(cli.target_sdk, props.target_sdk, config.sdk.target),
        compile_sdk=_first(cli.compile_sdk, props.compile_sdk, config.sdk.compile),
        ndk_version=_first(props.ndk_version, config.sdk.ndk),
        variant=_first(cli.variant, config.variant.name) or DEFAULT_VARIANT,
        flutter_source=config.flutter.source,
        language_level=config.variant.language_level,
        minify=config.variant.minify,
        shrink_rules=config.variant.shrink_rules,
    )


def load_inputs(
    *,
    project_dir: Path,
    config_path: Path | None = None,
    properties_path: Path | None = None,
    overrides: ResolveOverrides | None = None,
) -> Result[ResolveInputs, ConfigError]:
    """Load the input layers and merge them.

    Files passed explicitly must exist. The defaults (``apkcfg.toml`` and
    ``local.properties`` in ``project_dir``) are skipped when absent.
    """
    if config_path is not None:
        config_result = load_config(config_path)
    else:
        config_result = load_config_or_default(project_dir / CONFIG_FILE_NAME)
    if isinstance(config_result, Err):
        return config_result

    properties: LocalProperties | None = None
    props_path = properties_path or project_dir / LOCAL_PROPERTIES_NAME
    if properties_path is not None or props_path.exists():
        props_result = load_local_properties(props_path)
        if isinstance(props_result, Err):
            return props_result
        properties = props_result.value

    return Ok(merge_inputs(config_result.value, properties, overrides))


def build_time(
    env: Mapping[str, str] | None = None,
    clock: Callable[[], float] = time.time,
) -> Result[int, ConfigError]:
    """Seconds since the epoch for this build."""
    environ = os.environ if env is None else env
    pinned = environ.get(SOURCE_DATE_EPOCH, "").strip()
    if not pinned:
        return Ok(int(clock()))

    try:
        value = int(pinned)
    except ValueError:
        value = -1
    if value < 0:
        return Err(
            ConfigError(
                kind="invalid_env",
                message=f"{SOURCE_DATE_EPOCH} must be a non-negative integer, got '{pinned}'",
                hint=f"Unset {SOURCE_DATE_EPOCH} to use the wall clock",
            )
        )
    return Ok(value)


def _missing(what: str, hint: str) -> Err[ConfigError]:
    return Err(ConfigError(kind="missing_input", message=f"{what} is not set", hint=hint))


def resolve_descriptor(inputs: ResolveInputs, now: int) -> Result[BuildDescriptor, ConfigError]:
    """Descriptor only; the variant settings are not consulted."""
    if inputs.version_name is None:
        return _missing("version name", "Set [app].version_name or pass --version-name")
    if inputs.min_sdk is None:
        return _missing("minimum SDK level", "Set [sdk].min or pass --min-sdk")
    if inputs.target_sdk is None:
        return _missing("target SDK level", "Set [sdk].target or pass --target-sdk")

    return resolve(
        now,
        inputs.version_name,
        inputs.min_sdk,
        inputs.target_sdk,
        application_id=inputs.application_id,
        compile_sdk=inputs.compile_sdk,
        namespace=inputs.namespace,
    )


def plan_build(inputs: ResolveInputs, now: int) -> Result[BuildPlan, ConfigError]:
    descriptor = resolve_descriptor(inputs, now)
    if isinstance(descriptor, Err):
        return descriptor

    variant_result = get_variant(inputs.variant)
    if isinstance(variant_result, Err):
        return variant_result
    variant = variant_result.value

    if inputs.language_level is not None:
        level = parse_language_level(inputs.language_level)
        if isinstance(level, Err):
            return level
        variant = variant.with_overrides(language_level=level.value)
    variant = variant.with_overrides(minify=inputs.minify, shrink_rules=inputs.shrink_rules)

    return Ok(
        BuildPlan(
            descriptor=descriptor.value,
            placeholders=to_manifest_placeholders(descriptor.value),
            variant=variant,
            built_at=now,
            ndk_version=inputs.ndk_version,
            flutter_source=inputs.flutter_source,
        )
    )


def plan_to_dict(plan: BuildPlan) -> dict[str, object]:
    d = plan.descriptor
    v = plan.variant
    out: dict[str, object] = {
        "applicationId": d.application_id,
        "namespace": d.namespace,
        "minSdkVersion": d.min_sdk,
        "targetSdkVersion": d.target_sdk,
        "compileSdkVersion": d.compile_sdk,
        "versionName": d.version_name,
        "versionCode": d.version_code,
        "variant": v.name,
        "sourceCompatibility": v.toolchain.source_compatibility,
        "targetCompatibility": v.toolchain.target_compatibility,
        "jvmTarget": v.toolchain.jvm_target,
        "signingConfig": v.signing_config,
        "minifyEnabled": v.minify_enabled,
        "manifestPlaceholders": dict(plan.placeholders),
        "builtAt": plan.built_at,
        "flutterSource": plan.flutter_source,
    }
    if plan.ndk_version:
        out["ndkVersion"] = plan.ndk_version
    if v.release_shrink_rules:
        out["proguardFiles"] = list(v.release_shrink_rules)
    return out


def _flatten(data: Mapping[str, object]) -> list[tuple[str, str]]:
    rows: list[tuple[str, str]] = []
    for key, value in data.items():
        if isinstance(value, dict):
            for sub_key, sub_value in value.items():
                rows.append((f"{key}.{sub_key}", str(sub_value)))
        elif isinstance(value, list):
            rows.append((key, ",".join(str(item) for item in value)))
        elif isinstance(value, bool):
            rows.append((key, "true" if value else "false"))
        else:
            rows.append((key, str(value)))
    return rows


def _env_name(key: str) -> str:
    # versionCode -> VERSION_CODE, manifestPlaceholders.APP_VERSION -> APP_VERSION
    leaf = key.rsplit(".", 1)[-1]
    if leaf.isupper():
        return f"APKCFG_{leaf}"
    chars = [f"_{c}" if c.isupper() else c.upper() for c in leaf]
    return "APKCFG_" + "".join(chars).lstrip("_")


def _escape_property(value: str) -> str:
    # Java properties: backslash first, then the key/value separators
    out = value.replace("\\", "\\\\")
    for ch in ("=", ":", "#", "!"):
        out = out.replace(ch, "\\" + ch)
    return out


def render_plan(plan: BuildPlan, fmt: OutputFormat = OutputFormat.PROPERTIES) -> str:
    data = plan_to_dict(plan)
    match fmt:
        case OutputFormat.JSON:
            return json.dumps(data, indent=2) + "\n"
        case OutputFormat.ENV:
            lines = [f"export {_env_name(k)}={shlex.quote(v)}" for k, v in _flatten(data)]
            return "\n".join(lines) + "\n"
        case _:
            lines = [f"{k}={_escape_property(v)}" for k, v in _flatten(data)]
            return "\n".join(lines) + "\n"


def write_plan(
    plan: BuildPlan, out: Path, fmt: OutputFormat = OutputFormat.PROPERTIES
) -> Result[Path, ConfigError]:
    try:
        atomic_write_text(out, render_plan(plan, fmt))
    except OSError as e:
        return Err(
            ConfigError(
                kind="io_failed",
                message=f"failed to write {out}: {e}",
                path=out,
                hint="--out must name a file in a writable directory",
            )
        )
    return Ok(out)
