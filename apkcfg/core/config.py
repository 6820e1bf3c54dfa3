"""Typed loading of the project file ``apkcfg.toml``.

Every key is optional; values that are absent here may still come from
``local.properties`` or the command line.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ConfigError
from .result import Err, Ok, Result
from .structured import (
    FieldTypeError,
    StrDict,
    as_str_dict,
    get_bool,
    get_int,
    get_str,
    get_str_list,
    get_table,
)

__all__ = [
    "AppConfig",
    "CONFIG_FILE_NAME",
    "Config",
    "FlutterConfig",
    "SdkConfig",
    "VariantConfig",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILE_NAME = "apkcfg.toml"


@dataclass(frozen=True, slots=True)
class AppConfig:
    application_id: str | None = None
    namespace: str | None = None
    version_name: str | None = None


@dataclass(frozen=True, slots=True)
class SdkConfig:
    """API levels and NDK pin."""

    min: int | None = None
    target: int | None = None
    compile: int | None = None
    ndk: str | None = None


@dataclass(frozen=True, slots=True)
class VariantConfig:
    """Variant selection plus per-project overrides of its settings."""

    name: str | None = None
    language_level: int | None = None
    minify: bool | None = None
    shrink_rules: tuple[str, ...] | None = None


@dataclass(frozen=True, slots=True)
class FlutterConfig:
    source: str = "../.."


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    app: AppConfig = field(default_factory=AppConfig)
    sdk: SdkConfig = field(default_factory=SdkConfig)
    variant: VariantConfig = field(default_factory=VariantConfig)
    flutter: FlutterConfig = field(default_factory=FlutterConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from parsed TOML.

        Raises:
            FieldTypeError: A key holds a value of the wrong type.
        """
        app: StrDict = get_table(data, "app") or {}
        sdk: StrDict = get_table(data, "sdk") or {}
        variant: StrDict = get_table(data, "variant") or {}
        flutter: StrDict = get_table(data, "flutter") or {}

        return cls(
            app=AppConfig(
                application_id=get_str(app, "application_id"),
                namespace=get_str(app, "namespace"),
                version_name=get_str(app, "version_name"),
            ),
            sdk=SdkConfig(
                min=get_int(sdk, "min"),
                target=get_int(sdk, "target"),
                compile=get_int(sdk, "compile"),
                ndk=get_str(sdk, "ndk"),
            ),
            variant=VariantConfig(
                name=get_str(variant, "name"),
                language_level=get_int(variant, "language_level"),
                minify=get_bool(variant, "minify"),
                shrink_rules=get_str_list(variant, "shrink_rules"),
            ),
            flutter=FlutterConfig(source=get_str(flutter, "source") or "../.."),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError("file_not_found", f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError("io_failed", f"Permission denied reading: {path}", path=path))
    except OSError as e:
        return Err(ConfigError("io_failed", f"Error reading {path}: {e}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError("invalid_file", f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError("invalid_file", f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("invalid_file", "Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse ``apkcfg.toml``.

    Args:
        path: Path to the config file

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except FieldTypeError as e:
        return Err(ConfigError("invalid_file", f"Invalid config: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Like load_config, but a missing file yields the default config."""
    if not path.exists():
        return Ok(Config())
    return load_config(path)
