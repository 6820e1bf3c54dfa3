"""Toolchain levels and build variants.

Two variants exist. ``compat`` compiles for Java 11 and ships release builds
unshrunk; ``hardened`` compiles for Java 17 and applies code-shrinking rules
on release builds. Both sign release builds with the debug signing config.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum

from .errors import ConfigError
from .result import Err, Ok, Result

__all__ = [
    "BuildVariant",
    "DEFAULT_SHRINK_RULES",
    "DEFAULT_VARIANT",
    "LanguageLevel",
    "ToolchainConfig",
    "available_variants",
    "get_variant",
    "parse_language_level",
]


class LanguageLevel(IntEnum):
    JAVA_11 = 11
    JAVA_17 = 17

    @property
    def java_version(self) -> str:
        """Gradle ``JavaVersion`` constant name."""
        return f"VERSION_{self.value}"

    @property
    def jvm_target(self) -> str:
        return str(self.value)


def parse_language_level(value: int) -> Result[LanguageLevel, ConfigError]:
    try:
        return Ok(LanguageLevel(value))
    except ValueError:
        allowed = ", ".join(str(level.value) for level in LanguageLevel)
        return Err(
            ConfigError(
                kind="invalid_input",
                message=f"unsupported language level: {value}",
                hint=f"Use one of: {allowed}",
            )
        )


@dataclass(frozen=True, slots=True)
class ToolchainConfig:
    """Source/target compatibility pin."""

    language_level: LanguageLevel

    @property
    def source_compatibility(self) -> str:
        return self.language_level.java_version

    @property
    def target_compatibility(self) -> str:
        return self.language_level.java_version

    @property
    def jvm_target(self) -> str:
        return self.language_level.jvm_target


DEFAULT_SHRINK_RULES = ("proguard-android-optimize.txt", "proguard-rules.pro")


@dataclass(frozen=True, slots=True)
class BuildVariant:
    name: str
    toolchain: ToolchainConfig
    minify_enabled: bool = False
    shrink_rules: tuple[str, ...] = ()
    signing_config: str = "debug"

    @property
    def release_shrink_rules(self) -> tuple[str, ...]:
        """Rule files handed to release packaging (none when minify is off)."""
        if not self.minify_enabled:
            return ()
        return self.shrink_rules

    def with_overrides(
        self,
        *,
        language_level: LanguageLevel | None = None,
        minify: bool | None = None,
        shrink_rules: tuple[str, ...] | None = None,
    ) -> BuildVariant:
        variant = self
        if language_level is not None:
            variant = replace(variant, toolchain=ToolchainConfig(language_level))
        if minify is not None:
            variant = replace(variant, minify_enabled=minify)
        if shrink_rules is not None:
            variant = replace(variant, shrink_rules=shrink_rules)
        return variant


_VARIANTS: dict[str, BuildVariant] = {
    "compat": BuildVariant(
        name="compat",
        toolchain=ToolchainConfig(LanguageLevel.JAVA_11),
    ),
    "hardened": BuildVariant(
        name="hardened",
        toolchain=ToolchainConfig(LanguageLevel.JAVA_17),
        minify_enabled=True,
        shrink_rules=DEFAULT_SHRINK_RULES,
    ),
}

DEFAULT_VARIANT = "hardened"


def available_variants() -> tuple[str, ...]:
    return tuple(sorted(_VARIANTS))


def get_variant(name: str) -> Result[BuildVariant, ConfigError]:
    variant = _VARIANTS.get(name.strip().lower())
    if variant is None:
        return Err(
            ConfigError(
                kind="unknown_variant",
                message=f"unknown variant: {name}",
                hint=f"Available: {', '.join(available_variants())}",
            )
        )
    return Ok(variant)
