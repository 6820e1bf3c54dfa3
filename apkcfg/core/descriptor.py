"""Build descriptor resolution.

A build descriptor is the set of values the packaging step needs for one
build: application id, SDK levels, version name and a version code derived
from the build time. It is recomputed on every invocation and never persisted.

The version code is ``epoch_seconds % 2_000_000_000``. It stays inside the
positive range accepted by the platform and grows with wall-clock time;
two builds collide only when started in the same second modulo 2e9.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from .errors import ConfigError
from .result import Err, Ok, Result

__all__ = [
    "APP_VERSION",
    "BUILD_NUMBER",
    "BuildDescriptor",
    "DEFAULT_APPLICATION_ID",
    "VERSION_CODE_LIMIT",
    "resolve",
    "to_manifest_placeholders",
    "version_code_for",
]

DEFAULT_APPLICATION_ID = "com.fede22dev.beauty_center"
VERSION_CODE_LIMIT = 2_000_000_000

# Manifest placeholder keys
APP_VERSION = "APP_VERSION"
BUILD_NUMBER = "BUILD_NUMBER"


@dataclass(frozen=True, slots=True)
class BuildDescriptor:
    application_id: str
    namespace: str
    min_sdk: int
    target_sdk: int
    compile_sdk: int
    version_name: str
    version_code: int


def version_code_for(epoch_seconds: float) -> int:
    """Version code for a build started at ``epoch_seconds``."""
    return int(epoch_seconds) % VERSION_CODE_LIMIT


def resolve(
    now: float,
    version_name: str,
    min_sdk: int,
    target_sdk: int,
    *,
    application_id: str = DEFAULT_APPLICATION_ID,
    compile_sdk: int | None = None,
    namespace: str | None = None,
) -> Result[BuildDescriptor, ConfigError]:
    """Compute the build descriptor for a build started at ``now``.

    Args:
        now: Build time in seconds since the epoch. Fractions are truncated.
        version_name: User-visible version string (e.g. "1.2.3").
        min_sdk: Minimum platform API level.
        target_sdk: Target platform API level.
        application_id: Package identifier.
        compile_sdk: Compile API level; defaults to ``target_sdk``.
        namespace: Code namespace; defaults to ``application_id``.

    Returns:
        Ok(BuildDescriptor), or Err(ConfigError) for an empty version name
        or application id, a negative SDK level or a negative or non-finite
        timestamp.
    """
    name = version_name.strip()
    if not name:
        return Err(
            ConfigError(
                kind="missing_input",
                message="version name is empty",
                hint="Set [app].version_name, flutter.versionName or --version-name",
            )
        )

    app_id = application_id.strip()
    if not app_id:
        return Err(ConfigError(kind="missing_input", message="application id is empty"))

    compile_level = target_sdk if compile_sdk is None else compile_sdk
    for label, level in (
        ("min_sdk", min_sdk),
        ("target_sdk", target_sdk),
        ("compile_sdk", compile_level),
    ):
        if level < 0:
            return Err(
                ConfigError(
                    kind="invalid_input",
                    message=f"{label} must be a non-negative API level, got {level}",
                )
            )

    # nan and inf have no integer part
    if isinstance(now, float) and not math.isfinite(now):
        return Err(
            ConfigError(kind="invalid_input", message=f"build time must be finite, got {now}")
        )
    if now < 0:
        return Err(
            ConfigError(
                kind="invalid_input",
                message=f"build time must not be before the epoch, got {now}",
            )
        )

    return Ok(
        BuildDescriptor(
            application_id=app_id,
            namespace=(namespace or "").strip() or app_id,
            min_sdk=min_sdk,
            target_sdk=target_sdk,
            compile_sdk=compile_level,
            version_name=name,
            version_code=version_code_for(now),
        )
    )


def to_manifest_placeholders(descriptor: BuildDescriptor) -> dict[str, str]:
    """Manifest placeholder values for ``descriptor``."""
    return {
        APP_VERSION: descriptor.version_name,
        BUILD_NUMBER: str(descriptor.version_code),
    }
