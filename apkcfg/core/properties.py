"""Reader for the Flutter-generated ``local.properties``.

``flutter build`` records the SDK path, the version from ``pubspec.yaml`` and
optionally the API levels here. Only the keys below are interpreted; anything
else (``sdk.dir``, ``flutter.buildMode``, ...) is kept in ``extra``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .errors import ConfigError
from .result import Err, Ok, Result

__all__ = [
    "LOCAL_PROPERTIES_NAME",
    "LocalProperties",
    "load_local_properties",
    "parse_properties",
]

LOCAL_PROPERTIES_NAME = "local.properties"

_INT_KEYS = {
    "flutter.versionCode": "version_code",
    "flutter.minSdkVersion": "min_sdk",
    "flutter.targetSdkVersion": "target_sdk",
    "flutter.compileSdkVersion": "compile_sdk",
}
_STR_KEYS = {
    "flutter.versionName": "version_name",
    "flutter.ndkVersion": "ndk_version",
    "flutter.sdk": "flutter_sdk",
}


def _empty_extra() -> dict[str, str]:
    return {}


@dataclass(frozen=True, slots=True)
class LocalProperties:
    version_name: str | None = None
    # Informational only; the resolver always derives the code from build time.
    version_code: int | None = None
    min_sdk: int | None = None
    target_sdk: int | None = None
    compile_sdk: int | None = None
    ndk_version: str | None = None
    flutter_sdk: str | None = None
    extra: dict[str, str] = field(default_factory=_empty_extra)


def _unescape(value: str) -> str:
    # Windows paths are written as C\:\\src\\flutter
    out: list[str] = []
    chars = iter(value)
    for ch in chars:
        if ch == "\\":
            out.append(next(chars, ""))
        else:
            out.append(ch)
    return "".join(out)


def _continues(line: str) -> bool:
    trailing = len(line) - len(line.rstrip("\\"))
    return trailing % 2 == 1


def _logical_lines(text: str) -> list[str]:
    """Join lines ending in an unescaped backslash with the next one."""
    lines: list[str] = []
    pending = ""
    for raw in text.splitlines():
        part = raw.lstrip() if pending else raw
        if not pending and part.strip().startswith(("#", "!")):
            lines.append(part)
            continue
        if _continues(part):
            pending += part[:-1]
            continue
        lines.append(pending + part)
        pending = ""
    if pending:
        lines.append(pending)
    return lines


def parse_properties(text: str) -> dict[str, str]:
    """Parse ``key=value`` lines (``key: value`` also accepted)."""
    out: dict[str, str] = {}
    for raw in _logical_lines(text):
        line = raw.strip()
        if not line or line.startswith(("#", "!")):
            continue
        sep = min((i for i in (line.find("="), line.find(":")) if i >= 0), default=-1)
        if sep < 0:
            out[line] = ""
            continue
        key = line[:sep].strip()
        out[key] = _unescape(line[sep + 1 :].strip())
    return out


def load_local_properties(path: Path) -> Result[LocalProperties, ConfigError]:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Err(ConfigError("file_not_found", f"Properties file not found: {path}", path=path))
    except (OSError, UnicodeDecodeError) as e:
        return Err(ConfigError("io_failed", f"Error reading {path.name}: {e}", path=path))

    raw = parse_properties(text)
    values: dict[str, object] = {}
    extra: dict[str, str] = {}

    for key, value in raw.items():
        if key in _INT_KEYS:
            try:
                values[_INT_KEYS[key]] = int(value)
            except ValueError:
                return Err(
                    ConfigError(
                        "invalid_file",
                        f"{key} must be an integer, got '{value}'",
                        path=path,
                    )
                )
        elif key in _STR_KEYS:
            values[_STR_KEYS[key]] = value or None
        else:
            extra[key] = value

    return Ok(LocalProperties(**values, extra=extra))  # type: ignore[arg-type]
