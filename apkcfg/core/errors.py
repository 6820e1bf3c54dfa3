"""Error values and exit codes.

``ConfigError`` is the single error payload of the resolver: every failed
input, unreadable file or unknown variant is reported as one. ``ErrorCode``
maps those failures to process exit codes, which should remain stable:
- 0: Success
- 1: User error (missing or invalid build input)
- 2: Environment error (unusable environment override)
- 5: I/O error (config file missing or unreadable)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Literal

__all__ = ["ConfigError", "ConfigErrorKind", "ErrorCode"]


ConfigErrorKind = Literal[
    "missing_input",
    "invalid_input",
    "invalid_env",
    "unknown_variant",
    "file_not_found",
    "invalid_file",
    "io_failed",
]


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Missing or invalid build input."""

    kind: ConfigErrorKind
    message: str
    path: Path | None = None
    hint: str | None = None


class ErrorCode(IntEnum):
    """Exit codes for CLI commands."""

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    IO_ERROR = 5

    @classmethod
    def for_error(cls, error: ConfigError) -> ErrorCode:
        match error.kind:
            case "file_not_found" | "io_failed":
                return cls.IO_ERROR
            case "invalid_env":
                return cls.ENV_ERROR
            case _:
                return cls.USER_ERROR
