"""Error presentation for the CLI."""

from __future__ import annotations

from typing import TYPE_CHECKING

from apkcfg.core.errors import ConfigError, ErrorCode
from apkcfg.output.console import Style

if TYPE_CHECKING:
    from apkcfg.output.console import ConsoleProtocol

__all__ = ["print_config_error", "config_error_exit_code"]


def print_config_error(error: ConfigError, console: ConsoleProtocol) -> None:
    match error:
        case ConfigError(kind="invalid_file", path=path) if path is not None:
            console.error(error.message)
            console.print(f"in: {path}", Style.DIM)
        case _:
            console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def config_error_exit_code(error: ConfigError) -> int:
    return int(ErrorCode.for_error(error))
