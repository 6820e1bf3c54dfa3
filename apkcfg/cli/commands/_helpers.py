"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn, TypeVar

import typer

from apkcfg.core.errors import ConfigError
from apkcfg.core.result import Err, Result
from apkcfg.output.errors import config_error_exit_code, print_config_error

T = TypeVar("T")

if TYPE_CHECKING:
    from apkcfg.cli.context import CLIContext


def unwrap_or_exit(result: Result[T, ConfigError], ctx: CLIContext) -> T:
    """Return the Ok value, or report the error and exit.

    Replaces the pattern repeated in every command:
        if isinstance(result, Err):
            print_config_error(result.error, ctx.console)
            raise typer.Exit(code=config_error_exit_code(result.error))
        value = result.value
    """
    if isinstance(result, Err):
        exit_with_error(result.error, ctx)
    return result.value


def exit_with_error(error: ConfigError, ctx: CLIContext) -> NoReturn:
    print_config_error(error, ctx.console)
    raise typer.Exit(code=config_error_exit_code(error))
