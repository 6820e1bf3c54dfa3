from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from apkcfg.core.errors import ErrorCode
from apkcfg.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    project_dir: Path
    console: ConsoleProtocol


def build_context(project_dir: Path | None = None) -> CLIContext:
    """Context for a command run against ``project_dir`` (default: cwd)."""
    root = (project_dir or Path.cwd()).expanduser()
    if not root.is_dir():
        typer.echo(f"error: project directory not found: {root}", err=True)
        raise typer.Exit(code=int(ErrorCode.IO_ERROR))

    return CLIContext(project_dir=root.resolve(), console=RichConsole())
