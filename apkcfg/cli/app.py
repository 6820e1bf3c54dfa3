from __future__ import annotations

import typer

from apkcfg import __version__
from apkcfg.cli.commands.resolve_cmd import placeholders, resolve
from apkcfg.cli.commands.variants import variants


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(resolve)
app.command()(placeholders)
app.command()(variants)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        callback=_print_version,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Resolve Android build descriptors (version code, placeholders, toolchain)."""


def main() -> None:
    app()
