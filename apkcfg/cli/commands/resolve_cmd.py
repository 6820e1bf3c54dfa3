from __future__ import annotations

from pathlib import Path

import typer

from apkcfg.cli.commands._helpers import unwrap_or_exit
from apkcfg.cli.context import CLIContext, build_context
from apkcfg.core.descriptor import to_manifest_placeholders
from apkcfg.core.result import Ok
from apkcfg.services.resolve import (
    OutputFormat,
    ResolveInputs,
    ResolveOverrides,
    build_time,
    load_inputs,
    plan_build,
    render_plan,
    resolve_descriptor,
    write_plan,
)


def _load(
    ctx: CLIContext,
    *,
    config: Path | None,
    properties: Path | None,
    overrides: ResolveOverrides,
    now: int | None,
) -> tuple[ResolveInputs, int]:
    inputs = unwrap_or_exit(
        load_inputs(
            project_dir=ctx.project_dir,
            config_path=config,
            properties_path=properties,
            overrides=overrides,
        ),
        ctx,
    )
    built_at = unwrap_or_exit(Ok(now) if now is not None else build_time(), ctx)
    return inputs, built_at


def resolve(
    project: Path | None = typer.Option(
        None, "--project", "-C", help="Android project directory (default: cwd)"
    ),
    config: Path | None = typer.Option(None, "--config", help="Path to apkcfg.toml"),
    properties: Path | None = typer.Option(
        None, "--properties", help="Path to Flutter local.properties"
    ),
    variant: str | None = typer.Option(None, "--variant", help="Variant: compat|hardened"),
    application_id: str | None = typer.Option(None, "--application-id", help="Package id"),
    version_name: str | None = typer.Option(None, "--version-name", help="e.g. 1.2.3"),
    min_sdk: int | None = typer.Option(None, "--min-sdk", help="Minimum API level"),
    target_sdk: int | None = typer.Option(None, "--target-sdk", help="Target API level"),
    compile_sdk: int | None = typer.Option(
        None, "--compile-sdk", help="Compile API level (default: target)"
    ),
    now: int | None = typer.Option(
        None, "--now", help="Build time in epoch seconds (default: SOURCE_DATE_EPOCH or clock)"
    ),
    fmt: OutputFormat = typer.Option(OutputFormat.PROPERTIES, "--format", "-f"),
    out: Path | None = typer.Option(None, "--out", "-o", help="Write to file instead of stdout"),
) -> None:
    """Resolve the build descriptor for the packaging step."""
    ctx = build_context(project)
    inputs, built_at = _load(
        ctx,
        config=config,
        properties=properties,
        overrides=ResolveOverrides(
            application_id=application_id,
            version_name=version_name,
            min_sdk=min_sdk,
            target_sdk=target_sdk,
            compile_sdk=compile_sdk,
            variant=variant,
        ),
        now=now,
    )
    plan = unwrap_or_exit(plan_build(inputs, built_at), ctx)

    if out is None:
        typer.echo(render_plan(plan, fmt), nl=False)
        return

    path = unwrap_or_exit(write_plan(plan, out, fmt), ctx)
    ctx.console.success(str(path))
    ctx.console.info(
        f"{plan.descriptor.version_name} ({plan.descriptor.version_code}), "
        f"variant {plan.variant.name}",
    )


def placeholders(
    project: Path | None = typer.Option(
        None, "--project", "-C", help="Android project directory (default: cwd)"
    ),
    config: Path | None = typer.Option(None, "--config", help="Path to apkcfg.toml"),
    properties: Path | None = typer.Option(
        None, "--properties", help="Path to Flutter local.properties"
    ),
    version_name: str | None = typer.Option(None, "--version-name", help="e.g. 1.2.3"),
    min_sdk: int | None = typer.Option(None, "--min-sdk", help="Minimum API level"),
    target_sdk: int | None = typer.Option(None, "--target-sdk", help="Target API level"),
    now: int | None = typer.Option(None, "--now", help="Build time in epoch seconds"),
) -> None:
    """Print the manifest placeholders (APP_VERSION, BUILD_NUMBER)."""
    ctx = build_context(project)
    inputs, built_at = _load(
        ctx,
        config=config,
        properties=properties,
        overrides=ResolveOverrides(
            version_name=version_name, min_sdk=min_sdk, target_sdk=target_sdk
        ),
        now=now,
    )
    descriptor = unwrap_or_exit(resolve_descriptor(inputs, built_at), ctx)
    for key, value in to_manifest_placeholders(descriptor).items():
        typer.echo(f"{key}={value}")
