from __future__ import annotations

from apkcfg.cli.commands._helpers import unwrap_or_exit
from apkcfg.cli.context import build_context
from apkcfg.core.variants import DEFAULT_VARIANT, available_variants, get_variant


def variants() -> None:
    """List build variants and their release settings."""
    ctx = build_context()

    rows: list[list[str]] = []
    for name in available_variants():
        v = unwrap_or_exit(get_variant(name), ctx)
        label = f"{name} (default)" if name == DEFAULT_VARIANT else name
        rows.append(
            [
                label,
                v.toolchain.source_compatibility,
                "yes" if v.minify_enabled else "no",
                ", ".join(v.release_shrink_rules) or "-",
                v.signing_config,
            ]
        )

    ctx.console.table("Variants", ["variant", "java", "minify", "shrink rules", "signing"], rows)
