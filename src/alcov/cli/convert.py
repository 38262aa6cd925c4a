from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from alcov.cli._shared import resolve_use_color, run_pipeline
from alcov.cli.exit_codes import EXIT_CONFIG, EXIT_OK
from alcov.core.config import DEFAULT_OUTPUT, ConversionOptions, load_settings
from alcov.core.pipeline import convert_coverage
from alcov.io import color_allowed
from alcov.render.summary import render_summary

APP_JSON = "app.json"


def convert_cmd(
    dumps: Annotated[
        list[Path],
        typer.Argument(help="Coverage dump file(s) or directories containing them."),
    ],
    source_root: Annotated[
        Path | None,
        typer.Option("--source-root", "-s", help="Root directory of the AL app sources."),
    ] = None,
    source_path: Annotated[
        list[Path] | None,
        typer.Option("--source-path", help="Only scan these files or folders below the source root (repeatable)."),
    ] = None,
    app_json: Annotated[
        Path | None,
        typer.Option("--app-json", help="app.json used for the package name (default: <source-root>/app.json)."),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Cobertura XML to write; the stats sidecar is written next to it."),
    ] = None,
    exclude_test_objects: Annotated[
        bool | None,
        typer.Option(
            "--exclude-test-objects/--include-test-objects",
            help="Leave test codeunits out of the report.",
            show_default=False,
        ),
    ] = None,
    summary: Annotated[
        bool,
        typer.Option("--summary/--no-summary", help="Print a coverage table after converting."),
    ] = True,
    color: Annotated[
        bool | None,
        typer.Option("--color/--no-color", help="Force or disable colour in the summary.", show_default=False),
    ] = None,
) -> None:
    """Convert raw AL coverage dumps into Cobertura XML."""
    settings = load_settings()

    root = source_root or settings.source_root
    if root is None:
        typer.echo("ERROR: no source root given (use --source-root or set source_root in alcov.toml)", err=True)
        raise typer.Exit(code=EXIT_CONFIG)

    options = ConversionOptions(
        dump_paths=tuple(dumps),
        source_root=root,
        output=output or settings.output or DEFAULT_OUTPUT,
        source_paths=tuple(source_path or settings.source_paths),
        app_json=app_json or settings.app_json or root / APP_JSON,
        exclude_test_objects=settings.exclude_test_objects if exclude_test_objects is None else exclude_test_objects,
    )

    result = run_pipeline(lambda: convert_coverage(options))

    if summary:
        use_color = resolve_use_color(color=color, color_allowed=color_allowed(None))
        typer.echo(
            render_summary(
                result.document,
                excluded_objects=int(result.stats["ExcludedObjectCount"]),
                color=use_color,
            )
        )
    raise typer.Exit(code=EXIT_OK)


def register(app: typer.Typer) -> None:
    app.command("convert")(convert_cmd)


__all__ = ["register"]
