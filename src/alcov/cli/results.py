from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from alcov.cli._shared import run_pipeline
from alcov.cli.exit_codes import EXIT_CONFIG, EXIT_OK
from alcov.core.pipeline import format_results


def results_cmd(
    results: Annotated[
        list[Path],
        typer.Argument(help="Test-runner result JSON file(s)."),
    ],
    junit: Annotated[
        Path | None,
        typer.Option("--junit", help="JUnit XML file to write."),
    ] = None,
    xunit: Annotated[
        Path | None,
        typer.Option("--xunit", help="XUnit XML file to write."),
    ] = None,
    append: Annotated[
        bool,
        typer.Option("--append", help="Add to existing report files instead of replacing them."),
    ] = False,
) -> None:
    """Write JUnit and/or XUnit reports from AL test-runner results."""
    if junit is None and xunit is None:
        typer.echo("ERROR: nothing to write (use --junit and/or --xunit)", err=True)
        raise typer.Exit(code=EXIT_CONFIG)

    written = run_pipeline(lambda: format_results(tuple(results), junit=junit, xunit=xunit, append=append))
    for path in written:
        typer.echo(f"Wrote {path}")
    raise typer.Exit(code=EXIT_OK)


def register(app: typer.Typer) -> None:
    app.command("results")(results_cmd)


__all__ = ["register"]
