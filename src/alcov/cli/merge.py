from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from alcov.cli._shared import run_pipeline
from alcov.cli.exit_codes import EXIT_OK
from alcov.core.pipeline import merge_reports


def merge_cmd(
    reports: Annotated[
        list[Path],
        typer.Argument(help="Cobertura XML reports to merge; their .stats.json sidecars are merged too."),
    ],
    output: Annotated[
        Path,
        typer.Option("--output", "-o", help="Merged Cobertura XML to write."),
    ],
) -> None:
    """Merge Cobertura reports from several jobs, keeping the highest hit count per line."""
    result = run_pipeline(lambda: merge_reports(tuple(reports), output))
    typer.echo(
        f"Merged {len(result.inputs)} of {len(reports)} report(s) into {result.output}: "
        f"{result.stats['CoveredLines']}/{result.stats['TotalLines']} lines ({result.stats['CoveragePercent']}%)"
    )
    raise typer.Exit(code=EXIT_OK)


def register(app: typer.Typer) -> None:
    app.command("merge")(merge_cmd)


__all__ = ["register"]
