from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

import typer

from alcov.cli.exit_codes import EXIT_DATAERR, EXIT_GENERIC, EXIT_NOINPUT
from alcov.core.pipeline import DataError, NoInputError, PipelineError, SystemIOError

if TYPE_CHECKING:
    from collections.abc import Callable

_T = TypeVar("_T")


def resolve_use_color(*, color: bool | None, color_allowed: bool) -> bool:
    # An explicit --color/--no-color wins over terminal detection.
    if color is None:
        return color_allowed
    return color


def exit_code_for(exc: PipelineError) -> int:
    if isinstance(exc, NoInputError | SystemIOError):
        return EXIT_NOINPUT
    if isinstance(exc, DataError):
        return EXIT_DATAERR
    return EXIT_GENERIC


def run_pipeline(fn: Callable[[], _T]) -> _T:
    """Call *fn*, turning pipeline errors into an error line and a sysexits code."""
    try:
        return fn()
    except PipelineError as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(code=exit_code_for(exc)) from exc


__all__ = ["exit_code_for", "resolve_use_color", "run_pipeline"]
