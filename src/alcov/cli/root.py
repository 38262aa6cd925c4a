from __future__ import annotations

import logging
from typing import Annotated

import typer
from typer.main import get_command

from alcov import __version__
from alcov.cli import convert, merge, results
from alcov.core.config import LOG_FORMAT


def _configure_logging(*, quiet: bool, verbose: bool) -> None:
    level = logging.ERROR if quiet else (logging.DEBUG if verbose else logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)


def _show_version(value: bool) -> None:
    if value:
        typer.echo(f"alcov {__version__}")
        raise typer.Exit


def create_app() -> typer.Typer:
    app = typer.Typer(help="Convert AL test-run coverage and results into Cobertura, JUnit and XUnit reports.")

    @app.callback()
    def _root(
        *,
        version: Annotated[
            bool,
            typer.Option("--version", help="Show version and exit", callback=_show_version, is_eager=True),
        ] = False,
        verbose: Annotated[
            bool,
            typer.Option("--verbose", "-v", help="Log debug details."),
        ] = False,
        quiet: Annotated[
            bool,
            typer.Option("--quiet", "-q", help="Only log errors."),
        ] = False,
    ) -> None:
        _configure_logging(quiet=quiet, verbose=verbose)

    convert.register(app)
    merge.register(app)
    results.register(app)

    return app


def main() -> None:
    app = create_app()
    get_command(app)()


# Click-compatible object for tooling that imports it
cli = get_command(create_app())

__all__ = ["cli", "create_app", "main"]
