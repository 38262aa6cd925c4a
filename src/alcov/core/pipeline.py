"""End-to-end operations behind the CLI commands.

Each function takes fully resolved inputs, performs one batch transformation
and translates library errors into :class:`PipelineError` subclasses that the
CLI maps to exit codes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from jsonschema import ValidationError

from alcov._meta import logger
from alcov.al.scanner import scan_sources
from alcov.engine.cobertura import build_document
from alcov.engine.compose import compose
from alcov.engine.merge import merge_documents
from alcov.engine.stats import build_stats, merge_stats, read_stats, render_stats, stats_path
from alcov.errors import (
    CoberturaXMLError,
    CoverageDumpNotFoundError,
    EmptyCoverageDumpError,
    InvalidCoberturaXMLError,
    NoMergeInputError,
    SourceRootNotFoundError,
    TestResultsError,
)
from alcov.inputs.cobertura import read_document
from alcov.inputs.discover import resolve_dump_paths
from alcov.inputs.dump import group_entries, parse_dump_files
from alcov.inputs.metadata import read_app_metadata
from alcov.inputs.results import read_results
from alcov.io import write_atomic
from alcov.render.cobertura import render_cobertura
from alcov.render.junit import ReportFormat, render_report

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from alcov.core.config import ConversionOptions
    from alcov.core.model.cobertura import CoberturaDocument


class PipelineError(Exception):
    """Base class for errors emitted by the pipeline."""


class NoInputError(PipelineError):
    """A required input was missing or could not be discovered."""


class DataError(PipelineError):
    """Input data is malformed or empty."""


class SystemIOError(PipelineError):
    """Filesystem IO error while reading inputs or writing reports."""


class UnexpectedError(PipelineError):
    """Unexpected failure while converting or rendering."""


@dataclass(frozen=True, slots=True)
class ReportResult:
    """What a conversion or merge produced; ``inputs`` are the files that contributed."""

    document: CoberturaDocument
    stats: dict[str, Any]
    output: Path
    stats_output: Path
    inputs: tuple[Path, ...] = ()


def _package_name(options: ConversionOptions, app_name: str | None) -> str:
    if app_name:
        return app_name
    return options.source_root.resolve().name


def _write_report(
    document: CoberturaDocument,
    stats: dict[str, Any],
    output: Path,
    inputs: Sequence[Path],
) -> ReportResult:
    sidecar = stats_path(output)
    write_atomic(output, render_cobertura(document))
    write_atomic(sidecar, render_stats(stats))
    logger.info("Wrote %s and %s", output, sidecar)
    return ReportResult(document=document, stats=stats, output=output, stats_output=sidecar, inputs=tuple(inputs))


def convert_coverage(options: ConversionOptions) -> ReportResult:
    """Convert raw coverage dumps plus AL sources into Cobertura XML and a stats sidecar."""
    try:
        dumps = resolve_dump_paths(options.dump_paths)
        entries = parse_dump_files(dumps)
        if not entries:
            msg = f"no coverage entries found in {', '.join(str(p) for p in dumps) or 'the given inputs'}"
            raise EmptyCoverageDumpError(msg)

        catalogue = scan_sources(options.source_root, options.source_paths)
        composed = compose(
            group_entries(entries),
            catalogue,
            exclude_test_objects=options.exclude_test_objects,
        )

        app = read_app_metadata(options.app_json)
        root = str(options.source_root.resolve())
        document = build_document(
            composed,
            package_name=_package_name(options, app.name if app is not None else None),
            sources=(root,),
            timestamp=options.timestamp,
        )
        stats = build_stats(composed, source_paths=(root,), app=app)
        return _write_report(document, stats, options.output, dumps)
    except (CoverageDumpNotFoundError, SourceRootNotFoundError) as exc:
        raise NoInputError(str(exc)) from exc
    except (EmptyCoverageDumpError, ValidationError) as exc:
        raise DataError(str(exc)) from exc
    except OSError as exc:
        raise SystemIOError(str(exc)) from exc
    except Exception as exc:
        logger.exception("unexpected failure")
        raise UnexpectedError(str(exc)) from exc


def _read_merge_inputs(paths: Sequence[Path]) -> list[tuple[Path, CoberturaDocument]]:
    documents: list[tuple[Path, CoberturaDocument]] = []
    for path in paths:
        try:
            documents.append((path, read_document(path)))
        except InvalidCoberturaXMLError as exc:
            logger.warning("Skipping invalid Cobertura report %s: %s", path, exc)
        except OSError as exc:
            logger.warning("Skipping unreadable Cobertura report %s: %s", path, exc)
    if not documents:
        shown = ", ".join(str(p) for p in paths) or "(none)"
        msg = f"no valid Cobertura report to merge among: {shown}"
        raise NoMergeInputError(msg)
    return documents


def merge_reports(paths: Sequence[Path], output: Path, *, timestamp: int | None = None) -> ReportResult:
    """Merge Cobertura reports (and their stats sidecars) into *output*."""
    try:
        inputs = _read_merge_inputs(paths)
        document = merge_documents((doc for _, doc in inputs), timestamp=timestamp)
        sidecars = [s for s in (read_stats(stats_path(p)) for p, _ in inputs) if s is not None]
        stats = merge_stats(document, sidecars)
        logger.info("Merged %d of %d report(s)", len(inputs), len(paths))
        return _write_report(document, stats, output, [p for p, _ in inputs])
    except NoMergeInputError as exc:
        raise NoInputError(str(exc)) from exc
    except (CoberturaXMLError, ValidationError) as exc:
        raise DataError(str(exc)) from exc
    except OSError as exc:
        raise SystemIOError(str(exc)) from exc
    except Exception as exc:
        logger.exception("unexpected failure")
        raise UnexpectedError(str(exc)) from exc


def format_results(
    paths: Sequence[Path],
    *,
    junit: Path | None = None,
    xunit: Path | None = None,
    append: bool = False,
    hostname: str | None = None,
) -> list[Path]:
    """Write JUnit and/or XUnit reports for test-runner result files."""
    targets = [(fmt, out) for fmt, out in ((ReportFormat.JUNIT, junit), (ReportFormat.XUNIT, xunit)) if out]
    written: list[Path] = []
    try:
        missing = [p for p in paths if not p.is_file()]
        if missing:
            msg = f"test results not found: {', '.join(str(p) for p in missing)}"
            raise NoInputError(msg)
        results = read_results(paths)
        for fmt, out in targets:
            text = render_report(results, fmt, existing=out if append else None, hostname=hostname)
            written.append(write_atomic(out, text))
            logger.info("Wrote %s report %s (%d codeunit(s))", fmt.value, out, len(results))
    except PipelineError:
        raise
    except TestResultsError as exc:
        raise DataError(str(exc)) from exc
    except OSError as exc:
        raise SystemIOError(str(exc)) from exc
    except Exception as exc:
        logger.exception("unexpected failure")
        raise UnexpectedError(str(exc)) from exc
    return written


__all__ = [
    "DataError",
    "NoInputError",
    "PipelineError",
    "ReportResult",
    "SystemIOError",
    "UnexpectedError",
    "convert_coverage",
    "format_results",
    "merge_reports",
]
