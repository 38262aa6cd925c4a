"""Coverage statistics sidecar (``<stem>.stats.json``)."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from jsonschema import ValidationError, validate
from more_itertools import unique_everseen

from alcov._meta import logger
from alcov.core.config import get_schema
from alcov.core.model.coverage import CoverageTotals, ExcludedObject
from alcov.core.model.objects import ObjectType, object_key

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from pathlib import Path

    from alcov.core.model.cobertura import CoberturaDocument
    from alcov.core.model.coverage import ComposedCoverage
    from alcov.inputs.metadata import AppMetadata

STATS_SUFFIX = ".stats.json"


def stats_path(xml_path: Path) -> Path:
    """Return the sidecar path belonging to a Cobertura report."""
    return xml_path.with_name(xml_path.stem + STATS_SUFFIX)


def _payload(
    totals: CoverageTotals,
    *,
    object_count: int,
    excluded: Sequence[ExcludedObject],
    source_paths: Iterable[str],
    app: dict[str, str] | None,
) -> dict[str, Any]:
    data: dict[str, Any] = {
        "TotalLines": totals.total_lines,
        "CoveredLines": totals.covered_lines,
        "NotCoveredLines": totals.not_covered_lines,
        "CoveragePercent": totals.percent,
        "LineRate": totals.line_rate,
        "ObjectCount": object_count,
        "ExcludedObjectCount": len(excluded),
        "ExcludedLinesExecuted": sum(e.lines_executed for e in excluded),
        "ExcludedTotalHits": sum(e.total_hits for e in excluded),
        "ExcludedObjects": [e.to_dict() for e in excluded],
        "AppSourcePaths": [str(p).replace("\\", "/") for p in unique_everseen(source_paths)],
    }
    if app is not None:
        data["App"] = app
    validate(data, get_schema("stats"))
    return data


def build_stats(
    composed: ComposedCoverage,
    *,
    source_paths: Iterable[str] = (),
    app: AppMetadata | None = None,
) -> dict[str, Any]:
    """Summarise a single conversion."""
    return _payload(
        composed.totals,
        object_count=len(composed.matched),
        excluded=composed.excluded,
        source_paths=source_paths,
        app=app.to_dict() if app is not None else None,
    )


def read_stats(path: Path) -> dict[str, Any] | None:
    """Read and validate a sidecar; anything unusable is logged and yields ``None``."""
    try:
        data = json.loads(path.read_text(encoding="utf-8-sig"))
        validate(data, get_schema("stats"))
    except FileNotFoundError:
        logger.debug("No stats sidecar at %s", path)
        return None
    except (OSError, ValueError, ValidationError) as exc:
        logger.warning("Ignoring stats sidecar %s: %s", path, exc)
        return None
    return data


def _excluded_from_dict(item: dict[str, Any]) -> ExcludedObject:
    return ExcludedObject(
        object_type=ObjectType.parse(str(item["ObjectType"])),
        object_id=int(item["ObjectId"]),
        lines_executed=int(item["LinesExecuted"]),
        total_hits=int(item["TotalHits"]),
    )


def merge_stats(document: CoberturaDocument, sidecars: Iterable[dict[str, Any]]) -> dict[str, Any]:
    """Combine sidecars for a merged report.

    Totals come from the merged *document*. Excluded objects are unioned by
    ``(ObjectType, ObjectId)`` keeping the larger value of each counter, and
    ``AppSourcePaths`` keep first-seen order. The first ``App`` seen is kept.
    An object reported as a class by any job is no longer excluded.
    """
    excluded: dict[tuple[str, int], ExcludedObject] = {}
    paths: list[str] = []
    app: dict[str, str] | None = None

    for data in sidecars:
        paths.extend(data.get("AppSourcePaths", ()))
        if app is None and isinstance(data.get("App"), dict):
            app = data["App"]
        for item in data.get("ExcludedObjects", ()):
            obj = _excluded_from_dict(item)
            key = (obj.object_type.value, obj.object_id)
            seen = excluded.get(key)
            if seen is not None:
                obj = ExcludedObject(
                    object_type=obj.object_type,
                    object_id=obj.object_id,
                    lines_executed=max(obj.lines_executed, seen.lines_executed),
                    total_hits=max(obj.total_hits, seen.total_hits),
                )
            excluded[key] = obj

    classes = {cls.name for cls in document.iter_classes()}
    excluded = {k: obj for k, obj in excluded.items() if object_key(obj.object_type, obj.object_id) not in classes}

    totals = CoverageTotals(total_lines=document.lines_valid, covered_lines=document.lines_covered)
    return _payload(
        totals,
        object_count=sum(1 for _ in document.iter_classes()),
        excluded=[excluded[k] for k in sorted(excluded)],
        source_paths=paths,
        app=app,
    )


def render_stats(data: dict[str, Any]) -> str:
    return json.dumps(data, indent=2) + "\n"


__all__ = ["STATS_SUFFIX", "build_stats", "merge_stats", "read_stats", "render_stats", "stats_path"]
