"""Join dump coverage with the source catalogue."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from alcov._meta import logger
from alcov.core.model.coverage import ComposedCoverage, ExcludedObject, ObjectCoverage

if TYPE_CHECKING:
    from collections.abc import Mapping

    from alcov.core.model.objects import SourceObject


def compose(
    covered: Mapping[str, ObjectCoverage],
    catalogue: Mapping[str, SourceObject],
    *,
    exclude_test_objects: bool = False,
) -> ComposedCoverage:
    """Attach sources to covered objects and add never-executed source objects.

    * covered with a source   -> ``matched`` with ``source`` attached
    * covered without source  -> ``excluded`` (aggregate statistics only)
    * source never covered    -> ``matched`` with no lines (reported at 0%)

    Test codeunits are dropped entirely when *exclude_test_objects* is set.
    """
    result = ComposedCoverage()

    def skip(source: SourceObject | None) -> bool:
        return exclude_test_objects and source is not None and source.is_test_object

    for key, cov in covered.items():
        source = catalogue.get(key)
        if skip(source):
            continue
        if source is None:
            result.excluded.append(ExcludedObject.from_coverage(cov))
            continue
        result.matched[key] = replace(cov, source=source)

    for key, source in catalogue.items():
        if key in result.matched or skip(source):
            continue
        result.matched[key] = ObjectCoverage(
            object_type=source.object_type,
            object_id=source.object_id,
            source=source,
        )

    result.matched = dict(sorted(result.matched.items(), key=lambda kv: _sort_key(kv[1])))
    result.excluded.sort(key=lambda e: (e.object_type.value, e.object_id))

    if result.excluded:
        logger.info(
            "%d executed object(s) have no source in the catalogue (%d line(s) executed)",
            len(result.excluded),
            result.excluded_lines_executed,
        )
    return result


def _sort_key(cov: ObjectCoverage) -> tuple[str, str, int]:
    path = cov.source.relative_path if cov.source is not None else ""
    return path, cov.object_type.value, cov.object_id


__all__ = ["compose"]
