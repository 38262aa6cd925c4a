"""Turn composed coverage into a :class:`CoberturaDocument`."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from alcov._meta import logger
from alcov.core.model.cobertura import (
    CoberturaClass,
    CoberturaDocument,
    CoberturaLine,
    CoberturaMethod,
    CoberturaPackage,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from alcov.core.model.coverage import ComposedCoverage, ObjectCoverage
    from alcov.core.model.objects import Procedure


def _class_lines(cov: ObjectCoverage) -> tuple[CoberturaLine, ...]:
    """Return the class ``<lines>``: exactly the source's executable lines.

    Hits recorded on lines the classifier treats as non-executable are
    dropped so that the emitted line set is also the rate denominator.
    """
    hits = cov.hits_by_line()
    if cov.source is None:
        numbers = set(hits)
    else:
        numbers = set(cov.source.executable_line_numbers)
        dropped = sorted(set(hits) - numbers)
        if dropped:
            logger.debug("%s: ignoring hits on non-executable line(s) %s", cov.key, dropped)
    return tuple(CoberturaLine(number=n, hits=hits.get(n, 0)) for n in sorted(numbers))


def _methods(procedures: Sequence[Procedure], lines: Sequence[CoberturaLine]) -> tuple[CoberturaMethod, ...]:
    out: list[CoberturaMethod] = []
    for proc in procedures:
        inside = tuple(ln for ln in lines if proc.contains(ln.number))
        if not inside:
            continue
        out.append(CoberturaMethod(name=proc.name, lines=inside))
    return tuple(out)


def build_class(cov: ObjectCoverage) -> CoberturaClass:
    """Build one ``<class>``; method detail is only produced when procedures are known."""
    lines = _class_lines(cov)
    source = cov.source
    if source is None:
        msg = f"{cov.key} has no source file and cannot be reported as a class"
        raise ValueError(msg)
    if not source.procedures:
        logger.debug("%s: no procedures recovered; emitting class lines only", source.relative_path)
    return CoberturaClass(
        name=cov.key,
        filename=source.relative_path.replace("\\", "/"),
        lines=lines,
        methods=_methods(source.procedures, lines),
    )


def build_document(
    composed: ComposedCoverage,
    *,
    package_name: str,
    sources: Sequence[str] = (),
    timestamp: int | None = None,
) -> CoberturaDocument:
    """Build the report document; objects without a source never become classes."""
    classes = tuple(build_class(cov) for cov in composed.matched.values() if cov.source is not None)
    return CoberturaDocument(
        timestamp=int(time.time()) if timestamp is None else timestamp,
        sources=tuple(s.replace("\\", "/") for s in sources),
        packages=(CoberturaPackage(name=package_name, classes=classes),),
    )


__all__ = ["build_class", "build_document"]
