"""N-way merge of Cobertura documents."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from more_itertools import unique_everseen

from alcov.core.model.cobertura import CoberturaClass, CoberturaDocument, CoberturaLine, CoberturaPackage

if TYPE_CHECKING:
    from collections.abc import Iterable


@dataclass(slots=True)
class _ClassAcc:
    name: str
    filename: str
    hits: dict[int, int] = field(default_factory=dict)

    def add(self, lines: Iterable[CoberturaLine]) -> None:
        for ln in lines:
            self.hits[ln.number] = max(self.hits.get(ln.number, 0), ln.hits)

    def build(self) -> CoberturaClass:
        lines = tuple(CoberturaLine(number=n, hits=self.hits[n]) for n in sorted(self.hits))
        return CoberturaClass(name=self.name, filename=self.filename, lines=lines)


def merge_documents(documents: Iterable[CoberturaDocument], *, timestamp: int | None = None) -> CoberturaDocument:
    """Union *documents* into one.

    Classes are keyed by ``(filename, name)`` across all packages (a class
    stays in the package it was first seen in) and lines by number within a
    class; a line seen several times keeps the maximum hit count. Rates are
    derived from the merged line sets and method detail is not carried over.
    """
    classes: dict[tuple[str, str], _ClassAcc] = {}
    package_of: dict[tuple[str, str], str] = {}
    package_names: list[str] = []
    sources: list[str] = []

    for doc in documents:
        sources.extend(doc.sources)
        for pkg in doc.packages:
            package_names.append(pkg.name)
            for cls in pkg.classes:
                key = (cls.filename, cls.name)
                acc = classes.get(key)
                if acc is None:
                    acc = classes[key] = _ClassAcc(name=cls.name, filename=cls.filename)
                    package_of[key] = pkg.name
                acc.add(cls.lines)

    merged = tuple(
        CoberturaPackage(
            name=name,
            classes=tuple(classes[key].build() for key in sorted(classes) if package_of[key] == name),
        )
        for name in unique_everseen(package_names)
        if name in package_of.values()
    )
    return CoberturaDocument(
        timestamp=int(time.time()) if timestamp is None else timestamp,
        sources=tuple(unique_everseen(sources)),
        packages=merged,
    )


__all__ = ["merge_documents"]
