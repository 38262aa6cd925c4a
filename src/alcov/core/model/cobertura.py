"""In-memory Cobertura document shared by the emitter and the merger."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from alcov.core.model.coverage import line_rate

if TYPE_CHECKING:
    from collections.abc import Iterator


@dataclass(frozen=True, slots=True)
class CoberturaLine:
    number: int
    hits: int
    # the AL runtime records statement hits only
    is_branch: bool = False


@dataclass(frozen=True, slots=True)
class CoberturaMethod:
    name: str
    lines: tuple[CoberturaLine, ...]
    signature: str = "()"

    @property
    def lines_covered(self) -> int:
        return sum(1 for ln in self.lines if ln.hits > 0)

    @property
    def lines_valid(self) -> int:
        return len(self.lines)

    @property
    def line_rate(self) -> float:
        return line_rate(self.lines_covered, self.lines_valid)


@dataclass(frozen=True, slots=True)
class CoberturaClass:
    """One class (AL object) element; its lines are its rate denominator."""

    name: str
    filename: str
    lines: tuple[CoberturaLine, ...]
    methods: tuple[CoberturaMethod, ...] = ()

    @property
    def lines_valid(self) -> int:
        return len(self.lines)

    @property
    def lines_covered(self) -> int:
        return sum(1 for ln in self.lines if ln.hits > 0)

    @property
    def line_rate(self) -> float:
        return line_rate(self.lines_covered, self.lines_valid)


@dataclass(frozen=True, slots=True)
class CoberturaPackage:
    name: str
    classes: tuple[CoberturaClass, ...] = ()

    @property
    def lines_valid(self) -> int:
        return sum(c.lines_valid for c in self.classes)

    @property
    def lines_covered(self) -> int:
        return sum(c.lines_covered for c in self.classes)

    @property
    def line_rate(self) -> float:
        return line_rate(self.lines_covered, self.lines_valid)


@dataclass(frozen=True, slots=True)
class CoberturaDocument:
    timestamp: int
    sources: tuple[str, ...] = ()
    packages: tuple[CoberturaPackage, ...] = field(default_factory=tuple)

    @property
    def lines_valid(self) -> int:
        return sum(p.lines_valid for p in self.packages)

    @property
    def lines_covered(self) -> int:
        return sum(p.lines_covered for p in self.packages)

    @property
    def line_rate(self) -> float:
        return line_rate(self.lines_covered, self.lines_valid)

    def iter_classes(self) -> Iterator[CoberturaClass]:
        for package in self.packages:
            yield from package.classes


def format_rate(rate: float) -> str:
    """Render a rate attribute: ``"0"`` for zero, otherwise the rounded value."""
    if rate <= 0:
        return "0"
    return str(round(rate, 4))


__all__ = [
    "CoberturaClass",
    "CoberturaDocument",
    "CoberturaLine",
    "CoberturaMethod",
    "CoberturaPackage",
    "format_rate",
]
