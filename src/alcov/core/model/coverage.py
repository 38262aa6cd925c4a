"""Coverage-side model: dump entries, per-object coverage and composed results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from alcov.core.model.objects import object_key

if TYPE_CHECKING:
    from alcov.core.model.objects import ObjectType, SourceObject


@dataclass(frozen=True, slots=True)
class CoverageEntry:
    """One line-hit record from a raw coverage dump."""

    object_type: ObjectType
    object_id: int
    line_no: int
    hits: int

    @property
    def is_covered(self) -> bool:
        return self.hits > 0

    @property
    def key(self) -> str:
        return object_key(self.object_type, self.object_id)


@dataclass(frozen=True, slots=True)
class ObjectCoverage:
    """Coverage lines of one object, optionally joined with its source.

    ``lines`` holds at most one entry per line number, ordered by line.
    """

    object_type: ObjectType
    object_id: int
    lines: tuple[CoverageEntry, ...] = ()
    source: SourceObject | None = None

    @property
    def key(self) -> str:
        return object_key(self.object_type, self.object_id)

    @property
    def is_excluded(self) -> bool:
        return self.source is None

    def hits_by_line(self) -> dict[int, int]:
        return {e.line_no: e.hits for e in self.lines}

    def line_counts(self) -> tuple[int, int]:
        """Return ``(covered, valid)`` for this object.

        With a source attached only its executable lines count; hits on
        other lines (signatures, ``begin``) are ignored. Without a source the
        recorded lines are the line set.
        """
        if self.source is None:
            return sum(1 for e in self.lines if e.is_covered), len(self.lines)
        executable = self.source.executable_line_numbers
        covered = sum(1 for e in self.lines if e.is_covered and e.line_no in executable)
        return covered, len(executable)


@dataclass(frozen=True, slots=True)
class ExcludedObject:
    """Executed object without a matching source file."""

    object_type: ObjectType
    object_id: int
    lines_executed: int
    total_hits: int

    @classmethod
    def from_coverage(cls, cov: ObjectCoverage) -> ExcludedObject:
        return cls(
            object_type=cov.object_type,
            object_id=cov.object_id,
            lines_executed=sum(1 for e in cov.lines if e.is_covered),
            total_hits=sum(e.hits for e in cov.lines),
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "ObjectType": self.object_type.value,
            "ObjectId": self.object_id,
            "LinesExecuted": self.lines_executed,
            "TotalHits": self.total_hits,
        }


@dataclass(frozen=True, slots=True)
class CoverageTotals:
    total_lines: int = 0
    covered_lines: int = 0

    @property
    def not_covered_lines(self) -> int:
        return self.total_lines - self.covered_lines

    @property
    def percent(self) -> float:
        if not self.total_lines:
            return 0.0
        return round(100.0 * self.covered_lines / self.total_lines, 2)

    @property
    def line_rate(self) -> float:
        return line_rate(self.covered_lines, self.total_lines)


@dataclass(slots=True)
class ComposedCoverage:
    """Objects ready for reporting plus the executed objects with no source."""

    matched: dict[str, ObjectCoverage] = field(default_factory=dict)
    excluded: list[ExcludedObject] = field(default_factory=list)

    @property
    def totals(self) -> CoverageTotals:
        covered = valid = 0
        for cov in self.matched.values():
            c, v = cov.line_counts()
            covered += c
            valid += v
        return CoverageTotals(total_lines=valid, covered_lines=covered)

    @property
    def excluded_lines_executed(self) -> int:
        return sum(e.lines_executed for e in self.excluded)

    @property
    def excluded_total_hits(self) -> int:
        return sum(e.total_hits for e in self.excluded)


def line_rate(covered: int, valid: int) -> float:
    """Return ``covered / valid`` rounded to 4 decimals, 0 when nothing is valid.

    A non-zero covered count never rounds down to 0.
    """
    if valid <= 0 or covered <= 0:
        return 0.0
    return min(1.0, max(round(covered / valid, 4), 0.0001))


__all__ = [
    "ComposedCoverage",
    "CoverageEntry",
    "CoverageTotals",
    "ExcludedObject",
    "ObjectCoverage",
    "line_rate",
]
